"""Print voucher HTML to PDF with headless Chrome driven by Selenium."""

from __future__ import annotations

import base64
import logging
import time
from typing import Any, Callable, Optional

from finn_kvittering.config import Settings, get_settings
from finn_kvittering.errors import RenderError


logger = logging.getLogger(__name__)

CHROME_ARGS = (
    "--headless=new",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    # A4 at 96 DPI
    "--window-size=794,1123",
)


class ChromePdfRenderer:
    """Render an HTML document to A4 PDF bytes.

    A fresh browser is started per document and always quit afterwards,
    on success and on error.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        driver_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._driver_factory = driver_factory or self._start_chrome

    def _start_chrome(self) -> Any:
        from selenium import webdriver  # type: ignore[import-not-found]
        from selenium.webdriver.chrome.options import Options  # type: ignore[import-not-found]

        options = Options()
        for arg in CHROME_ARGS:
            options.add_argument(arg)
        if self.settings.chrome_binary:
            options.binary_location = self.settings.chrome_binary
        return webdriver.Chrome(options=options)

    @staticmethod
    def _print_options() -> Any:
        from selenium.webdriver.common.print_page_options import PrintOptions  # type: ignore[import-not-found]

        opts = PrintOptions()
        opts.page_width = 21.0
        opts.page_height = 29.7
        opts.margin_top = 0
        opts.margin_bottom = 0
        opts.margin_left = 0
        opts.margin_right = 0
        opts.background = True
        return opts

    def render(self, html: str) -> bytes:
        try:
            driver = self._driver_factory()
        except Exception as e:  # noqa: BLE001
            raise RenderError(f"Could not start browser: {e}") from e
        try:
            driver.set_page_load_timeout(self.settings.pdf_page_load_timeout_secs)
            payload = base64.b64encode(html.encode("utf-8")).decode("ascii")
            # get() returns after the load event
            driver.get(f"data:text/html;charset=utf-8;base64,{payload}")
            if self.settings.pdf_render_delay_secs > 0:
                time.sleep(self.settings.pdf_render_delay_secs)
            encoded = driver.print_page(self._print_options())
            return base64.b64decode(encoded)
        except Exception as e:  # noqa: BLE001
            raise RenderError(f"{type(e).__name__}: {e}") from e
        finally:
            try:
                driver.quit()
            except Exception:  # noqa: BLE001
                logger.debug("Browser did not quit cleanly", exc_info=True)


def render_pdf(html: str, settings: Settings | None = None) -> bytes:
    return ChromePdfRenderer(settings).render(html)
