from __future__ import annotations

from scrapy.utils.log import configure_logging

from finn_kvittering.config import Settings, get_settings


LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def setup_logging(settings: Settings | None = None) -> None:
    """Install the root log handler through Scrapy's logging setup.

    Uses the same ``LOG_LEVEL``/``LOG_FORMAT`` settings a spider would, so
    extraction logs look the same whether they come from the web app or
    the CLI.
    """
    cfg = settings or get_settings()
    configure_logging(
        {
            "LOG_LEVEL": cfg.log_level.upper(),
            "LOG_FORMAT": LOG_FORMAT,
        }
    )
