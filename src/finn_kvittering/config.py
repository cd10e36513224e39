from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class Settings:
    """Runtime settings, defaulting to environment variables."""

    base_url: str = os.environ.get("FINN_BASE_URL", "https://www.finn.no")
    user_agent: str = os.environ.get("HTTP_USER_AGENT", DEFAULT_USER_AGENT)
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    accept_language: str = os.environ.get("HTTP_ACCEPT_LANGUAGE", "no-NO,no;q=0.9")
    fetch_timeout_secs: float = float(os.environ.get("FETCH_TIMEOUT_SECS", "15"))
    max_images: int = int(os.environ.get("MAX_IMAGES", "5"))
    log_level: str = os.environ.get("LOG_LEVEL", "INFO")
    pdf_page_load_timeout_secs: float = float(os.environ.get("PDF_PAGE_LOAD_TIMEOUT_SECS", "30"))
    # Extra settle time after the load event before printing
    pdf_render_delay_secs: float = float(os.environ.get("PDF_RENDER_DELAY_SECS", "0.5"))
    chrome_binary: Optional[str] = os.environ.get("CHROME_BINARY")


def get_settings() -> Settings:
    return Settings()
