"""Single-shot page fetching and URL validation for Finn.no listings."""

from __future__ import annotations

import logging
import re
from typing import Optional

import requests

from finn_kvittering.config import Settings, get_settings
from finn_kvittering.errors import FetchError, InvalidUrlError


logger = logging.getLogger(__name__)

# Host (with an optional port) must end at a path, query, fragment or the end of the string
FINN_URL_PATTERN = re.compile(r"^https?://(www\.)?finn\.no(?::\d+)?(?:[/?#]|$)", re.IGNORECASE)


def validate_url(url: object) -> str:
    """Return ``url`` unchanged if it points at Finn.no, else raise ``InvalidUrlError``."""
    if not isinstance(url, str) or not url:
        raise InvalidUrlError("URL er påkrevd")
    if not FINN_URL_PATTERN.match(url):
        raise InvalidUrlError("URL må være fra Finn.no")
    return url


def browser_headers(settings: Settings) -> dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Accept": settings.accept,
        "Accept-Language": settings.accept_language,
    }


def fetch_html(
    url: str,
    *,
    timeout: Optional[float] = None,
    settings: Settings | None = None,
) -> str:
    """Fetch page markup with a browser-like request signature.

    A single GET, no retries. Non-2xx responses and transport errors
    (timeouts included) raise ``FetchError``.
    """
    cfg = settings or get_settings()
    wait = timeout if timeout is not None else cfg.fetch_timeout_secs
    try:
        resp = requests.get(url, headers=browser_headers(cfg), timeout=wait)
    except requests.RequestException as e:
        raise FetchError(str(e)) from e
    if not 200 <= resp.status_code < 300:
        raise FetchError(f"HTTP {resp.status_code}")
    logger.debug("Fetched %s (%d bytes)", url, len(resp.content))
    return resp.text
