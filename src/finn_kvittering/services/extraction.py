"""Compose the field extractors into one ``ExtractionResult``.

Fetch and parse failures never reach the caller: they turn the run into a
degraded result (fully shaped, default-filled) plus a warning telling the
user to fill in the form by hand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from scrapy.http import HtmlResponse

from finn_kvittering.config import Settings, get_settings
from finn_kvittering.errors import EXTRACTION_ERRORS, ParseError
from finn_kvittering.models import ExtractionResult
from finn_kvittering.models.listing import today_iso

from .fetcher import fetch_html
from .scraper import (
    MAX_IMAGES,
    extract_description,
    extract_images,
    extract_location,
    extract_title,
    find_date,
    find_price,
    parse_document,
)
from .seller import resolve_seller_name


logger = logging.getLogger(__name__)

DEGRADED_WARNING = (
    "Kunne ikke hente data automatisk fra annonsen. Dette kan skyldes at annonsen "
    "krever innlogging eller at scraping er blokkert. Du kan fylle ut feltene manuelt."
)

# Non-fatal: the field keeps its default and the user fills it in
FIELD_WARNINGS = {
    "title": "Fant ikke tittel i annonsen.",
    "price": "Fant ikke pris i annonsen.",
    "date": "Fant ikke publiseringsdato i annonsen; dagens dato er brukt.",
    "sellerName": "Fant ikke selgerens navn i annonsen.",
}

# Receives (url, raw markup) right after a successful fetch
DebugSink = Callable[[str, str], None]


class ExtractionState(str, Enum):
    FETCHING = "fetching"
    PARSING = "parsing"
    EXTRACTING = "extracting"
    ASSEMBLED = "assembled"
    DEGRADED = "degraded"


@dataclass
class ExtractionOutcome:
    result: ExtractionResult
    warnings: List[str] = field(default_factory=list)
    state: ExtractionState = ExtractionState.ASSEMBLED

    @property
    def degraded(self) -> bool:
        return self.state is ExtractionState.DEGRADED


def field_warnings(result: ExtractionResult, *, price_found: bool, date_found: bool) -> list[str]:
    """Warnings for key fields the page did not yield, in form order."""
    missing = (
        ("title", not result.title),
        ("price", not price_found),
        ("date", not date_found),
        ("sellerName", not result.seller_name),
    )
    return [FIELD_WARNINGS[key] for key, absent in missing if absent]


def extract_from_document(
    doc: HtmlResponse,
    source_url: str,
    settings: Settings | None = None,
) -> ExtractionOutcome:
    cfg = settings or get_settings()
    price = find_price(doc)
    published = find_date(doc)
    result = ExtractionResult(
        title=extract_title(doc),
        price=price or 0,
        description=extract_description(doc),
        date=published or today_iso(),
        location=extract_location(doc),
        images=extract_images(doc, base_url=cfg.base_url, limit=min(cfg.max_images, MAX_IMAGES)),
        seller_name=resolve_seller_name(doc),
        source_url=source_url,
    )
    warnings = field_warnings(result, price_found=price is not None, date_found=published is not None)
    return ExtractionOutcome(result=result, warnings=warnings)


def extract_from_html(url: str, html: str, *, settings: Settings | None = None) -> ExtractionOutcome:
    """Extract from markup already in hand. Raises ``ParseError`` on empty markup."""
    return extract_from_document(parse_document(url, html), url, settings)


def _run_sink(sink: DebugSink, url: str, html: str) -> None:
    try:
        sink(url, html)
    except Exception:  # noqa: BLE001
        logger.exception("Debug sink failed for %s", url)


def extract_listing(
    url: str,
    *,
    timeout: Optional[float] = None,
    debug_sink: Optional[DebugSink] = None,
    settings: Settings | None = None,
) -> ExtractionOutcome:
    """Fetch ``url`` and extract its fields, degrading instead of failing."""
    cfg = settings or get_settings()
    state = ExtractionState.FETCHING
    try:
        html = fetch_html(url, timeout=timeout, settings=cfg)
        if debug_sink is not None:
            _run_sink(debug_sink, url, html)
        state = ExtractionState.PARSING
        try:
            doc = parse_document(url, html)
            state = ExtractionState.EXTRACTING
            outcome = extract_from_document(doc, url, cfg)
        except ParseError:
            raise
        except Exception as e:  # noqa: BLE001
            # Any failure before assembly degrades
            logger.debug("Unexpected %s failure for %s", state.value, url, exc_info=True)
            raise ParseError(f"{type(e).__name__}: {e}") from e
    except EXTRACTION_ERRORS as e:
        logger.warning("Extraction degraded for %s while %s: %s", url, state.value, e)
        return ExtractionOutcome(
            result=ExtractionResult.empty(url),
            warnings=[DEGRADED_WARNING],
            state=ExtractionState.DEGRADED,
        )
    logger.debug("Extraction assembled for %s", url)
    return outcome
