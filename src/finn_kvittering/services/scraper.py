"""Field extraction from Finn.no listing markup, built on Scrapy selectors.

Every extractor takes a parsed ``HtmlResponse`` and walks an ordered chain
of strategies, returning the first non-empty value. A missing field is
never an error: extractors fall back to an empty default.
"""

from __future__ import annotations

import re
from datetime import date
from itertools import islice
from typing import Callable, Iterable, Optional
from urllib.parse import urljoin

from scrapy.http import HtmlResponse

from finn_kvittering.errors import ParseError


FINN_BASE_URL = "https://www.finn.no"
MAX_IMAGES = 5

TextStrategy = Callable[[HtmlResponse], str]

_WS_RE = re.compile(r"\s+")
# Digit groups separated by (narrow) no-break spaces or plain spaces, right before "kr"
_KR_PRICE_RE = re.compile(r"(\d{1,3}(?:[ \u00a0\u202f]\d{3})+|\d+)\s*kr", re.IGNORECASE)
_BARE_DIGITS_RE = re.compile(r"(\d[\d \u00a0\u202f]*)")
_HAS_KR_PRICE_RE = re.compile(r"\d+\s*kr", re.IGNORECASE)

_ISO_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_NUMERIC_DATE_RE = re.compile(r"\b(\d{1,2})\.(\d{1,2})\.(\d{4})\b")
_NAMED_DATE_RE = re.compile(r"\b(\d{1,2})\.?\s*([a-zæøå]{3,})\.?\s+(\d{4})\b", re.IGNORECASE)
MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "mai": 5, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "okt": 10, "oct": 10, "nov": 11, "des": 12, "dec": 12,
}


def parse_document(url: str, html: str) -> HtmlResponse:
    """Wrap raw markup in an ``HtmlResponse`` bound to ``url``."""
    if not html or not html.strip():
        raise ParseError("empty document")
    try:
        doc = HtmlResponse(url=url, body=html, encoding="utf-8")
        root = doc.xpath("/html")
    except Exception as e:  # noqa: BLE001
        raise ParseError(f"{type(e).__name__}: {e}") from e
    if not root:
        raise ParseError("document has no root element")
    return doc


def normalize_text(text: Optional[str]) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return _WS_RE.sub(" ", text or "").strip()


def css_text(query: str, index: Optional[int] = None) -> TextStrategy:
    """Strategy returning the text of all nodes matching ``query``.

    With ``index`` only that node is used (``0`` first, ``-1`` last).
    """

    def locate(doc: HtmlResponse) -> str:
        nodes = doc.css(query)
        if index is not None:
            nodes = nodes[index:][:1]
        return "".join(nodes.xpath(".//text()").getall())

    return locate


def first_text(doc: HtmlResponse, chain: Iterable[TextStrategy]) -> str:
    candidates = (strategy(doc).strip() for strategy in chain)
    return next((text for text in candidates if text), "")


# ---------- Title ----------

TITLE_CHAIN: tuple[TextStrategy, ...] = (
    css_text('h1[data-testid="ad-title"]'),
    css_text("h1", 0),
    css_text("title"),
)


def extract_title(doc: HtmlResponse) -> str:
    return normalize_text(first_text(doc, TITLE_CHAIN))


# ---------- Price ----------


def price_leaf_text(doc: HtmlResponse) -> str:
    """Text of the first leaf element that looks like ``<number> kr``."""
    leaves = doc.xpath("//body//*[not(*)][not(self::script or self::style)]")
    texts = ("".join(leaf.xpath("text()").getall()) for leaf in leaves)
    return next((t for t in texts if _HAS_KR_PRICE_RE.search(t)), "")


PRICE_CHAIN: tuple[TextStrategy, ...] = (
    css_text('h2[data-testid="price"]'),
    css_text('[data-testid="price"]'),
    css_text(".u-t3"),
    css_text(".h2"),
    price_leaf_text,
)


def match_price(text: Optional[str]) -> Optional[int]:
    """Whole kroner found in mixed text, or ``None`` when the text holds no number."""
    text = text or ""
    m = _KR_PRICE_RE.search(text) or _BARE_DIGITS_RE.search(text)
    if not m:
        return None
    try:
        return int(_WS_RE.sub("", m.group(1)))
    except ValueError:
        return None


def parse_price(text: Optional[str]) -> int:
    """Parse whole kroner from mixed text.

    Examples: "4 500 kr" -> 4500, "120 000 kr" (no-break space) -> 120000, "Gis bort" -> 0
    """
    price = match_price(text)
    return 0 if price is None else price


def find_price(doc: HtmlResponse) -> Optional[int]:
    return match_price(first_text(doc, PRICE_CHAIN))


def extract_price(doc: HtmlResponse) -> int:
    return parse_price(first_text(doc, PRICE_CHAIN))


# ---------- Description ----------

DESCRIPTION_CHAIN: tuple[TextStrategy, ...] = (
    css_text('[data-testid="ad-description"]'),
    css_text(".about-section-default .whitespace-pre-wrap"),
    css_text(".whitespace-pre-wrap"),
    css_text(".object-description"),
)


def extract_description(doc: HtmlResponse) -> str:
    # Line breaks are kept; sellers format their free text
    return first_text(doc, DESCRIPTION_CHAIN)


# ---------- Location ----------

LOCATION_CHAIN: tuple[TextStrategy, ...] = (
    css_text('[data-testid="location"]'),
    css_text(".u-mt16", 0),
)


def extract_location(doc: HtmlResponse) -> str:
    return normalize_text(first_text(doc, LOCATION_CHAIN))


# ---------- Date ----------


def published_date_text(doc: HtmlResponse) -> str:
    node = doc.css('[data-testid="published-date"]')
    return (
        node.attrib.get("datetime")
        or node.css("time::attr(datetime)").get()
        or "".join(node.xpath(".//text()").getall())
    )


DATE_CHAIN: tuple[TextStrategy, ...] = (
    published_date_text,
    css_text(".u-mt16", -1),
)


def _safe_date(year: str, month: int | str, day: str) -> Optional[str]:
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return None


def parse_listing_date(text: Optional[str]) -> Optional[str]:
    """Convert ISO, ``dd.mm.yyyy`` or ``12. okt. 2025`` text to an ISO date."""
    text = text or ""
    if m := _ISO_DATE_RE.search(text):
        return _safe_date(m.group(1), m.group(2), m.group(3))
    if m := _NUMERIC_DATE_RE.search(text):
        return _safe_date(m.group(3), m.group(2), m.group(1))
    for m in _NAMED_DATE_RE.finditer(text):
        month = MONTHS.get(m.group(2).lower()[:3])
        if month:
            return _safe_date(m.group(3), month, m.group(1))
    return None


def find_date(doc: HtmlResponse) -> Optional[str]:
    """Publication date in ISO form, or ``None`` when no source parses."""
    parsed = (parse_listing_date(strategy(doc)) for strategy in DATE_CHAIN)
    return next((d for d in parsed if d), None)


def extract_date(doc: HtmlResponse) -> str:
    """Publication date in ISO form, or today's date when none is found."""
    return find_date(doc) or date.today().isoformat()


# ---------- Images ----------


def absolute_url(src: str, base_url: str = FINN_BASE_URL) -> str:
    if src.startswith("http"):
        return src
    if src.startswith("//"):
        return f"https:{src}"
    return urljoin(base_url + "/", src)


def extract_images(
    doc: HtmlResponse,
    *,
    base_url: str = FINN_BASE_URL,
    limit: int = MAX_IMAGES,
) -> list[str]:
    """Absolute, de-duplicated ad image URLs in document order, capped at ``limit``."""
    sources = (
        (img.attrib.get("src") or img.attrib.get("data-src") or "").strip()
        for img in doc.css('img[data-testid="ad-image"]')
    )
    unique = dict.fromkeys(absolute_url(src, base_url) for src in sources if src)
    return list(islice(unique, max(limit, 0)))
