"""Service layer: fetching, field extraction and voucher rendering."""

from .extraction import ExtractionOutcome, ExtractionState, extract_from_html, extract_listing
from .fetcher import fetch_html, validate_url
from .pdf import ChromePdfRenderer, render_pdf
from .seller import SELLER_STRATEGIES, resolve_seller_name

__all__ = [
    "ExtractionOutcome",
    "ExtractionState",
    "extract_from_html",
    "extract_listing",
    "fetch_html",
    "validate_url",
    "ChromePdfRenderer",
    "render_pdf",
    "SELLER_STRATEGIES",
    "resolve_seller_name",
]
