"""Typed errors shared by the fetcher, extractors and voucher renderer."""

from __future__ import annotations


class KvitteringError(RuntimeError):
    """Base class for all application errors."""


class InvalidUrlError(KvitteringError):
    """The input URL is not a supported marketplace URL."""


class ExtractionError(KvitteringError):
    """A document-level failure while producing an extraction result."""


class FetchError(ExtractionError):
    """HTTP/transport failure while fetching the listing page."""


class ParseError(ExtractionError):
    """Fetched markup could not be turned into a document."""


class RenderError(KvitteringError):
    """The PDF renderer failed to produce a document."""


# Failures that degrade an extraction instead of failing the request
EXTRACTION_ERRORS = (FetchError, ParseError)
