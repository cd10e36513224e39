from __future__ import annotations

from datetime import date

import pytest

import finn_kvittering.services.extraction as extraction
from finn_kvittering.config import Settings
from finn_kvittering.errors import FetchError
from finn_kvittering.services.extraction import (
    DEGRADED_WARNING,
    FIELD_WARNINGS,
    ExtractionState,
    extract_from_html,
    extract_listing,
)


URL = "https://www.finn.no/bap/forsale/ad.html?finnkode=123456789"


def test_extract_listing_assembles_all_fields(monkeypatch: pytest.MonkeyPatch, listing_html: str) -> None:
    calls: list[tuple[str, float | None]] = []

    def fake_fetch(url: str, *, timeout=None, settings=None) -> str:
        calls.append((url, timeout))
        return listing_html

    monkeypatch.setattr(extraction, "fetch_html", fake_fetch)

    outcome = extract_listing(URL, timeout=3.0)

    assert calls == [(URL, 3.0)]
    assert outcome.state is ExtractionState.ASSEMBLED
    assert outcome.warnings == []
    result = outcome.result
    assert result.title == "Pent brukt sofa"
    assert result.price == 4500
    assert result.location == "0552 Oslo"
    assert result.date == "2025-10-12"
    assert result.seller_name == "Kristin Granlund"
    assert result.source_url == URL
    assert len(result.images) == 5
    assert len(set(result.images)) == 5


def test_fetch_failure_degrades_to_empty_result(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_fetch(url: str, **kwargs: object) -> str:
        raise FetchError("HTTP 403")

    monkeypatch.setattr(extraction, "fetch_html", failing_fetch)

    outcome = extract_listing(URL)

    assert outcome.degraded
    assert outcome.warnings == [DEGRADED_WARNING]
    assert outcome.result.model_dump(by_alias=True) == {
        "title": "",
        "price": 0,
        "description": "",
        "date": date.today().isoformat(),
        "location": "",
        "images": [],
        "sellerName": "",
        "sourceUrl": URL,
    }


def test_empty_markup_degrades(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(extraction, "fetch_html", lambda url, **kwargs: "")

    outcome = extract_listing(URL)

    assert outcome.state is ExtractionState.DEGRADED
    assert outcome.warnings


def test_unexpected_errors_propagate(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_fetch(url: str, **kwargs: object) -> str:
        raise RuntimeError("bug")

    monkeypatch.setattr(extraction, "fetch_html", broken_fetch)

    with pytest.raises(RuntimeError):
        extract_listing(URL)


def test_debug_sink_receives_markup(monkeypatch: pytest.MonkeyPatch, listing_html: str) -> None:
    monkeypatch.setattr(extraction, "fetch_html", lambda url, **kwargs: listing_html)
    seen: list[tuple[str, str]] = []

    outcome = extract_listing(URL, debug_sink=lambda url, html: seen.append((url, html)))

    assert seen == [(URL, listing_html)]
    assert not outcome.degraded


def test_failing_debug_sink_does_not_break_extraction(monkeypatch: pytest.MonkeyPatch, listing_html: str) -> None:
    monkeypatch.setattr(extraction, "fetch_html", lambda url, **kwargs: listing_html)

    def sink(url: str, html: str) -> None:
        raise OSError("disk full")

    outcome = extract_listing(URL, debug_sink=sink)

    assert outcome.result.title == "Pent brukt sofa"


def test_extraction_is_idempotent(listing_html: str) -> None:
    first = extract_from_html(URL, listing_html)
    second = extract_from_html(URL, listing_html)
    assert first.result.model_dump_json() == second.result.model_dump_json()
    assert first.warnings == second.warnings == []


def test_malformed_link_does_not_break_extraction(monkeypatch: pytest.MonkeyPatch) -> None:
    html = '<html><body><h1>Sofa</h1><a href="http://[broken/x">Lenke</a></body></html>'
    monkeypatch.setattr(extraction, "fetch_html", lambda url, **kwargs: html)

    outcome = extract_listing(URL)

    assert outcome.state is ExtractionState.ASSEMBLED
    assert outcome.result.title == "Sofa"


def test_unexpected_extractor_failure_degrades(monkeypatch: pytest.MonkeyPatch, listing_html: str) -> None:
    def broken_resolver(doc: object) -> str:
        raise ValueError("Invalid IPv6 URL")

    monkeypatch.setattr(extraction, "fetch_html", lambda url, **kwargs: listing_html)
    monkeypatch.setattr(extraction, "resolve_seller_name", broken_resolver)

    outcome = extract_listing(URL)

    assert outcome.degraded
    assert outcome.warnings == [DEGRADED_WARNING]
    assert outcome.result.title == ""


def test_image_limit_setting_cannot_exceed_five() -> None:
    images = "".join(
        f'<img data-testid="ad-image" src="https://images.finncdn.no/dynamic/{i}.jpg" />' for i in range(10)
    )
    html = f"<html><body><h1>Sofa</h1>{images}</body></html>"

    outcome = extract_from_html(URL, html, settings=Settings(max_images=8))
    assert len(outcome.result.images) == 5

    outcome = extract_from_html(URL, html, settings=Settings(max_images=2))
    assert len(outcome.result.images) == 2


def test_missing_key_fields_are_reported_as_warnings() -> None:
    outcome = extract_from_html(URL, "<html><body><h1>Sofa</h1><p>Gis bort</p></body></html>")

    assert outcome.state is ExtractionState.ASSEMBLED
    assert outcome.result.price == 0
    assert outcome.result.date == date.today().isoformat()
    assert outcome.warnings == [
        FIELD_WARNINGS["price"],
        FIELD_WARNINGS["date"],
        FIELD_WARNINGS["sellerName"],
    ]


def test_explicit_zero_price_is_not_missing() -> None:
    html = (
        "<html><body>"
        '<h1>Sofa</h1><div data-testid="price">0 kr</div>'
        '<div data-testid="published-date">2025-10-12</div>'
        '<span data-testid="seller-name">Per Olsen</span>'
        "</body></html>"
    )

    outcome = extract_from_html(URL, html)

    assert outcome.result.price == 0
    assert outcome.warnings == []
