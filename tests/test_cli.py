from __future__ import annotations

import json
from pathlib import Path

import pytest

import finn_kvittering.services.extraction as extraction
from finn_kvittering.cli.extract import main


URL = "https://www.finn.no/bap/forsale/ad.html?finnkode=123456789"


def test_cli_prints_envelope_and_dumps_html(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
    listing_html: str,
) -> None:
    monkeypatch.setattr(extraction, "fetch_html", lambda url, **kwargs: listing_html)
    dump = tmp_path / "page.html"

    code = main([URL, "--dump-html", str(dump)])

    assert code == 0
    body = json.loads(capsys.readouterr().out)
    assert body["success"] is True
    assert body["data"]["price"] == 4500
    assert dump.read_text(encoding="utf-8") == listing_html


def test_cli_rejects_foreign_url(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(extraction, "fetch_html", lambda url, **kwargs: pytest.fail("no fetch expected"))

    code = main(["https://example.com/ad"])

    assert code == 2
    assert json.loads(capsys.readouterr().out) == {"success": False, "error": "URL må være fra Finn.no"}
