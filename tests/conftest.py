from __future__ import annotations

from typing import Callable

import pytest
from scrapy.http import HtmlResponse

from finn_kvittering.services.scraper import parse_document


LISTING_URL = "https://www.finn.no/bap/forsale/ad.html?finnkode=123456789"

LISTING_HTML = """
<html>
  <head><title>Sofa til salgs | FINN torget</title></head>
  <body>
    <h1 data-testid="ad-title">  Pent brukt
      sofa  </h1>
    <h2 data-testid="price">4&nbsp;500 kr</h2>
    <div data-testid="ad-description">Tre-seter i grå ull.
Hentes på Grünerløkka.</div>
    <div data-testid="location">0552 Oslo</div>
    <div data-testid="published-date">Sist endret 12. okt. 2025 14:33</div>
    <img data-testid="ad-image" src="https://images.finncdn.no/dynamic/1.jpg" />
    <img data-testid="ad-image" src="/dynamic/2.jpg" />
    <img data-testid="ad-image" data-src="https://images.finncdn.no/dynamic/3.jpg" />
    <img data-testid="ad-image" src="https://images.finncdn.no/dynamic/1.jpg" />
    <img data-testid="ad-image" src="https://images.finncdn.no/dynamic/4.jpg" />
    <img data-testid="ad-image" src="https://images.finncdn.no/dynamic/5.jpg" />
    <img data-testid="ad-image" src="https://images.finncdn.no/dynamic/6.jpg" />
    <section>
      <img src="https://images.finncdn.no/profile/77.jpg" alt="Profilbilde for Kristin Granlund" />
      <a class="t4" href="/profile/ads?userId=77">Kristin Granlund</a>
      <span>Har vært på FINN siden 2014</span>
    </section>
  </body>
</html>
"""


@pytest.fixture
def listing_html() -> str:
    return LISTING_HTML


@pytest.fixture
def make_doc() -> Callable[[str], HtmlResponse]:
    def build(body: str, url: str = LISTING_URL) -> HtmlResponse:
        return parse_document(url, f"<html><body>{body}</body></html>")

    return build
