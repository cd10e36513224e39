"""Voucher ("bilag") numbering, Norwegian formatting and HTML rendering."""

from __future__ import annotations

import random
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from jinja2 import Environment, PackageLoader, select_autoescape

from finn_kvittering.models import VoucherRequest


MONTHS_NO = (
    "januar", "februar", "mars", "april", "mai", "juni",
    "juli", "august", "september", "oktober", "november", "desember",
)

_FINNKODE_RE = re.compile(r"finnkode=(\d+)", re.IGNORECASE)
_LONG_NUMBER_RE = re.compile(r"(\d{6,})")
_ANY_NUMBER_RE = re.compile(r"(\d+)")

env = Environment(
    loader=PackageLoader("finn_kvittering", "templates"),
    autoescape=select_autoescape(["html"]),
)


def voucher_number(source_url: Optional[str] = None, rng: Optional[random.Random] = None) -> str:
    """Derive ``FK-<digits>`` from the listing URL, or a random number without one."""
    if source_url:
        if m := _FINNKODE_RE.search(source_url):
            return f"FK-{m.group(1)}"
        if m := _LONG_NUMBER_RE.search(source_url):
            return f"FK-{m.group(1)[:6]}"
        if m := _ANY_NUMBER_RE.search(source_url):
            return f"FK-{m.group(1)[:6].zfill(6)}"
    return f"FK-{(rng or random).randint(100000, 999999)}"


def format_date_no(value: Union[str, date, datetime]) -> str:
    """``2025-10-12`` -> ``12. oktober 2025``. Unparseable text is returned as is."""
    if isinstance(value, date):
        d = value
    else:
        try:
            d = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return value
    return f"{d.day}. {MONTHS_NO[d.month - 1]} {d.year}"


def format_price_no(price: float) -> str:
    """Whole kroner grouped with no-break spaces, e.g. ``35 000``."""
    kroner = int(Decimal(str(price)).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return f"{kroner:,}".replace(",", "\u00a0")


def render_voucher_html(
    voucher: VoucherRequest,
    *,
    number: str,
    generated_at: Optional[datetime] = None,
) -> str:
    template = env.get_template("voucher.html")
    return template.render(
        number=number,
        generated=format_date_no(generated_at or datetime.now()),
        purchase_date=format_date_no(voucher.date),
        title=(voucher.title or "").strip(),
        price=format_price_no(voucher.price),
        payment_method=voucher.payment_method,
        seller=voucher.seller_name,
        buyer=voucher.buyer_name,
        location=(voucher.location or "").strip(),
        source_url=(voucher.source_url or "").strip(),
        notes=(voucher.notes or "").strip(),
    )
