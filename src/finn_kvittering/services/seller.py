"""Seller name resolution for Finn.no listing pages.

Finn.no has no stable selector for the seller, so the name is resolved by
a chain of heuristics ordered from most to least specific. Each heuristic
is a standalone function ``HtmlResponse -> str | None`` and the first one
yielding a plausible name wins. Reorder or drop heuristics by passing a
different tuple to :func:`resolve_seller_name`.

All heuristics encode assumptions about Finn.no's current markup (class
names, attribute shapes, profile URL layout) and degrade silently when
that markup changes.
"""

from __future__ import annotations

import logging
import re
from itertools import chain
from typing import Callable, Iterable, Iterator, Optional
from urllib.parse import urlsplit

import scrapy
from scrapy.http import HtmlResponse

from .scraper import normalize_text


logger = logging.getLogger(__name__)

SellerStrategy = Callable[[HtmlResponse], Optional[str]]

PROFILE_IMAGE_MARKERS = ("profilbilde", "profile")
# Seller boxes read "Har vært på FINN siden 2014"
CONTEXT_MARKERS = ("på finn siden", "på finn-siden", "on finn since")
VERIFICATION_MARKERS = ("verifisert", "verified", "bankid")
NAME_TYPOGRAPHY_CLASSES = frozenset({"t3", "t4", "font-bold"})
MAX_NAME_LENGTH = 100

_LETTER_RE = re.compile(r"[^\W\d_]")
_ALT_NAME_RE = re.compile(
    r"(?:profilbilde|profile\s+(?:picture|image))\s+(?:for|av|of)\s+([^,\n]+)",
    re.IGNORECASE,
)
_FOR_NAME_RE = re.compile(r"\bfor\s+([A-ZÆØÅÄÖÉ][\w'\-]*(?:[ \t]+[A-ZÆØÅÄÖÉ][\w'\-]*)+)")
_NAME_CUT_RE = re.compile(r"[,\n]")
_TEXT_ELEMENTS = "//body//*[not(self::script or self::style)][text()]"


def plausible_name(text: Optional[str]) -> Optional[str]:
    """Normalized ``text`` if it could be a person's name, else ``None``."""
    name = normalize_text(text)
    if not 1 <= len(name) <= MAX_NAME_LENGTH or not _LETTER_RE.search(name):
        return None
    return name


def _first_plausible(candidates: Iterable[Optional[str]]) -> Optional[str]:
    return next((name for name in map(plausible_name, candidates) if name), None)


def _text_of(sel: scrapy.Selector) -> str:
    return "".join(sel.xpath(".//text()").getall())


def _classes(sel: scrapy.Selector) -> set[str]:
    return set((sel.attrib.get("class") or "").split())


def is_profile_href(href: Optional[str]) -> bool:
    """True for links into a user's profile, e.g. ``/profile/ads?userId=123``."""
    if not href:
        return False
    try:
        parts = urlsplit(href)
    except ValueError:
        # e.g. unbalanced brackets read as an IPv6 host
        return False
    return parts.path.startswith("/profile") or "userId=" in parts.query


def _has_name_typography(anchor: scrapy.Selector) -> bool:
    return bool(_classes(anchor) & NAME_TYPOGRAPHY_CLASSES)


def _looks_like_profile_link(anchor: scrapy.Selector) -> bool:
    css_class = (anchor.attrib.get("class") or "").lower()
    return "profile" in css_class or is_profile_href(anchor.attrib.get("href"))


def _elements_mentioning(doc: HtmlResponse, markers: Iterable[str]) -> Iterator[scrapy.Selector]:
    """Elements whose own text contains any of ``markers`` (case-insensitive)."""
    markers = tuple(markers)
    for el in doc.xpath(_TEXT_ELEMENTS):
        own = normalize_text(" ".join(el.xpath("text()").getall())).lower()
        if any(m in own for m in markers):
            yield el


def _name_from_alt(alt: str) -> Optional[str]:
    m = _ALT_NAME_RE.search(alt) or _FOR_NAME_RE.search(alt)
    if not m:
        return None
    return _NAME_CUT_RE.split(m.group(1), maxsplit=1)[0]


# ---------- Strategies, highest priority first ----------


def seller_from_profile_image(doc: HtmlResponse) -> Optional[str]:
    """Alt text such as "Profilbilde for Kristin Granlund"."""
    alts = (
        img.attrib.get("alt") or ""
        for img in doc.css("img")
        if any(
            m in f"{img.attrib.get('alt') or ''} {img.attrib.get('src') or ''}".lower()
            for m in PROFILE_IMAGE_MARKERS
        )
    )
    return _first_plausible(_name_from_alt(alt) for alt in alts)


def seller_from_name_attribute(doc: HtmlResponse) -> Optional[str]:
    queries = ('[data-testid="seller-name"]', ".profile-name")
    return _first_plausible(_text_of(node) for q in queries for node in doc.css(q)[:1])


def seller_from_context_phrase(doc: HtmlResponse) -> Optional[str]:
    """Profile link next to the "på FINN siden" membership line."""
    anchors = (
        a
        for el in _elements_mentioning(doc, CONTEXT_MARKERS)
        for a in el.xpath("..").css("a")
        if _looks_like_profile_link(a)
    )
    return _first_plausible(_text_of(a) for a in anchors)


def seller_from_typed_profile_link(doc: HtmlResponse) -> Optional[str]:
    anchors = (
        a
        for a in doc.css("a")
        if _has_name_typography(a) and is_profile_href(a.attrib.get("href"))
    )
    return _first_plausible(_text_of(a) for a in anchors)


def seller_from_profile_link(doc: HtmlResponse) -> Optional[str]:
    anchors = (a for a in doc.css("a") if is_profile_href(a.attrib.get("href")))
    return _first_plausible(_text_of(a) for a in anchors)


def seller_from_typography_link(doc: HtmlResponse) -> Optional[str]:
    """Name-styled links: profile links first, then full names, then anything."""
    typed = [a for a in doc.css("a") if _has_name_typography(a)]
    ranked = chain(
        (a for a in typed if is_profile_href(a.attrib.get("href"))),
        (a for a in typed if " " in normalize_text(_text_of(a))),
        typed,
    )
    return _first_plausible(_text_of(a) for a in ranked)


def seller_from_verification_badge(doc: HtmlResponse) -> Optional[str]:
    anchors = (
        a
        for el in _elements_mentioning(doc, VERIFICATION_MARKERS)
        for a in el.xpath("..").css("a")
    )
    return _first_plausible(_text_of(a) for a in anchors)


SELLER_STRATEGIES: tuple[SellerStrategy, ...] = (
    seller_from_profile_image,
    seller_from_name_attribute,
    seller_from_context_phrase,
    seller_from_typed_profile_link,
    seller_from_profile_link,
    seller_from_typography_link,
    seller_from_verification_badge,
)


def resolve_seller_name(
    doc: HtmlResponse,
    strategies: Iterable[SellerStrategy] = SELLER_STRATEGIES,
) -> str:
    """Run ``strategies`` in order and return the first name found, or ``""``."""
    hits = ((strategy, strategy(doc)) for strategy in strategies)
    strategy, name = next(((s, n) for s, n in hits if n), (None, None))
    if strategy is None:
        logger.debug("No seller name found on %s", doc.url)
        return ""
    logger.debug("Seller name resolved by %s", strategy.__name__)
    return plausible_name(name) or ""
