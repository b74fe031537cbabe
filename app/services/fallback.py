"""Deterministic listing copy used whenever the LLM path gives us nothing usable.

Every function here is pure: the same :class:`ListingInput` always yields the
same text, and absent fields drop their sentence instead of leaving gaps.
"""

from __future__ import annotations

from app.schemas import ListingInput
from app.services.locales import CopyLocale, get_locale
from app.services.normalizer import parse_price

MAX_TITLE_CHARS = 120

# Sentences kept per description, by requested length.
SENTENCE_COUNTS = {"short": 2, "medium": 4, "long": 6}


def _locale_for(listing: ListingInput) -> CopyLocale:
    return get_locale(listing.lang)


def _sentence_count(length: str | None) -> int:
    return SENTENCE_COUNTS.get(length or "medium", SENTENCE_COUNTS["medium"])


def _feature_list(listing: ListingInput, locale: CopyLocale) -> str:
    parts: list[str] = []
    if listing.bedrooms:
        parts.append(locale.feature_bedrooms.format(n=locale.format_number(listing.bedrooms)))
    if listing.bathrooms:
        parts.append(locale.feature_bathrooms.format(n=locale.format_number(listing.bathrooms)))
    if listing.area:
        parts.append(locale.feature_area.format(area=locale.format_number(listing.area)))
    return " · ".join(parts)


def fallback_title(listing: ListingInput) -> str:
    """Caller title if given, else "<n>-Bedroom <area> in <address>" from what is known."""

    if listing.title:
        return listing.title[:MAX_TITLE_CHARS].strip()

    locale = _locale_for(listing)
    parts: list[str] = []
    if listing.bedrooms:
        parts.append(locale.title_bedrooms.format(n=locale.format_number(listing.bedrooms)))
    if listing.area:
        parts.append(locale.title_area.format(area=locale.format_number(listing.area)))
    head = " ".join(parts) if parts else locale.placeholder_title
    location = locale.title_location.format(address=listing.address) if listing.address else ""
    return f"{head}{location}"[:MAX_TITLE_CHARS].strip()


def business_sentences(listing: ListingInput) -> list[str]:
    """Ordered candidate sentences for the factual description."""

    locale = _locale_for(listing)
    location = locale.business_location.format(address=listing.address) if listing.address else ""
    sentences = [
        locale.business_turnkey.format(
            location=location,
            features=_feature_list(listing, locale) or locale.feature_default,
        )
    ]

    if listing.area:
        sentences.append(locale.business_floor_plan.format(area=locale.format_number(listing.area)))

    rooms: list[str] = []
    if listing.bedrooms:
        rooms.append(locale.count_phrase(listing.bedrooms, locale.bedroom_forms))
    if listing.bathrooms:
        rooms.append(locale.count_phrase(listing.bathrooms, locale.bathroom_forms))
    if rooms:
        sentences.append(locale.business_rooms.format(rooms=locale.rooms_joiner.join(rooms)))

    price = parse_price(listing.price)
    if price is not None:
        sentences.append(locale.business_price.format(price=locale.format_price(price)))

    sentences.append(locale.business_move_in)

    if listing.images:
        sentences.append(locale.business_photos)
    return sentences


def emotional_sentences(listing: ListingInput) -> list[str]:
    """Ordered candidate sentences for the lifestyle description."""

    locale = _locale_for(listing)
    sentences = [locale.emotional_ambiance, locale.emotional_gathering]
    if listing.address:
        sentences.append(locale.emotional_neighborhood.format(address=listing.address))
    if listing.images:
        sentences.append(locale.emotional_photos)
    sentences.append(locale.emotional_closing)
    return sentences


def fallback_business(listing: ListingInput, length: str | None = None) -> str:
    count = _sentence_count(length or listing.length)
    return " ".join(business_sentences(listing)[:count])


def fallback_emotional(listing: ListingInput, length: str | None = None) -> str:
    count = _sentence_count(length or listing.length)
    return " ".join(emotional_sentences(listing)[:count])


__all__ = [
    "MAX_TITLE_CHARS",
    "SENTENCE_COUNTS",
    "business_sentences",
    "emotional_sentences",
    "fallback_business",
    "fallback_emotional",
    "fallback_title",
]
