"""Turn a raw request body into a :class:`ListingInput` the pipeline can trust."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Iterable

from app.config import Settings
from app.schemas import ListingInput

logger = logging.getLogger(__name__)

ABSOLUTE_URL_PREFIXES = ("http://", "https://")

_PRICE_JUNK_RE = re.compile(r"[^\d.]")


def parse_price(price: Any) -> int | None:
    """Interpret a price as a whole number.

    Strings keep only digits and ``.`` before conversion, so ``"$450,000"``
    becomes 450000 while ``"1.234"`` stays 1 (thousands dots are not
    recognised). Zero, negative and unparseable prices return ``None``.
    """

    if price is None or isinstance(price, bool):
        return None
    if isinstance(price, (int, float)):
        try:
            number = float(price)
        except OverflowError:
            return None
    else:
        digits = _PRICE_JUNK_RE.sub("", str(price))
        if not digits:
            return None
        try:
            number = float(digits)
        except ValueError:
            return None
    if not math.isfinite(number) or number <= 0:
        return None
    return int(round(number))


def resolve_image_urls(images: Iterable[Any], base_url: str, max_count: int) -> list[str]:
    """Keep absolute URLs, join relative paths onto ``base_url`` and cap the list."""

    base = (base_url or "").rstrip("/")
    resolved: list[str] = []
    for item in images or []:
        if len(resolved) >= max_count:
            break
        if not isinstance(item, str):
            continue
        url = item.strip()
        if not url:
            continue
        if not url.lower().startswith(ABSOLUTE_URL_PREFIXES) and base:
            url = f"{base}/{url.lstrip('/')}"
        resolved.append(url)
    return resolved


def normalise_listing(raw: Any, settings: Settings) -> ListingInput:
    """Validate ``raw`` leniently and apply configuration-driven defaults.

    Anything that is not a JSON object is treated as an empty request.
    """

    payload = raw if isinstance(raw, dict) else {}
    listing = ListingInput.model_validate(payload)

    images = resolve_image_urls(
        listing.images, settings.images.base_url, settings.images.max_count
    )
    update: dict[str, Any] = {"images": images}
    if listing.lang is None:
        update["lang"] = settings.default_lang

    listing = listing.model_copy(update=update)
    logger.debug(
        "listing normalised",
        extra={
            "mode": listing.mode,
            "style": listing.style,
            "length": listing.length,
            "lang": listing.lang,
            "image_count": len(listing.images),
        },
    )
    return listing
