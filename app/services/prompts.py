from __future__ import annotations

import json
import textwrap
from typing import Any

from app.schemas import ListingInput
from app.services.locales import get_locale
from app.services.normalizer import ABSOLUTE_URL_PREFIXES, parse_price

LENGTH_GUIDANCE = {
    "short": "Target ~45-70 words total (about 2-3 sentences per style).",
    "medium": "Target ~90-130 words total (about 3-4 sentences per style).",
    "long": "Target ~160-220 words total (about 5-7 sentences per style).",
}

OUTPUT_SHAPE = textwrap.dedent(
    """
    {
      "title": "string",
      "texts": {
        "business": "string",
        "emotional": "string"
      }
    }
    """
).strip()


def _plain_number(value: float | None) -> int | float | None:
    if value is None:
        return None
    return int(value) if float(value).is_integer() else value


def listing_facts(listing: ListingInput) -> dict[str, Any]:
    """Facts handed to the model; ``None`` marks what the caller did not provide."""

    return {
        "title": listing.title,
        "address": listing.address,
        "price": parse_price(listing.price),
        "bedrooms": _plain_number(listing.bedrooms),
        "bathrooms": _plain_number(listing.bathrooms),
        "area": _plain_number(listing.area),
        "notes": listing.notes,
        "images_count": len(listing.images),
    }


def image_urls(listing: ListingInput) -> list[str]:
    """Photos the provider can fetch; relative upload paths are left out."""

    if not listing.use_images:
        return []
    return [url for url in listing.images if url.lower().startswith(ABSOLUTE_URL_PREFIXES)]


def attach_images(listing: ListingInput) -> bool:
    return bool(image_urls(listing))


def build_system_prompt(listing: ListingInput) -> str:
    locale = get_locale(listing.lang)
    return (
        "You are a helpful real-estate copywriter. Output STRICT JSON only. "
        f"No prose outside JSON. Use concise, clear {locale.language}. Avoid emojis and fluff."
    )


def build_user_prompt(listing: ListingInput) -> str:
    locale = get_locale(listing.lang)
    rules: list[str] = []

    if listing.wants_title:
        rules.append("Generate a succinct listing title (max 90 chars) focusing on the top value prop.")
    else:
        rules.append('Do not generate a title: set "title" to an empty string.')

    if listing.mode in ("descriptions", "all"):
        if listing.wants_business:
            rules.append(
                '"texts.business": concise sentences with factual selling points '
                "(layout, size, condition, area highlights, potential ROI)."
            )
        else:
            rules.append('Set "texts.business" to an empty string.')
        if listing.wants_emotional:
            rules.append('"texts.emotional": warm sentences evoking comfort and lifestyle (no fluff).')
        else:
            rules.append('Set "texts.emotional" to an empty string.')
    else:
        rules.append('Do not generate descriptions: set "texts.business" and "texts.emotional" to empty strings.')

    style_lines = [
        LENGTH_GUIDANCE.get(listing.length, LENGTH_GUIDANCE["medium"]),
        f"Write every value in {locale.language}.",
        "No emojis, no markdown, no made-up facts; do not repeat the title inside the descriptions.",
    ]
    if attach_images(listing):
        style_lines.append(
            "Photos are attached. Mention only what is clearly visible in them "
            "and never invent details that the photos do not show."
        )
    else:
        style_lines.append("Do not use any image-based assumptions.")

    facts = json.dumps(listing_facts(listing), ensure_ascii=False)
    task_block = "\n".join(f"- {line}" for line in rules)
    style_block = "\n".join(f"- {line}" for line in style_lines)
    return (
        f"INPUT:\n{facts}\n\n"
        f"TASK:\n{task_block}\n\n"
        f"STYLE:\n{style_block}\n\n"
        f"OUTPUT:\nReturn a single JSON object with exactly these keys:\n{OUTPUT_SHAPE}"
    )


def build_messages(listing: ListingInput) -> list[dict[str, Any]]:
    """Chat messages for the provider; images ride along as ``image_url`` parts."""

    user_prompt = build_user_prompt(listing)
    if attach_images(listing):
        content: Any = [{"type": "text", "text": user_prompt}]
        content.extend(
            {"type": "image_url", "image_url": {"url": url}} for url in image_urls(listing)
        )
    else:
        content = user_prompt

    return [
        {"role": "system", "content": build_system_prompt(listing)},
        {"role": "user", "content": content},
    ]


__all__ = [
    "LENGTH_GUIDANCE",
    "attach_images",
    "build_messages",
    "build_system_prompt",
    "build_user_prompt",
    "image_urls",
    "listing_facts",
]
