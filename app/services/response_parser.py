from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional


class CopyParseError(ValueError):
    """Model output did not contain a usable JSON object."""


@dataclass
class ParsedCopy:
    title: Optional[str] = None
    business: Optional[str] = None
    emotional: Optional[str] = None


def extract_json_object(text: str | None) -> str | None:
    """Return the slice between the first ``{`` and the last ``}``.

    Models occasionally wrap their JSON in prose ("Sure! {...} Hope this
    helps!"); this cuts the object back out. ``None`` when no pair exists.
    """

    if not text:
        return None
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return text[start : end + 1]


def _non_empty(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_copy_payload(text: str | None) -> ParsedCopy:
    """Parse model output into title / business / emotional strings.

    ``{"title", "texts": {"business", "emotional"}}`` is the requested shape;
    top-level ``business`` / ``emotional`` keys are accepted as well. Missing
    or blank fields come back as ``None``.
    """

    snippet = extract_json_object(text)
    if snippet is None:
        raise CopyParseError("no JSON object in model output")
    try:
        data = json.loads(snippet)
    except json.JSONDecodeError as exc:
        raise CopyParseError(f"bad_json: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise CopyParseError("model output is not a JSON object")

    texts = data.get("texts") if isinstance(data.get("texts"), dict) else {}
    return ParsedCopy(
        title=_non_empty(data.get("title")),
        business=_non_empty(texts.get("business")) or _non_empty(data.get("business")),
        emotional=_non_empty(texts.get("emotional")) or _non_empty(data.get("emotional")),
    )


__all__ = ["CopyParseError", "ParsedCopy", "extract_json_object", "parse_copy_payload"]
