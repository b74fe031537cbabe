from __future__ import annotations

import math
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Style = Literal["both", "business", "emotional"]
Mode = Literal["title", "descriptions", "all"]
Length = Literal["short", "medium", "long"]

SUPPORTED_LANGS = ("en", "ru")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


class _CompatModel(BaseModel):
    """Base model configured to ignore unknown fields (Pydantic v2 only)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _strip_optional(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (str, int, float)):
        return None
    text = str(value).strip()
    return text or None


def _coerce_number(value: Any) -> Optional[float]:
    """Return a finite number or ``None`` for anything that is not one."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _coerce_choice(value: Any, allowed: tuple[str, ...], default: str) -> str:
    if isinstance(value, str):
        text = value.strip().lower()
        if text in allowed:
            return text
    return default


# -----------------------------------------------------------------------------
# Listing request
# -----------------------------------------------------------------------------


class ListingInput(_CompatModel):
    """Listing facts plus generation options, with lenient coercion of every field."""

    title: Optional[str] = Field(None, description="Caller supplied headline, if any.")
    address: Optional[str] = None
    price: Optional[Union[float, str]] = Field(
        None, description="Asking price; strings are parsed later by the normaliser."
    )
    bedrooms: Optional[float] = Field(None, description="Bedroom count (alias: rooms).")
    bathrooms: Optional[float] = None
    area: Optional[float] = Field(None, description="Living area in the locale's unit.")
    notes: Optional[str] = None
    images: list[str] = Field(default_factory=list, description="Photo URLs or upload paths.")

    style: Style = "both"
    mode: Mode = "all"
    length: Length = "medium"
    use_images: bool = Field(True, alias="useImages")
    lang: Optional[str] = Field(None, description="Copy locale; the service default applies when absent.")

    @model_validator(mode="before")
    @classmethod
    def _alias_rooms(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        if data.get("bedrooms") is None and data.get("rooms") is not None:
            data = dict(data)
            data["bedrooms"] = data.get("rooms")
        return data

    @field_validator("title", "address", "notes", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> Optional[str]:
        return _strip_optional(value)

    @field_validator("bedrooms", "bathrooms", "area", mode="before")
    @classmethod
    def _clean_number(cls, value: Any) -> Optional[float]:
        return _coerce_number(value)

    @field_validator("price", mode="before")
    @classmethod
    def _clean_price(cls, value: Any) -> Optional[Union[float, str]]:
        if isinstance(value, str):
            return value.strip() or None
        return _coerce_number(value)

    @field_validator("images", mode="before")
    @classmethod
    def _clean_images(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]

    @field_validator("style", mode="before")
    @classmethod
    def _clean_style(cls, value: Any) -> str:
        return _coerce_choice(value, ("both", "business", "emotional"), "both")

    @field_validator("mode", mode="before")
    @classmethod
    def _clean_mode(cls, value: Any) -> str:
        return _coerce_choice(value, ("title", "descriptions", "all"), "all")

    @field_validator("length", mode="before")
    @classmethod
    def _clean_length(cls, value: Any) -> str:
        return _coerce_choice(value, ("short", "medium", "long"), "medium")

    @field_validator("use_images", mode="before")
    @classmethod
    def _clean_use_images(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            text = value.strip().lower()
            if text in _TRUTHY:
                return True
            if text in _FALSY:
                return False
        return True

    @field_validator("lang", mode="before")
    @classmethod
    def _clean_lang(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        text = value.strip().lower()[:2]
        return text if text in SUPPORTED_LANGS else None

    @property
    def wants_title(self) -> bool:
        return self.mode in ("title", "all")

    @property
    def wants_business(self) -> bool:
        return self.mode in ("descriptions", "all") and self.style in ("both", "business")

    @property
    def wants_emotional(self) -> bool:
        return self.mode in ("descriptions", "all") and self.style in ("both", "emotional")


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------


class DescribeTexts(_CompatModel):
    business: str = ""
    emotional: str = ""


class DescribeResponse(_CompatModel):
    """Payload returned to the browser; ``source`` tells LLM copy from fallback copy."""

    ok: bool = True
    source: Literal["llm", "fallback", "fallback_llm_error", "fallback_exception"]
    llm_status: str = Field(..., description="ok, missing_key, error, or the provider HTTP status.")
    llm_error: Optional[str] = Field(None, max_length=500)
    title: Optional[str] = None
    texts: Optional[DescribeTexts] = None


class ServiceInfo(_CompatModel):
    name: str
    path: str
    methods: list[str] = Field(default_factory=lambda: ["POST"])
    usage: str


__all__ = [
    "DescribeResponse",
    "DescribeTexts",
    "Length",
    "ListingInput",
    "Mode",
    "SUPPORTED_LANGS",
    "ServiceInfo",
    "Style",
]
