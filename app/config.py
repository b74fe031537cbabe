from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List
from urllib.parse import urlparse


def _as_int(value: str | None, default: int, *, minimum: int = 0) -> int:
    if value is None or not value.strip():
        return default
    try:
        return max(int(value), minimum)
    except (TypeError, ValueError):
        return default


def _as_float(value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _first_env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return None


@dataclass
class OpenAIConfig:
    api_key: str | None = None
    model: str = "gpt-4o-mini"
    base_url: str | None = None
    organization: str | None = None
    project: str | None = None
    proxy: str | None = None
    timeout: float = 20.0
    temperature: float = 0.7

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @classmethod
    def from_env(cls) -> "OpenAIConfig":
        return cls(
            api_key=_first_env("OPENAI_API_KEY", "OPENAI_APIKEY", "OPENAI_KEY"),
            model=_first_env("OPENAI_MODEL") or "gpt-4o-mini",
            base_url=_first_env("OPENAI_BASE_URL"),
            organization=_first_env("OPENAI_ORG_ID"),
            project=_first_env("OPENAI_PROJECT_ID"),
            proxy=_first_env("OPENAI_PROXY"),
            timeout=_as_float(os.getenv("LLM_TIMEOUT_SECONDS"), 20.0),
            temperature=_as_float(os.getenv("LLM_TEMPERATURE"), 0.7),
        )


@dataclass
class ImageConfig:
    base_url: str = ""
    max_count: int = 6

    @classmethod
    def from_env(cls) -> "ImageConfig":
        base = (os.getenv("IMAGE_BASE_URL") or os.getenv("PUBLIC_BASE_URL") or "").strip()
        return cls(
            base_url=base.rstrip("/"),
            max_count=_as_int(os.getenv("MAX_IMAGES"), 6),
        )


@dataclass
class GuardConfig:
    max_body_bytes: int

    @classmethod
    def from_env(cls) -> "GuardConfig":
        return cls(max_body_bytes=_as_int(os.getenv("MAX_BODY_BYTES"), 262144))


@dataclass
class Settings:
    allowed_origins: List[str]
    default_lang: str
    openai: OpenAIConfig
    images: ImageConfig
    guard: GuardConfig


def _parse_allowed_origins(raw: str | None) -> List[str]:
    """Normalise comma-separated origins into values accepted by CORSMiddleware."""

    if not raw:
        return ["*"]

    cleaned: List[str] = []
    for origin in raw.split(","):
        value = origin.strip()
        if not value:
            continue
        if value == "*":
            return ["*"]

        parsed = urlparse(value)
        if parsed.scheme and parsed.netloc:
            normalised = f"{parsed.scheme}://{parsed.netloc}"
        else:
            normalised = value.rstrip("/")

        if normalised not in cleaned:
            cleaned.append(normalised)

    return cleaned or ["*"]


@lru_cache()
def get_settings() -> Settings:
    def _get(name: str, default: str | None = None) -> str | None:
        v = os.getenv(name)
        return v if v is not None else default

    origins_raw = _get("CORS_ALLOW_ORIGIN") or _get("ALLOWED_ORIGINS", "*")

    default_lang = (_get("DEFAULT_LANG", "en") or "en").strip().lower()
    if default_lang not in {"en", "ru"}:
        default_lang = "en"

    return Settings(
        allowed_origins=_parse_allowed_origins(origins_raw),
        default_lang=default_lang,
        openai=OpenAIConfig.from_env(),
        images=ImageConfig.from_env(),
        guard=GuardConfig.from_env(),
    )
