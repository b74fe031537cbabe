from __future__ import annotations

import pytest

from app.config import GuardConfig, ImageConfig, OpenAIConfig, Settings, get_settings

_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_APIKEY",
    "OPENAI_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "OPENAI_ORG_ID",
    "OPENAI_PROJECT_ID",
    "OPENAI_PROXY",
    "LLM_TIMEOUT_SECONDS",
    "LLM_TEMPERATURE",
    "IMAGE_BASE_URL",
    "PUBLIC_BASE_URL",
    "MAX_IMAGES",
    "MAX_BODY_BYTES",
    "DEFAULT_LANG",
    "CORS_ALLOW_ORIGIN",
    "ALLOWED_ORIGINS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_settings(
    *,
    api_key: str | None = None,
    base_url: str = "https://reality.example",
    max_images: int = 6,
    default_lang: str = "en",
) -> Settings:
    return Settings(
        allowed_origins=["*"],
        default_lang=default_lang,
        openai=OpenAIConfig(api_key=api_key),
        images=ImageConfig(base_url=base_url, max_count=max_images),
        guard=GuardConfig(max_body_bytes=262144),
    )


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def settings_factory():
    return make_settings
