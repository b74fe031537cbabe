# -*- coding: utf-8 -*-
"""
Chat-completion client for listing copy.
- One request per call, explicit timeout, no SDK retries.
- Never raises: every failure becomes an ``LlmOutcome`` with status ``error``.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI

from app.config import OpenAIConfig
from app.schemas import ListingInput
from app.services.prompts import build_messages
from app.services.response_parser import CopyParseError, parse_copy_payload

logger = logging.getLogger(__name__)

# Completion budget per requested length.
MAX_TOKENS = {"short": 300, "medium": 600, "long": 900}

PROVIDER_ERROR = "provider_error"
PARSE_ERROR = "parse_error"
INTERNAL_EXCEPTION = "internal_exception"

# Only these keys are forwarded to the SDK constructor.
_ALLOWED_OPENAI_KWARGS = {
    "api_key",
    "base_url",
    "organization",
    "project",
    "timeout",
    "max_retries",
    "http_client",
}


@dataclass
class LlmOutcome:
    status: str
    title: Optional[str] = None
    business: Optional[str] = None
    emotional: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    http_status: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def failure(cls, kind: str, message: str, *, http_status: int | None = None) -> "LlmOutcome":
        return cls(status="error", error=message, error_kind=kind, http_status=http_status)


def _sanitize_openai_kwargs(kw: dict[str, Any]) -> dict[str, Any]:
    cleaned = {k: v for k, v in kw.items() if k in _ALLOWED_OPENAI_KWARGS and v is not None}
    for k in set(kw) - _ALLOWED_OPENAI_KWARGS:
        logger.debug("Removed unsupported OpenAI kwarg '%s' from client kwargs", k)
    return cleaned


def _build_openai_client(config: OpenAIConfig) -> tuple[OpenAI, Optional[httpx.Client]]:
    """
    Build the SDK client:
      - the proxy only goes into ``httpx.Client(proxy=...)`` injected as http_client
      - returns (client, http_client); the caller closes http_client
    """
    if not config.api_key:
        raise ValueError("OPENAI_API_KEY is not configured.")

    kw: dict[str, Any] = {
        "api_key": config.api_key,
        "base_url": config.base_url,
        "organization": config.organization,
        "project": config.project,
        "timeout": config.timeout,
        "max_retries": 0,
    }

    http_client: httpx.Client | None = None
    if config.proxy:
        timeout = httpx.Timeout(config.timeout, connect=min(config.timeout, 10.0))
        http_client = httpx.Client(proxy=config.proxy, timeout=timeout)
        kw["http_client"] = http_client

    return OpenAI(**_sanitize_openai_kwargs(kw)), http_client


def _extract_text(resp: Any) -> str:
    try:
        return (resp.choices[0].message.content or "").strip()
    except (AttributeError, IndexError, TypeError):
        return ""


def _status_error_message(exc: APIStatusError) -> str:
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        message = body.get("message")
        if not message and isinstance(body.get("error"), dict):
            message = body["error"].get("message")
        if message:
            return str(message)
    return getattr(exc, "message", None) or f"HTTP {exc.status_code}"


def request_copy(
    listing: ListingInput,
    config: OpenAIConfig,
    *,
    trace_id: str | None = None,
) -> LlmOutcome:
    """Ask the provider for title / business / emotional copy for ``listing``."""

    if not config.is_configured:
        return LlmOutcome(status="missing_key")

    payload: dict[str, Any] = {
        "model": config.model,
        "messages": build_messages(listing),
        "temperature": config.temperature,
        "max_tokens": MAX_TOKENS.get(listing.length, MAX_TOKENS["medium"]),
        "response_format": {"type": "json_object"},
    }

    try:
        with ExitStack() as stack:
            client, http_client = _build_openai_client(config)
            if http_client is not None:
                stack.callback(http_client.close)
            resp = client.chat.completions.create(**payload)

        content = _extract_text(resp)
        if not content:
            logger.warning("LLM returned empty content", extra={"trace": trace_id, "model": config.model})
            return LlmOutcome.failure(PROVIDER_ERROR, "empty_response")

        parsed = parse_copy_payload(content)
    except APITimeoutError:
        logger.warning(
            "LLM request timed out",
            extra={"trace": trace_id, "timeout": config.timeout},
        )
        return LlmOutcome.failure(PROVIDER_ERROR, f"timeout after {config.timeout:g}s")
    except APIConnectionError as exc:
        logger.warning("LLM connection failed: %s", exc, extra={"trace": trace_id})
        return LlmOutcome.failure(PROVIDER_ERROR, f"connection_error: {exc}")
    except APIStatusError as exc:
        logger.warning(
            "LLM returned HTTP %s",
            exc.status_code,
            extra={"trace": trace_id, "model": config.model},
        )
        return LlmOutcome.failure(
            PROVIDER_ERROR, _status_error_message(exc), http_status=exc.status_code
        )
    except CopyParseError as exc:
        logger.warning("LLM content unusable: %s", exc, extra={"trace": trace_id})
        return LlmOutcome.failure(PARSE_ERROR, str(exc))
    except Exception as exc:  # noqa: BLE001
        logger.exception("LLM request failed", extra={"trace": trace_id})
        return LlmOutcome.failure(INTERNAL_EXCEPTION, str(exc) or exc.__class__.__name__)

    return LlmOutcome(
        status="ok",
        title=parsed.title,
        business=parsed.business,
        emotional=parsed.emotional,
    )


__all__ = [
    "INTERNAL_EXCEPTION",
    "LlmOutcome",
    "MAX_TOKENS",
    "PARSE_ERROR",
    "PROVIDER_ERROR",
    "request_copy",
]
