"""Merge LLM output with fallback copy and shape the outward payload."""

from __future__ import annotations

import logging
from typing import Any

from app.config import Settings
from app.schemas import DescribeResponse, DescribeTexts, ListingInput
from app.services.fallback import fallback_business, fallback_emotional, fallback_title
from app.services.llm_client import (
    INTERNAL_EXCEPTION,
    PROVIDER_ERROR,
    LlmOutcome,
    request_copy,
)
from app.services.normalizer import normalise_listing

logger = logging.getLogger(__name__)

MAX_ERROR_CHARS = 500
MAX_LLM_TITLE_CHARS = 200
MISSING_KEY_ERROR = "MISSING_API_KEY"


def source_tag(outcome: LlmOutcome) -> str:
    """Provenance of the copy: ``llm`` or the reason fallback text was used."""

    if outcome.ok:
        return "llm"
    if outcome.status == "missing_key":
        return "fallback"
    if outcome.error_kind == PROVIDER_ERROR:
        return "fallback_llm_error"
    return "fallback_exception"


def status_label(outcome: LlmOutcome) -> str:
    if outcome.http_status is not None:
        return str(outcome.http_status)
    return outcome.status


def _pick(requested: bool, llm_value: str | None, fallback: Any) -> str:
    if not requested:
        return ""
    if llm_value and llm_value.strip():
        return llm_value.strip()
    return fallback()


def compose_response(listing: ListingInput, outcome: LlmOutcome) -> DescribeResponse:
    """Apply the per-field merge: LLM value, then fallback, and ``""`` when not requested."""

    usable = outcome if outcome.ok else LlmOutcome(status=outcome.status)
    llm_title = usable.title[:MAX_LLM_TITLE_CHARS] if usable.title else None

    title = _pick(listing.wants_title, llm_title, lambda: fallback_title(listing))
    business = _pick(listing.wants_business, usable.business, lambda: fallback_business(listing))
    emotional = _pick(listing.wants_emotional, usable.emotional, lambda: fallback_emotional(listing))

    error = outcome.error
    if outcome.status == "missing_key" and not error:
        error = MISSING_KEY_ERROR

    payload: dict[str, Any] = {
        "ok": True,
        "source": source_tag(outcome),
        "llm_status": status_label(outcome),
        "llm_error": error[:MAX_ERROR_CHARS] if error else None,
    }
    if listing.mode in ("title", "all"):
        payload["title"] = title
    if listing.mode in ("descriptions", "all"):
        payload["texts"] = DescribeTexts(business=business, emotional=emotional)
    return DescribeResponse(**payload)


def _request_options(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    keys = ("mode", "style", "length", "lang")
    return {key: raw[key] for key in keys if isinstance(raw.get(key), str)}


def emergency_response(settings: Settings, exc: BaseException, raw: Any = None) -> DescribeResponse:
    """Fallback copy for a request we could not even read.

    Only the generation options of ``raw`` are trusted, so ``mode`` and
    ``style`` still decide which fields come back.
    """

    listing = ListingInput.model_validate(_request_options(raw))
    if listing.lang is None:
        listing = listing.model_copy(update={"lang": settings.default_lang})
    outcome = LlmOutcome.failure(INTERNAL_EXCEPTION, str(exc) or exc.__class__.__name__)
    return compose_response(listing, outcome)


def describe_listing(raw: Any, settings: Settings, *, trace_id: str | None = None) -> DescribeResponse:
    """Run the whole pipeline for one request body. Raises only if fallback itself breaks."""

    try:
        listing = normalise_listing(raw, settings)
        outcome = request_copy(listing, settings.openai, trace_id=trace_id)
        response = compose_response(listing, outcome)
    except Exception as exc:
        logger.exception("describe pipeline failed; serving fallback copy", extra={"trace": trace_id})
        return emergency_response(settings, exc, raw)

    logger.info(
        "describe completed",
        extra={
            "trace": trace_id,
            "source": response.source,
            "llm_status": response.llm_status,
            "mode": listing.mode,
            "style": listing.style,
            "length": listing.length,
            "lang": listing.lang,
        },
    )
    return response


__all__ = [
    "MAX_ERROR_CHARS",
    "MISSING_KEY_ERROR",
    "compose_response",
    "describe_listing",
    "emergency_response",
    "source_tag",
    "status_label",
]
