from __future__ import annotations

import json
import logging
import os
import uuid
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.config import get_settings
from app.middlewares.body_guard import BodyGuardMiddleware
from app.schemas import DescribeResponse, ServiceInfo
from app.services.composer import describe_listing

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# keep uvicorn loggers on the same level as the service
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("uvicorn").setLevel(LOG_LEVEL)
logging.getLogger("uvicorn.error").setLevel(LOG_LEVEL)
logging.getLogger("uvicorn.access").setLevel(LOG_LEVEL)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("listing-copy").setLevel(LOG_LEVEL)

log = logging.getLogger("listing-copy")

DESCRIBE_PATH = "/api/ai/describe"

app = FastAPI(title="Listing Copy Relay", version="1.0.0")

settings = get_settings()

app.add_middleware(BodyGuardMiddleware, max_bytes=settings.guard.max_body_bytes)
log.info("BodyGuardMiddleware ready", extra={"max_body_bytes": settings.guard.max_body_bytes})

cors_allow_origins = settings.allowed_origins or ["*"]
allow_all = "*" in cors_allow_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all else cors_allow_origins,
    allow_credentials=not allow_all,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=86400,
)


@app.middleware("http")
async def attach_trace_id(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    trace = _ensure_trace_id(request)
    response = await call_next(request)
    response.headers["X-Request-Trace"] = trace
    return response


def _ensure_trace_id(request: Request) -> str:
    trace = getattr(request.state, "trace_id", None)
    if not trace:
        trace = (request.headers.get("X-Request-ID") or uuid.uuid4().hex)[:8]
        request.state.trace_id = trace
    return trace


async def read_json_relaxed(request: Request) -> Any:
    """Request body as JSON; empty or broken bodies read as ``{}``."""

    body = await request.body()
    if not body:
        return {}
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        log.warning(
            "describe body is not valid JSON; treating as empty",
            extra={"trace": getattr(request.state, "trace_id", None), "body_bytes": len(body)},
        )
        return {}


@app.get("/", include_in_schema=False)
def root() -> dict[str, Any]:
    return {"service": "listing-copy", "ok": True}


@app.head("/", include_in_schema=False)
def root_head() -> Response:
    return Response(status_code=200)


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


@app.get(DESCRIBE_PATH, response_model=ServiceInfo)
def describe_info() -> ServiceInfo:
    return ServiceInfo(
        name="listing-copy",
        path=DESCRIBE_PATH,
        methods=["POST"],
        usage=(
            "POST JSON {title, address, price, bedrooms|rooms, bathrooms, area, notes, images, "
            'style: "both"|"business"|"emotional", mode: "title"|"descriptions"|"all", '
            'length: "short"|"medium"|"long", useImages, lang: "en"|"ru"} '
            "-> {ok, source, llm_status, llm_error?, title?, texts?: {business, emotional}}"
        ),
    )


@app.post(DESCRIBE_PATH, response_model=DescribeResponse)
async def describe(request: Request) -> JSONResponse:
    trace = _ensure_trace_id(request)
    try:
        raw_payload = await read_json_relaxed(request)
        log.info(
            "describe request received",
            extra={
                "trace": trace,
                "content_length": request.headers.get("content-length"),
                "keys": sorted(raw_payload)[:20] if isinstance(raw_payload, dict) else None,
            },
        )
        result = await run_in_threadpool(
            describe_listing, raw_payload, get_settings(), trace_id=trace
        )
        return JSONResponse(content=result.model_dump(exclude_none=True))
    except Exception:  # fallback composition itself failed
        log.exception("describe failed without a fallback", extra={"trace": trace})
        return JSONResponse({"ok": False, "error": "AI_FATAL"}, status_code=500)


__all__ = ["app"]
