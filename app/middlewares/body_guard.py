"""Reject oversized request bodies before they reach the copy pipeline."""
from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger("listing-copy.body-guard")

DEFAULT_MAX_BODY_BYTES = 262144  # 256 KiB


class BodyGuardMiddleware(BaseHTTPMiddleware):
    """Answer 413 for POST bodies above ``max_bytes`` on API paths."""

    WATCH_PATH_PREFIXES = ("/api/",)

    def __init__(self, app, *, max_bytes: int | None = None, **_: Any) -> None:  # type: ignore[override]
        self.max_body_bytes = self._normalise_limit(max_bytes, DEFAULT_MAX_BODY_BYTES)
        super().__init__(app)

    @staticmethod
    def _normalise_limit(candidate: int | None, fallback: int) -> int | None:
        if candidate is None:
            candidate = fallback
        if candidate <= 0:
            return None
        return candidate

    def _too_large(self, content_length: int | None, body_len: int) -> bool:
        if self.max_body_bytes is None:
            return False
        if content_length and content_length > self.max_body_bytes:
            return True
        return body_len > self.max_body_bytes

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if request.method not in {"POST", "PUT", "PATCH"}:
            return await call_next(request)

        path = request.url.path
        if not any(path.startswith(prefix) for prefix in self.WATCH_PATH_PREFIXES):
            return await call_next(request)

        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        start = time.time()

        content_length_header = request.headers.get("content-length")
        try:
            content_length = int(content_length_header) if content_length_header else None
        except (TypeError, ValueError):
            content_length = None

        size = content_length or 0
        if not self._too_large(content_length, size):
            body = await request.body()
            size = len(body)

        if self._too_large(content_length, size):
            logger.warning(
                "[guard] rid=%s path=%s blocked size=%s limit=%s",
                rid,
                path,
                size,
                self.max_body_bytes,
            )
            return JSONResponse(
                status_code=413,
                content={
                    "ok": False,
                    "error": "REQUEST_BODY_BLOCKED",
                    "reason": f"oversize:{size}",
                    "hint": "Send photo URLs, not inline image data.",
                },
            )

        response = await call_next(request)
        logger.debug(
            "[guard] rid=%s done status=%s dur_ms=%s",
            rid,
            response.status_code,
            int((time.time() - start) * 1000),
        )
        return response


__all__ = ["BodyGuardMiddleware"]
