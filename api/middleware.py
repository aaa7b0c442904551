"""
Access-log middleware: request ids, timing and the acting user.
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_REQUEST_ID_LENGTH = 64
# Polled by load balancers; not worth an access line each time.
_QUIET_PATHS = frozenset({"/api/health"})


def _request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if incoming and len(incoming) <= _MAX_REQUEST_ID_LENGTH and incoming.isprintable():
        return incoming
    return uuid.uuid4().hex


def register_middleware(app: FastAPI) -> None:
    """Attach the access-log middleware."""

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        request_id = _request_id(request)
        request.state.request_id = request_id
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = f"{elapsed_ms / 1000.0:.4f}"

        if request.url.path in _QUIET_PATHS:
            return response
        # Set by the bearer-token gate; absent on public routes and 401s.
        user = getattr(request.state, "user", None)
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s %s -> %d in %.1f ms (user=%s)",
            request_id, request.method, request.url.path, response.status_code,
            elapsed_ms, user.id if user is not None else "-",
        )
        return response
