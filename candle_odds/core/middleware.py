from __future__ import annotations

import time
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from loguru import logger

from candle_odds.core.settings import settings
from candle_odds.utils.request_context import request_id_var


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Assign a request id (echoed as x-request-id) and log one line per request."""

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or uuid4().hex
        token = request_id_var.set(rid)
        started = time.perf_counter()
        status: int | str = "error"
        try:
            response = await call_next(request)
            status = response.status_code
            response.headers["x-request-id"] = rid
            return response
        finally:
            if settings.PERF_LOG_ENABLED:
                elapsed_ms = (time.perf_counter() - started) * 1000.0
                level = "WARNING" if elapsed_ms >= settings.PERF_LOG_SLOW_MS else "INFO"
                logger.log(
                    level,
                    "HTTP {method} {path} -> {status} ({ms:.1f}ms)",
                    method=request.method,
                    path=request.url.path,
                    status=status,
                    ms=elapsed_ms,
                )
            request_id_var.reset(token)
