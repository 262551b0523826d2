"""
Request ids.

Every request gets an id, taken from ``X-Request-ID`` when the caller sends
a usable one. The id is echoed on the response and attached to every log
record emitted while the request is handled.
"""

import re
import time
import uuid
from contextvars import ContextVar
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from food_shared.config.logging import api_logger as logger

REQUEST_ID_HEADER = "X-Request-ID"

# Ids end up in log lines; anything else is replaced
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(header_value: str | None) -> str:
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Binds the request id and logs one line per request with its duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            request.state.request_id = request_id
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.debug(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            return response
        finally:
            request_id_var.reset(token)


class RequestIdLogFilter:
    """Logging filter setting ``record.request_id`` ("-" outside requests)."""

    def filter(self, record) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True
