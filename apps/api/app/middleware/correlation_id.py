from __future__ import annotations

import uuid

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.context import correlation_scope


CORRELATION_HEADER = "x-correlation-id"
_MAX_LENGTH = 128


def _incoming_correlation_id(request: Request) -> str:
    raw = (request.headers.get(CORRELATION_HEADER) or "").strip()
    if not raw or len(raw) > _MAX_LENGTH:
        return str(uuid.uuid4())
    return raw


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        correlation_id = _incoming_correlation_id(request)
        request.state.correlation_id = correlation_id
        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("correlation_id", correlation_id)
        with correlation_scope(correlation_id):
            response = await call_next(request)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response
