from __future__ import annotations

import logging
import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.metrics import observe_http_request, resolve_http_path_label


logger = logging.getLogger("app.request")

# Query inputs worth carrying on the request log line.
_QUERY_FIELDS = {"persona": "persona", "userId": "user_id"}


def _request_fields(request: Request, status_code: int, started: float) -> dict[str, Any]:
    duration = time.perf_counter() - started
    path = resolve_http_path_label(request)
    observe_http_request(method=request.method, path=path, status=status_code, duration=duration)

    fields: dict[str, Any] = {
        "method": request.method,
        "path": path,
        "status_code": status_code,
        "duration_ms": round(duration * 1000, 2),
    }
    for param, field_name in _QUERY_FIELDS.items():
        value = request.query_params.get(param)
        if value:
            fields[field_name] = value
    return fields


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.error("http.error", exc_info=True, extra=_request_fields(request, 500, started))
            raise

        logger.info("http.request", extra=_request_fields(request, response.status_code, started))
        return response
