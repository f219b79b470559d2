from __future__ import annotations

import re

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.requests import Request


http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)

sales_opportunity_writes_total = Counter(
    "sales_opportunity_writes_total",
    "Total sales opportunity writes by operation",
    ["operation"],
)

sales_dashboard_queries_total = Counter(
    "sales_dashboard_queries_total",
    "Total dashboard queries by view and persona",
    ["view", "persona"],
)


_UUID_RE = re.compile(
    r"\b[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[1-5][0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}\b"
)


def resolve_http_path_label(request: Request) -> str:
    route = request.scope.get("route")
    route_path = getattr(route, "path_format", None) or getattr(route, "path", None)
    if isinstance(route_path, str) and route_path:
        return route_path
    return _UUID_RE.sub("{id}", request.url.path)


def observe_http_request(method: str, path: str, status: int, duration: float) -> None:
    http_requests_total.labels(method=method, path=path, status=str(status)).inc()
    http_request_duration_seconds.labels(method=method, path=path).observe(duration)


def observe_opportunity_write(operation: str) -> None:
    sales_opportunity_writes_total.labels(operation=operation).inc()


def observe_dashboard_query(view: str, persona: str) -> None:
    sales_dashboard_queries_total.labels(view=view, persona=persona).inc()


def generate_metrics_payload() -> bytes:
    return generate_latest()


def metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
