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

leadflow_commands_total = Counter(
    "leadflow_commands_total",
    "Total workflow commands by outcome",
    ["command", "status"],
)

leadflow_command_duration_seconds = Histogram(
    "leadflow_command_duration_seconds",
    "Workflow command duration in seconds",
    ["command"],
)

leadflow_leads_archived_total = Counter(
    "leadflow_leads_archived_total",
    "Total leads moved to the archive sheet",
)


_LEAD_ID_RE = re.compile(r"/L-\d{8}-[0-9A-Z]{6}\b")
_PATH_PARAM_RE = re.compile(r"\{[^{}]+\}")


def _normalize_route_template(path: str) -> str:
    return _PATH_PARAM_RE.sub("{id}", path)


def _sanitize_path(path: str) -> str:
    return _LEAD_ID_RE.sub("/{id}", path)


def resolve_http_path_label(request: Request) -> str:
    route = request.scope.get("route")
    if route is not None:
        path_format = getattr(route, "path_format", None)
        if isinstance(path_format, str) and path_format:
            return _normalize_route_template(path_format)
        route_path = getattr(route, "path", None)
        if isinstance(route_path, str) and route_path:
            return _normalize_route_template(route_path)
    return _sanitize_path(request.url.path)


def observe_http_request(method: str, path: str, status: int, duration: float) -> None:
    status_str = str(status)
    http_requests_total.labels(method=method, path=path, status=status_str).inc()
    http_request_duration_seconds.labels(method=method, path=path).observe(duration)


def observe_command(command: str, status: str, duration: float) -> None:
    leadflow_commands_total.labels(command=command, status=status).inc()
    leadflow_command_duration_seconds.labels(command=command).observe(duration)


def observe_leads_archived(count: int) -> None:
    if count > 0:
        leadflow_leads_archived_total.inc(count)


def generate_metrics_payload() -> bytes:
    return generate_latest()


def metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
