from __future__ import annotations

import uuid

from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from leadflow.context import request_scope
from leadflow.metrics import resolve_http_path_label

CORRELATION_HEADER = "x-correlation-id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind the correlation id and route label so workflow logs and spans carry them.

    Routing has not run yet here, so the route is the path with lead ids
    collapsed to ``{id}``.
    """

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        route = resolve_http_path_label(request)
        request.state.correlation_id = correlation_id

        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("correlation_id", correlation_id)
            span.set_attribute("leadflow.route", route)

        with request_scope(correlation_id, route):
            response = await call_next(request)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response
