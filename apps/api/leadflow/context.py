from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
route_var: ContextVar[str | None] = ContextVar("route", default=None)
command_var: ContextVar[str | None] = ContextVar("command", default=None)

_LOG_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "correlation_id": correlation_id_var,
    "route": route_var,
    "command": command_var,
}


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


@contextmanager
def request_scope(correlation_id: str, route: str) -> Iterator[None]:
    """Bind the request's correlation id and route label for everything it triggers."""
    correlation_token = correlation_id_var.set(correlation_id)
    route_token = route_var.set(route)
    try:
        yield
    finally:
        route_var.reset(route_token)
        correlation_id_var.reset(correlation_token)


@contextmanager
def command_scope(command: str) -> Iterator[None]:
    """Bind the running workflow command; nested commands restore the outer one."""
    token = command_var.set(command)
    try:
        yield
    finally:
        command_var.reset(token)


def get_log_context() -> dict[str, str | None]:
    return {key: var.get() for key, var in _LOG_CONTEXT_VARS.items()}
