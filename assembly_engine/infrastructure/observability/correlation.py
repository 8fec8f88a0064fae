"""Correlation id and request scope for structured logs.

The request boundary sets a correlation id (from an incoming header or a
fresh one) and the tenant/caller of the RequestContext. Every log entry
emitted while handling that request then carries them, across awaits.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any
from uuid import uuid4

import structlog

from assembly_engine.domain.models.roles import RequestContext

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    return str(uuid4())


def get_correlation_id() -> str:
    """Current correlation id, empty string when none is set."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


@contextmanager
def request_scope(ctx: RequestContext, correlation_id: str | None = None) -> Iterator[str]:
    """Bind correlation id, tenant and caller for the duration of a request.

    Yields:
        The correlation id in effect.
    """
    cid = correlation_id or generate_correlation_id()
    token = _correlation_id.set(cid)
    with structlog.contextvars.bound_contextvars(
        tenant_id=str(ctx.tenant_id),
        actor=ctx.actor,
        system_role=ctx.system_role.value,
    ):
        try:
            yield cid
        finally:
            _correlation_id.reset(token)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor adding the current correlation id to each entry."""
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict
