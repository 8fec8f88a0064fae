"""Observability: structlog configuration and request correlation."""

from assembly_engine.infrastructure.observability.correlation import (
    correlation_id_processor,
    generate_correlation_id,
    get_correlation_id,
    request_scope,
    set_correlation_id,
)
from assembly_engine.infrastructure.observability.logging import configure_structlog

__all__: list[str] = [
    "configure_structlog",
    "correlation_id_processor",
    "generate_correlation_id",
    "get_correlation_id",
    "request_scope",
    "set_correlation_id",
]
