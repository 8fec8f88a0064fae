"""Bounded-retry wrapper around an audit sink that may raise.

Attempts ``1 + max_retries`` deliveries with exponential backoff
(``backoff_seconds * 2 ** attempt``). A record that still fails is logged
as ``audit_event_dropped`` and discarded; the caller never sees the error.
"""

from __future__ import annotations

import asyncio

from structlog import get_logger

from assembly_engine.application.ports.audit_sink import AuditRecord, AuditSinkProtocol

logger = get_logger()


class RetryingAuditSink(AuditSinkProtocol):
    def __init__(
        self,
        inner: AuditSinkProtocol,
        max_retries: int = 3,
        backoff_seconds: float = 0.5,
    ) -> None:
        self._inner = inner
        self._max_retries = max_retries
        self._backoff_seconds = backoff_seconds

    async def record(self, record: AuditRecord) -> None:
        log = logger.bind(
            event_type=record.event_type,
            resource_type=record.resource_type,
            resource_id=str(record.resource_id),
        )
        attempts = self._max_retries + 1
        for attempt in range(attempts):
            try:
                await self._inner.record(record)
                return
            except Exception as e:
                log.warning("audit_delivery_error", error=str(e), attempt=attempt + 1)
            if attempt < attempts - 1 and self._backoff_seconds > 0:
                await asyncio.sleep(self._backoff_seconds * 2**attempt)

        log.error(
            "audit_event_dropped",
            tenant_id=str(record.tenant_id),
            attempts=attempts,
            payload=record.payload,
        )
