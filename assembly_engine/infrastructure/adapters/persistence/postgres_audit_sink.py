"""Audit records appended to the ``audit_events`` table.

Raises on database errors; wrap it in RetryingAuditSink before handing
it to the services.
"""

from __future__ import annotations

import json
from uuid import uuid4

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from assembly_engine.application.ports.audit_sink import AuditRecord, AuditSinkProtocol


class PostgresAuditSink(AuditSinkProtocol):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record(self, record: AuditRecord) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(
                    text("""
                        INSERT INTO audit_events (
                            id, tenant_id, meeting_id, event_type,
                            resource_type, resource_id, payload
                        ) VALUES (
                            :id, :tenant_id, :meeting_id, :event_type,
                            :resource_type, :resource_id, CAST(:payload AS JSONB)
                        )
                    """),
                    {
                        "id": uuid4(),
                        "tenant_id": record.tenant_id,
                        "meeting_id": record.meeting_id,
                        "event_type": record.event_type,
                        "resource_type": record.resource_type,
                        "resource_id": record.resource_id,
                        "payload": json.dumps(record.payload, default=str, sort_keys=True),
                    },
                )
