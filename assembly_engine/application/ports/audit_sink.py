"""Audit sink port.

The engine emits one audit record per committed change. Storing those
records (and chaining their hashes) belongs to the audit log, not to the
engine. Implementations must never raise into the caller: delivery is
best effort from the engine's point of view, with any retry handled
inside the sink.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class AuditRecord:
    """One audit event as handed to the sink."""

    event_type: str
    resource_type: str
    resource_id: UUID
    tenant_id: UUID
    payload: dict[str, Any] = field(default_factory=dict)
    meeting_id: UUID | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type,
            "resource_type": self.resource_type,
            "resource_id": str(self.resource_id),
            "tenant_id": str(self.tenant_id),
            "meeting_id": str(self.meeting_id) if self.meeting_id else None,
            "payload": self.payload,
        }


class AuditSinkProtocol(ABC):
    @abstractmethod
    async def record(self, record: AuditRecord) -> None:
        """Deliver an audit record. Must not raise."""
        ...
