"""Notification sink port.

Informs external listeners (dashboards, operator consoles) when a meeting
crosses into or out of "ready to validate". Callers may report readiness
on every status poll; the sink forwards only actual changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from assembly_engine.domain.models.workflow import ReadinessReport


class NotificationSinkProtocol(ABC):
    @abstractmethod
    async def emit_readiness_transitions(
        self,
        meeting_id: UUID,
        readiness: ReadinessReport,
    ) -> None:
        """Report the latest readiness. Idempotent, must not raise."""
        ...
