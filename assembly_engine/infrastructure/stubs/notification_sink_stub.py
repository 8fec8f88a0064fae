"""Notification sink stub keeping readiness changes in memory."""

from __future__ import annotations

from uuid import UUID

from assembly_engine.application.ports.notification_sink import NotificationSinkProtocol
from assembly_engine.domain.models.workflow import ReadinessChange, ReadinessReport
from assembly_engine.domain.services.readiness_diff import diff_readiness


class NotificationSinkStub(NotificationSinkProtocol):
    def __init__(self) -> None:
        self.reports: list[tuple[UUID, ReadinessReport]] = []
        self.changes: list[ReadinessChange] = []
        self._last: dict[UUID, ReadinessReport] = {}

    async def emit_readiness_transitions(
        self,
        meeting_id: UUID,
        readiness: ReadinessReport,
    ) -> None:
        self.reports.append((meeting_id, readiness))
        change = diff_readiness(meeting_id, self._last.get(meeting_id), readiness)
        self._last[meeting_id] = readiness
        if change is not None:
            self.changes.append(change)

    def clear(self) -> None:
        self.reports.clear()
        self.changes.clear()
        self._last.clear()
