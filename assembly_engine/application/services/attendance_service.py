"""Attendance check-in.

Attendance changes quorum, so it is written under the meeting row lock.
It is immutable once the meeting is validated.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from assembly_engine.application.ports.audit_sink import AuditRecord, AuditSinkProtocol
from assembly_engine.application.ports.governance_repository import GovernanceRepositoryProtocol
from assembly_engine.application.ports.time_authority import TimeAuthorityProtocol
from assembly_engine.application.services.authorization import MANAGE_ATTENDANCE, require_roles
from assembly_engine.application.services.base import LoggingMixin
from assembly_engine.application.services.unit_of_work import unit_of_work
from assembly_engine.domain.errors.not_found import MeetingNotFoundError, MemberNotFoundError
from assembly_engine.domain.errors.precondition import MeetingStateError
from assembly_engine.domain.events.motion_events import ATTENDANCE_RECORDED_EVENT_TYPE
from assembly_engine.domain.models.attendance import Attendance, AttendanceMode
from assembly_engine.domain.models.roles import RequestContext


class AttendanceService(LoggingMixin):
    """Records the attendance rows that quorum and proxy resolution read."""

    def __init__(
        self,
        repository: GovernanceRepositoryProtocol,
        audit_sink: AuditSinkProtocol,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._repository = repository
        self._audit = audit_sink
        self._time = time_authority
        self._init_logger(component="attendance")

    async def record_attendance(
        self,
        ctx: RequestContext,
        meeting_id: UUID,
        member_id: UUID,
        mode: AttendanceMode,
        present_from_at: datetime | None = None,
    ) -> Attendance:
        """Create or update a member's attendance.

        The member's voting power is snapshotted. For in-person and remote
        modes ``present_from_at`` defaults to now, and an earlier arrival
        time already on record is kept.

        Raises:
            MeetingStateError: ``attendance_locked`` once validated.
            MemberNotFoundError: Unknown member for this tenant.
        """
        require_roles(ctx, meeting_id, "record_attendance", MANAGE_ATTENDANCE)
        async with unit_of_work(self._repository, ctx.tenant_id, "attendance") as tx:
            meeting = await tx.lock_meeting(meeting_id)
            if meeting is None:
                raise MeetingNotFoundError(meeting_id)
            if meeting.status.results_locked:
                raise MeetingStateError(
                    "attendance_locked",
                    meeting_id,
                    meeting.status.value,
                    "Attendance is immutable once the meeting is validated",
                )
            member = await tx.get_member(member_id)
            if member is None:
                raise MemberNotFoundError(member_id)

            arrived: datetime | None = None
            if mode.is_direct:
                previous = await tx.get_attendance(meeting_id, member_id)
                if present_from_at is not None:
                    arrived = present_from_at
                elif previous is not None and previous.mode.is_direct:
                    arrived = previous.present_from_at
                else:
                    arrived = self._time.now()

            attendance = Attendance(
                meeting_id=meeting_id,
                member_id=member_id,
                tenant_id=ctx.tenant_id,
                mode=mode,
                voting_power=member.voting_power,
                present_from_at=arrived,
            )
            await tx.save_attendance(attendance)

        await self._audit.record(
            AuditRecord(
                event_type=ATTENDANCE_RECORDED_EVENT_TYPE,
                resource_type="attendance",
                resource_id=member_id,
                tenant_id=ctx.tenant_id,
                meeting_id=meeting_id,
                payload={
                    "actor": ctx.actor,
                    "mode": mode.value,
                    "voting_power": attendance.voting_power,
                    "present_from_at": arrived.isoformat() if arrived else None,
                },
            )
        )
        self._log_operation(
            "record_attendance", meeting_id=str(meeting_id), member_id=str(member_id)
        ).info("attendance_recorded", mode=mode.value)
        return attendance
