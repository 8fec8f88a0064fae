"""Motion lifecycle: open, close, cancel and manual counts.

Every operation locks the meeting row, then the motion row, so racing
operators serialize. A meeting has at most one open motion.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any
from uuid import UUID

from assembly_engine.application.ports.audit_sink import AuditRecord, AuditSinkProtocol
from assembly_engine.application.ports.governance_repository import (
    GovernanceRepositoryProtocol,
    GovernanceTransaction,
)
from assembly_engine.application.ports.policy_store import PolicyStoreProtocol
from assembly_engine.application.ports.time_authority import TimeAuthorityProtocol
from assembly_engine.application.services.authorization import (
    MANAGE_MOTIONS,
    RECORD_MANUAL_TALLY,
    require_roles,
)
from assembly_engine.application.services.base import LoggingMixin
from assembly_engine.application.services.unit_of_work import unit_of_work
from assembly_engine.domain.errors.consistency import InvalidManualTallyError
from assembly_engine.domain.errors.not_found import MeetingNotFoundError, MotionNotFoundError
from assembly_engine.domain.errors.precondition import MeetingStateError, MotionStateError
from assembly_engine.domain.events.motion_events import (
    MANUAL_TALLY_RECORDED_EVENT_TYPE,
    MOTION_CANCELLED_EVENT_TYPE,
    MOTION_CLOSED_EVENT_TYPE,
    MOTION_OPENED_EVENT_TYPE,
)
from assembly_engine.domain.models.meeting import Meeting, MeetingStatus
from assembly_engine.domain.models.motion import Motion
from assembly_engine.domain.models.roles import RequestContext
from assembly_engine.domain.models.tally import Decision, ManualTally

VOTING_STATUSES = frozenset({MeetingStatus.LIVE, MeetingStatus.PAUSED})


class MotionService(LoggingMixin):
    """Opens, closes and cancels motions, and records manual counts.

    Closing a motion ends its voting window. Its result is written later,
    by consolidation.
    """

    def __init__(
        self,
        repository: GovernanceRepositoryProtocol,
        policy_store: PolicyStoreProtocol,
        audit_sink: AuditSinkProtocol,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._repository = repository
        self._policies = policy_store
        self._audit = audit_sink
        self._time = time_authority
        self._init_logger(component="motions")

    async def open_motion(self, ctx: RequestContext, motion_id: UUID) -> Motion:
        """Open a motion for voting and make it the meeting's current motion.

        Policy ids are pinned on the motion when it opens: motion override,
        else meeting default, else the tenant default.

        Raises:
            MeetingStateError: ``meeting_not_live``.
            MotionStateError: ``motion_already_opened``, ``motion_cancelled``
                or ``another_motion_open``.
        """
        async with unit_of_work(self._repository, ctx.tenant_id, "motion_open") as tx:
            meeting, motion = await self._lock(tx, ctx, motion_id, "open_motion")
            if meeting.status is not MeetingStatus.LIVE:
                raise MeetingStateError(
                    "meeting_not_live",
                    meeting.id,
                    meeting.status.value,
                    "Motions can only be opened while the meeting is live",
                )
            if motion.is_cancelled:
                raise MotionStateError("motion_cancelled", motion_id, "Motion was cancelled")
            if motion.opened_at is not None:
                raise MotionStateError(
                    "motion_already_opened", motion_id, "Motion was already opened"
                )
            others = [m for m in await tx.list_motions(meeting.id) if m.is_open]
            if others:
                raise MotionStateError(
                    "another_motion_open",
                    motion_id,
                    f"Motion {others[0].id} is still open",
                )

            quorum_policy_id = motion.quorum_policy_id or meeting.quorum_policy_id
            if quorum_policy_id is None:
                default_quorum = await self._policies.default_quorum_policy(ctx.tenant_id)
                quorum_policy_id = default_quorum.id if default_quorum else None
            vote_policy_id = motion.vote_policy_id or meeting.vote_policy_id
            if vote_policy_id is None:
                default_vote = await self._policies.default_vote_policy(ctx.tenant_id)
                vote_policy_id = default_vote.id if default_vote else None

            now = self._time.now()
            opened = replace(
                motion,
                opened_at=now,
                quorum_policy_id=quorum_policy_id,
                vote_policy_id=vote_policy_id,
            )
            await tx.save_motion(opened)
            await tx.save_meeting(meeting.with_changes(current_motion_id=motion_id))

        await self._record(
            ctx,
            MOTION_OPENED_EVENT_TYPE,
            opened,
            {
                "opened_at": now.isoformat(),
                "quorum_policy_id": str(quorum_policy_id) if quorum_policy_id else None,
                "vote_policy_id": str(vote_policy_id) if vote_policy_id else None,
            },
        )
        return opened

    async def close_motion(self, ctx: RequestContext, motion_id: UUID) -> Motion:
        """Close an open motion. Does not consolidate its result."""
        async with unit_of_work(self._repository, ctx.tenant_id, "motion_close") as tx:
            meeting, motion = await self._lock(tx, ctx, motion_id, "close_motion")
            if meeting.status not in VOTING_STATUSES:
                raise MeetingStateError(
                    "meeting_not_live",
                    meeting.id,
                    meeting.status.value,
                    "Motions can only be closed while the meeting is live or paused",
                )
            if not motion.is_open:
                raise MotionStateError("motion_not_open", motion_id, "Motion is not open")
            now = self._time.now()
            closed = replace(motion, closed_at=now)
            await tx.save_motion(closed)
            if meeting.current_motion_id == motion_id:
                await tx.save_meeting(meeting.with_changes(current_motion_id=None))

        await self._record(ctx, MOTION_CLOSED_EVENT_TYPE, closed, {"closed_at": now.isoformat()})
        return closed

    async def cancel_motion(self, ctx: RequestContext, motion_id: UUID, reason: str) -> Motion:
        """Withdraw a motion from the agenda. An open motion is closed as well.

        Raises:
            MeetingStateError: ``meeting_locked`` once closed or later.
            MotionStateError: ``motion_already_closed``.
        """
        async with unit_of_work(self._repository, ctx.tenant_id, "motion_cancel") as tx:
            meeting, motion = await self._lock(tx, ctx, motion_id, "cancel_motion")
            self._require_unlocked(meeting)
            if motion.is_closed:
                raise MotionStateError(
                    "motion_already_closed", motion_id, "A closed motion cannot be cancelled"
                )
            now = self._time.now()
            cancelled = replace(
                motion,
                closed_at=now if motion.is_open else None,
                decision=Decision.CANCELLED,
                decision_reason=reason.strip() or "Cancelled",
            )
            await tx.save_motion(cancelled)
            if meeting.current_motion_id == motion_id:
                await tx.save_meeting(meeting.with_changes(current_motion_id=None))

        await self._record(ctx, MOTION_CANCELLED_EVENT_TYPE, cancelled, {"reason": reason})
        return cancelled

    async def record_manual_tally(
        self,
        ctx: RequestContext,
        motion_id: UUID,
        tally: ManualTally,
        justification: str,
    ) -> Motion:
        """Store an operator-entered count for a motion.

        The count is rejected unless total > 0, no part is negative, no
        part exceeds the total and the parts sum to the total. A
        justification is mandatory.

        Raises:
            InvalidManualTallyError: Count or justification invalid.
            MeetingStateError: ``meeting_locked`` once validated.
            MotionStateError: ``motion_not_opened``.
        """
        if not justification or not justification.strip():
            raise InvalidManualTallyError(motion_id, "a justification is required")
        problems = tally.problems()
        if problems:
            raise InvalidManualTallyError(motion_id, "; ".join(problems))

        async with unit_of_work(self._repository, ctx.tenant_id, "manual_tally") as tx:
            motion = await self._get_motion(tx, motion_id)
            require_roles(ctx, motion.meeting_id, "record_manual_tally", RECORD_MANUAL_TALLY)
            meeting, motion = await self._lock(tx, ctx, motion_id, None)
            if meeting.status.results_locked:
                raise MeetingStateError(
                    "meeting_locked",
                    meeting.id,
                    meeting.status.value,
                    "Results are locked once the meeting is validated",
                )
            if motion.opened_at is None:
                raise MotionStateError(
                    "motion_not_opened", motion_id, "Motion was never opened"
                )
            updated = motion.with_manual_tally(tally, justification.strip())
            await tx.save_motion(updated)

        await self._record(
            ctx,
            MANUAL_TALLY_RECORDED_EVENT_TYPE,
            updated,
            {
                "for": tally.for_weight,
                "against": tally.against_weight,
                "abstain": tally.abstain_weight,
                "total": tally.total,
                "justification": justification.strip(),
            },
        )
        return updated

    async def _get_motion(self, tx: GovernanceTransaction, motion_id: UUID) -> Motion:
        motion = await tx.get_motion(motion_id)
        if motion is None:
            raise MotionNotFoundError(motion_id)
        return motion

    async def _lock(
        self,
        tx: GovernanceTransaction,
        ctx: RequestContext,
        motion_id: UUID,
        operation: str | None,
    ) -> tuple[Meeting, Motion]:
        """Lock meeting then motion, checking roles first when ``operation`` is set."""
        unlocked = await self._get_motion(tx, motion_id)
        if operation is not None:
            require_roles(ctx, unlocked.meeting_id, operation, MANAGE_MOTIONS)
        meeting = await tx.lock_meeting(unlocked.meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(unlocked.meeting_id)
        if meeting.is_archived:
            raise MeetingStateError(
                "meeting_locked", meeting.id, meeting.status.value, "Meeting is archived"
            )
        motion = await tx.lock_motion(motion_id)
        if motion is None:
            raise MotionNotFoundError(motion_id)
        return meeting, motion

    @staticmethod
    def _require_unlocked(meeting: Meeting) -> None:
        if meeting.status in (MeetingStatus.CLOSED, MeetingStatus.VALIDATED):
            raise MeetingStateError(
                "meeting_locked",
                meeting.id,
                meeting.status.value,
                "The agenda cannot change once the meeting is closed",
            )

    async def _record(
        self,
        ctx: RequestContext,
        event_type: str,
        motion: Motion,
        payload: dict[str, Any],
    ) -> None:
        await self._audit.record(
            AuditRecord(
                event_type=event_type,
                resource_type="motion",
                resource_id=motion.id,
                tenant_id=ctx.tenant_id,
                meeting_id=motion.meeting_id,
                payload={"actor": ctx.actor, **payload},
            )
        )
        self._log_operation(event_type, motion_id=str(motion.id)).info("motion_updated")
