"""Official result consolidation.

Writes the official for/against/abstain/total, decision and result hash
onto closed motions. Consolidation is always explicit: it is allowed only
while the meeting is closed or validated, runs under the meeting and
motion row locks, and is idempotent. Re-running it with unchanged inputs
yields the same official values and hash, and leaves the rows untouched.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from assembly_engine.application.ports.audit_sink import AuditRecord, AuditSinkProtocol
from assembly_engine.application.ports.governance_metrics import GovernanceMetricsProtocol
from assembly_engine.application.ports.governance_repository import (
    GovernanceRepositoryProtocol,
    GovernanceTransaction,
)
from assembly_engine.application.ports.policy_store import PolicyStoreProtocol
from assembly_engine.application.ports.time_authority import TimeAuthorityProtocol
from assembly_engine.application.services.authorization import (
    CONSOLIDATE_RESULTS,
    require_roles,
)
from assembly_engine.application.services.base import LoggingMixin
from assembly_engine.application.services.meeting_context import (
    MeetingContextLoader,
    ParticipationView,
)
from assembly_engine.application.services.unit_of_work import unit_of_work
from assembly_engine.config.governance_config import DEFAULT_GOVERNANCE_CONFIG, GovernanceConfig
from assembly_engine.domain.errors.not_found import MeetingNotFoundError, MotionNotFoundError
from assembly_engine.domain.errors.precondition import (
    ConsolidationNotAllowedError,
    MotionStateError,
)
from assembly_engine.domain.events.motion_events import (
    MOTION_CONSOLIDATED_EVENT_TYPE,
    MotionConsolidatedPayload,
)
from assembly_engine.domain.models.meeting import Meeting, MeetingStatus
from assembly_engine.domain.models.motion import Motion
from assembly_engine.domain.models.roles import RequestContext
from assembly_engine.domain.models.tally import OfficialResult

CONSOLIDATION_WINDOW = frozenset({MeetingStatus.CLOSED, MeetingStatus.VALIDATED})


class ConsolidationService(LoggingMixin):
    """Reconciles electronic ballots and manual counts into official results."""

    def __init__(
        self,
        repository: GovernanceRepositoryProtocol,
        policy_store: PolicyStoreProtocol,
        audit_sink: AuditSinkProtocol,
        time_authority: TimeAuthorityProtocol,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
        metrics: GovernanceMetricsProtocol | None = None,
    ) -> None:
        self._repository = repository
        self._context = MeetingContextLoader(policy_store, config)
        self._audit = audit_sink
        self._time = time_authority
        self._metrics = metrics
        self._init_logger(component="consolidation")

    async def consolidate_meeting(
        self,
        ctx: RequestContext,
        meeting_id: UUID,
    ) -> list[OfficialResult]:
        """Consolidate every closed, non-cancelled motion of a meeting.

        Returns:
            The official result of each motion, in agenda order.

        Raises:
            MeetingNotFoundError: Unknown meeting for this tenant.
            OperationForbiddenError: Caller lacks the required role.
            ConsolidationNotAllowedError: Meeting is not closed or validated.
            OperationFailedError: ``consolidation_failed`` on a store failure.
        """
        require_roles(ctx, meeting_id, "consolidate", CONSOLIDATE_RESULTS)
        log = self._log_operation("consolidate_meeting", meeting_id=str(meeting_id))

        async with unit_of_work(self._repository, ctx.tenant_id, "consolidation") as tx:
            meeting = await self._lock_meeting_in_window(tx, meeting_id)
            view = await self._context.participation(tx, meeting_id)
            motions = sorted(await tx.list_motions(meeting_id), key=lambda m: m.position)
            now = self._time.now()
            results: list[OfficialResult] = []
            changed: list[OfficialResult] = []
            for candidate in motions:
                if not candidate.is_closed or candidate.is_cancelled:
                    continue
                motion = await tx.lock_motion(candidate.id)
                if motion is None:
                    raise MotionNotFoundError(candidate.id)
                result, written = await self._consolidate(tx, meeting, motion, view, now)
                results.append(result)
                if written:
                    changed.append(result)

        await self._emit(ctx, meeting_id, changed, now)
        log.info("meeting_consolidated", motions=len(results), changed=len(changed))
        return results

    async def consolidate_motion(self, ctx: RequestContext, motion_id: UUID) -> OfficialResult:
        """Consolidate one closed motion.

        Raises:
            MotionNotFoundError: Unknown motion for this tenant.
            MotionStateError: ``motion_not_closed`` or ``motion_cancelled``.
            Plus the errors of ``consolidate_meeting``.
        """
        async with unit_of_work(self._repository, ctx.tenant_id, "consolidation") as tx:
            unlocked = await tx.get_motion(motion_id)
            if unlocked is None:
                raise MotionNotFoundError(motion_id)
            require_roles(ctx, unlocked.meeting_id, "consolidate", CONSOLIDATE_RESULTS)
            meeting = await self._lock_meeting_in_window(tx, unlocked.meeting_id)
            motion = await tx.lock_motion(motion_id)
            if motion is None:
                raise MotionNotFoundError(motion_id)
            if motion.is_cancelled:
                raise MotionStateError("motion_cancelled", motion_id, "Motion was cancelled")
            if not motion.is_closed:
                raise MotionStateError("motion_not_closed", motion_id, "Motion is not closed")
            view = await self._context.participation(tx, meeting.id)
            now = self._time.now()
            result, written = await self._consolidate(tx, meeting, motion, view, now)

        await self._emit(ctx, meeting.id, [result] if written else [], now)
        self._log_operation("consolidate_motion", motion_id=str(motion_id)).info(
            "motion_consolidated",
            decision=result.decision.value,
            source=result.source.value,
            changed=written,
        )
        return result

    async def _consolidate(
        self,
        tx: GovernanceTransaction,
        meeting: Meeting,
        motion: Motion,
        view: ParticipationView,
        now: datetime,
    ) -> tuple[OfficialResult, bool]:
        decision = await self._context.motion_decision(tx, meeting, motion, view)
        result = OfficialResult.from_decision(motion.id, decision)
        current = motion.official_result
        if current is not None and current.result_hash == result.result_hash:
            return current, False
        await tx.save_motion(motion.with_official_result(result, now))
        return result, True

    async def _lock_meeting_in_window(self, tx: GovernanceTransaction, meeting_id: UUID) -> Meeting:
        meeting = await tx.lock_meeting(meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(meeting_id)
        if meeting.status not in CONSOLIDATION_WINDOW:
            raise ConsolidationNotAllowedError(meeting_id, meeting.status.value)
        return meeting

    async def _emit(
        self,
        ctx: RequestContext,
        meeting_id: UUID,
        results: list[OfficialResult],
        now: datetime,
    ) -> None:
        for result in results:
            await self._audit.record(
                AuditRecord(
                    event_type=MOTION_CONSOLIDATED_EVENT_TYPE,
                    resource_type="motion",
                    resource_id=result.motion_id,
                    tenant_id=ctx.tenant_id,
                    meeting_id=meeting_id,
                    payload=MotionConsolidatedPayload(
                        meeting_id=meeting_id,
                        result=result,
                        actor=ctx.actor,
                        consolidated_at=now,
                    ).to_dict(),
                )
            )
            if self._metrics is not None:
                self._metrics.record_consolidation(result.source.value, result.decision.value)
