"""Meeting lifecycle workflow service.

Orchestrates status transitions: structural check against the transition
table, role check, readiness rules, then side effects, all under a row
lock on the meeting. Audit events, metrics and readiness notifications
are emitted only after the transaction has committed.
"""

from __future__ import annotations

from dataclasses import replace
from uuid import UUID

from assembly_engine.application.ports.audit_sink import AuditRecord, AuditSinkProtocol
from assembly_engine.application.ports.governance_metrics import GovernanceMetricsProtocol
from assembly_engine.application.ports.governance_repository import (
    GovernanceRepositoryProtocol,
    GovernanceTransaction,
)
from assembly_engine.application.ports.notification_sink import NotificationSinkProtocol
from assembly_engine.application.ports.policy_store import PolicyStoreProtocol
from assembly_engine.application.ports.time_authority import TimeAuthorityProtocol
from assembly_engine.application.services.base import LoggingMixin
from assembly_engine.application.services.meeting_context import MeetingContextLoader
from assembly_engine.application.services.unit_of_work import unit_of_work
from assembly_engine.config.governance_config import (
    DEFAULT_GOVERNANCE_CONFIG,
    GovernanceConfig,
)
from assembly_engine.domain.errors.authorization import (
    ForceRequiresAdminError,
    TransitionForbiddenError,
)
from assembly_engine.domain.errors.not_found import MeetingNotFoundError
from assembly_engine.domain.errors.precondition import WorkflowIssuesError
from assembly_engine.domain.errors.structural import (
    AlreadyInStatusError,
    ArchivedImmutableError,
    InvalidLaunchStatusError,
)
from assembly_engine.domain.events.meeting_events import (
    MEETING_LAUNCHED_EVENT_TYPE,
    MEETING_TRANSITIONED_EVENT_TYPE,
    MeetingLaunchedPayload,
    MeetingTransitionedPayload,
)
from assembly_engine.domain.exceptions import GovernanceError
from assembly_engine.domain.models.meeting import Meeting, MeetingStatus
from assembly_engine.domain.models.roles import RequestContext
from assembly_engine.domain.models.snapshot import MeetingSnapshot
from assembly_engine.domain.models.workflow import (
    LaunchOutcome,
    ReadinessReport,
    TransitionOption,
    TransitionOutcome,
)
from assembly_engine.domain.services.readiness_rules import evaluate_readiness
from assembly_engine.domain.services.transition_effects import apply_transition
from assembly_engine.domain.services.transition_table import (
    LAUNCH_PATHS,
    check_structure,
    is_authorized,
    outgoing,
)


class MeetingWorkflowService(LoggingMixin):
    """Lifecycle transitions and readiness for meetings.

    Authorization: a hop is allowed for admins, for callers whose system
    role equals the required role, and for callers holding the required
    meeting-scoped role on this meeting. Only admins may ``force`` past
    blocking readiness issues; the override is written to the audit
    payload.
    """

    def __init__(
        self,
        repository: GovernanceRepositoryProtocol,
        policy_store: PolicyStoreProtocol,
        audit_sink: AuditSinkProtocol,
        notification_sink: NotificationSinkProtocol,
        time_authority: TimeAuthorityProtocol,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
        metrics: GovernanceMetricsProtocol | None = None,
    ) -> None:
        self._repository = repository
        self._context = MeetingContextLoader(policy_store, config)
        self._audit = audit_sink
        self._notifications = notification_sink
        self._time = time_authority
        self._metrics = metrics
        self._init_logger(component="workflow")

    # ------------------------------------------------------------------
    # Readiness (read-only)
    # ------------------------------------------------------------------

    async def issues_before_transition(
        self,
        ctx: RequestContext,
        meeting_id: UUID,
        to_status: MeetingStatus,
    ) -> ReadinessReport:
        """Evaluate readiness for one hop without locking or writing anything.

        Raises:
            MeetingNotFoundError: If the meeting does not exist for this tenant.
        """
        async with unit_of_work(self._repository, ctx.tenant_id, "readiness") as tx:
            meeting = await self._get_meeting(tx, meeting_id)
            snapshot = await self._context.snapshot(tx, meeting)
        return evaluate_readiness(snapshot, meeting.status, to_status)

    async def get_transition_readiness(
        self,
        ctx: RequestContext,
        meeting_id: UUID,
    ) -> list[TransitionOption]:
        """List every outgoing transition with its role and readiness."""
        async with unit_of_work(self._repository, ctx.tenant_id, "readiness") as tx:
            meeting = await self._get_meeting(tx, meeting_id)
            snapshot = await self._context.snapshot(tx, meeting)

        options = []
        for target, role in outgoing(meeting.status):
            options.append(
                TransitionOption(
                    to_status=target,
                    required_role=role.value,
                    authorized=is_authorized(ctx, meeting_id, role),
                    report=evaluate_readiness(snapshot, meeting.status, target),
                )
            )
        return options

    async def check_validation_readiness(
        self,
        ctx: RequestContext,
        meeting_id: UUID,
    ) -> ReadinessReport:
        """Readiness toward ``validated``, forwarded to the notification sink.

        Safe to call on every status poll: the sink only forwards changes.
        """
        async with unit_of_work(self._repository, ctx.tenant_id, "readiness") as tx:
            meeting = await self._get_meeting(tx, meeting_id)
            snapshot = await self._context.snapshot(tx, meeting)
        report = evaluate_readiness(snapshot, meeting.status, MeetingStatus.VALIDATED)
        await self._notifications.emit_readiness_transitions(meeting_id, report)
        return report

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def transition(
        self,
        ctx: RequestContext,
        meeting_id: UUID,
        to_status: MeetingStatus,
        force: bool = False,
    ) -> TransitionOutcome:
        """Move a meeting to ``to_status``.

        Args:
            ctx: Caller context.
            meeting_id: Meeting to transition.
            to_status: Requested status.
            force: Override blocking readiness issues (admin only).

        Returns:
            TransitionOutcome describing the applied change.

        Raises:
            MeetingNotFoundError: Unknown meeting for this tenant.
            ArchivedImmutableError: The meeting is archived.
            AlreadyInStatusError: ``to_status`` is the current status.
            InvalidTransitionError: No such edge in the transition table.
            TransitionForbiddenError: Caller lacks the required role.
            ForceRequiresAdminError: ``force`` requested by a non-admin.
            WorkflowIssuesError: Blocking readiness issues, without force.
            OperationFailedError: ``transition_failed`` on a store failure.
        """
        log = self._log_operation(
            "transition",
            meeting_id=str(meeting_id),
            to_status=to_status.value,
            forced=force,
        )
        try:
            async with unit_of_work(self._repository, ctx.tenant_id, "transition") as tx:
                meeting = await self._lock_meeting(tx, meeting_id)
                snapshot = await self._context.snapshot(tx, meeting)
                outcome, updated = self._apply_hop(ctx, snapshot, to_status, force)
                await tx.save_meeting(updated)
                validation = evaluate_readiness(
                    replace(snapshot, meeting=updated), updated.status, MeetingStatus.VALIDATED
                )
        except GovernanceError as exc:
            self._record_blocked(to_status, exc)
            log.info("transition_rejected", code=exc.code)
            raise

        await self._emit_transition(ctx, outcome)
        await self._notifications.emit_readiness_transitions(meeting_id, validation)
        log.info(
            "meeting_transitioned",
            from_status=outcome.from_status.value,
            overridden=[i.code for i in outcome.overridden_issues],
        )
        return outcome

    async def launch(
        self,
        ctx: RequestContext,
        meeting_id: UUID,
        force: bool = False,
    ) -> LaunchOutcome:
        """Walk the fixed launch path to ``live`` in one transaction.

        Readiness and authorization are evaluated for every intermediate
        hop, against the simulated intermediate status, before anything is
        written. If any hop fails the meeting is left untouched.

        Raises:
            AlreadyInStatusError: The meeting is already live.
            InvalidLaunchStatusError: No launch path from the current status.
            OperationFailedError: ``launch_failed`` on a store failure.
            Plus every error ``transition`` raises, for the failing hop.
        """
        log = self._log_operation("launch", meeting_id=str(meeting_id), forced=force)
        target = MeetingStatus.LIVE
        try:
            async with unit_of_work(self._repository, ctx.tenant_id, "launch") as tx:
                meeting = await self._lock_meeting(tx, meeting_id)
                start = meeting.status
                if start.is_terminal():
                    raise ArchivedImmutableError(start, target, meeting_id)
                if start is target:
                    raise AlreadyInStatusError(start, meeting_id)
                path = LAUNCH_PATHS.get(start)
                if path is None:
                    raise InvalidLaunchStatusError(meeting_id, start)

                snapshot = await self._context.snapshot(tx, meeting)
                hops: list[TransitionOutcome] = []
                for hop in path:
                    target = hop
                    outcome, simulated = self._apply_hop(ctx, snapshot, hop, force)
                    hops.append(outcome)
                    snapshot = replace(snapshot, meeting=simulated)
                await tx.save_meeting(snapshot.meeting)
                validation = evaluate_readiness(
                    snapshot, snapshot.meeting.status, MeetingStatus.VALIDATED
                )
        except GovernanceError as exc:
            self._record_blocked(target, exc)
            log.info("launch_rejected", code=exc.code, failed_hop=target.value)
            raise

        launched = LaunchOutcome(
            meeting_id=meeting_id,
            from_status=start,
            to_status=MeetingStatus.LIVE,
            path=path,
            actor=ctx.actor,
            at=hops[-1].at,
            forced=force,
            hops=tuple(hops),
        )
        for hop_outcome in hops:
            await self._emit_transition(ctx, hop_outcome)
        await self._audit.record(
            AuditRecord(
                event_type=MEETING_LAUNCHED_EVENT_TYPE,
                resource_type="meeting",
                resource_id=meeting_id,
                tenant_id=ctx.tenant_id,
                meeting_id=meeting_id,
                payload=MeetingLaunchedPayload.from_outcome(launched).to_dict(),
            )
        )
        await self._notifications.emit_readiness_transitions(meeting_id, validation)
        log.info("meeting_launched", from_status=start.value, path=[s.value for s in path])
        return launched

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_hop(
        self,
        ctx: RequestContext,
        snapshot: MeetingSnapshot,
        to_status: MeetingStatus,
        force: bool,
    ) -> tuple[TransitionOutcome, Meeting]:
        """Check and apply one hop in memory. Nothing is persisted here."""
        meeting = snapshot.meeting
        from_status = meeting.status
        role = check_structure(from_status, to_status, meeting.id)
        if not is_authorized(ctx, meeting.id, role):
            raise TransitionForbiddenError(
                meeting.id, from_status.value, to_status.value, role.value
            )
        if force and not ctx.is_admin:
            raise ForceRequiresAdminError(meeting.id)

        report = evaluate_readiness(snapshot, from_status, to_status)
        if not report.can_proceed and not force:
            raise WorkflowIssuesError(meeting.id, report)

        now = self._time.now()
        updated = apply_transition(meeting, to_status, ctx.actor, now)
        outcome = TransitionOutcome(
            meeting_id=meeting.id,
            from_status=from_status,
            to_status=to_status,
            actor=ctx.actor,
            at=now,
            forced=force and not report.can_proceed,
            overridden_issues=report.issues if force else (),
            warnings=report.warnings,
        )
        return outcome, updated

    async def _emit_transition(self, ctx: RequestContext, outcome: TransitionOutcome) -> None:
        await self._audit.record(
            AuditRecord(
                event_type=MEETING_TRANSITIONED_EVENT_TYPE,
                resource_type="meeting",
                resource_id=outcome.meeting_id,
                tenant_id=ctx.tenant_id,
                meeting_id=outcome.meeting_id,
                payload=MeetingTransitionedPayload.from_outcome(outcome).to_dict(),
            )
        )
        if self._metrics is not None:
            self._metrics.record_transition(
                outcome.from_status.value, outcome.to_status.value, outcome.forced
            )

    def _record_blocked(self, to_status: MeetingStatus, exc: GovernanceError) -> None:
        if self._metrics is not None:
            self._metrics.record_transition_blocked(to_status.value, exc.code)

    async def _get_meeting(self, tx: GovernanceTransaction, meeting_id: UUID) -> Meeting:
        meeting = await tx.get_meeting(meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(meeting_id)
        return meeting

    async def _lock_meeting(self, tx: GovernanceTransaction, meeting_id: UUID) -> Meeting:
        meeting = await tx.lock_meeting(meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(meeting_id)
        return meeting
