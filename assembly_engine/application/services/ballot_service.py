"""Ballot casting.

Ballots take no row lock. Uniqueness on (motion_id, member_id) is
enforced by the store, so concurrent casts for different members proceed
independently and a duplicate cast fails fast with ``already_voted``.
"""

from __future__ import annotations

from uuid import UUID, uuid4

from assembly_engine.application.ports.audit_sink import AuditRecord, AuditSinkProtocol
from assembly_engine.application.ports.governance_metrics import GovernanceMetricsProtocol
from assembly_engine.application.ports.governance_repository import (
    GovernanceRepositoryProtocol,
    GovernanceTransaction,
)
from assembly_engine.application.ports.time_authority import TimeAuthorityProtocol
from assembly_engine.application.services.authorization import CAST_MANUAL_BALLOT, require_roles
from assembly_engine.application.services.base import LoggingMixin
from assembly_engine.application.services.unit_of_work import unit_of_work
from assembly_engine.config.governance_config import DEFAULT_GOVERNANCE_CONFIG, GovernanceConfig
from assembly_engine.domain.errors.not_found import MeetingNotFoundError, MotionNotFoundError
from assembly_engine.domain.errors.precondition import (
    MeetingStateError,
    MotionStateError,
    VoterNotEligibleError,
)
from assembly_engine.domain.events.motion_events import BALLOT_CAST_EVENT_TYPE
from assembly_engine.domain.exceptions import GovernanceError
from assembly_engine.domain.models.ballot import Ballot, BallotChoice, BallotSource
from assembly_engine.domain.models.meeting import MeetingStatus
from assembly_engine.domain.models.proxy_resolution import ProxyAnomalyKind, ProxyResolution
from assembly_engine.domain.models.roles import RequestContext
from assembly_engine.domain.services.proxy_resolver import resolve_proxies


class BallotService(LoggingMixin):
    """Casts ballots for present members and for the givers they represent.

    A proxy ballot is accepted only when proxy resolution would count the
    delegation, so a ballot is never stored just to be excluded at tally
    time.
    """

    def __init__(
        self,
        repository: GovernanceRepositoryProtocol,
        audit_sink: AuditSinkProtocol,
        time_authority: TimeAuthorityProtocol,
        metrics: GovernanceMetricsProtocol | None = None,
        config: GovernanceConfig = DEFAULT_GOVERNANCE_CONFIG,
    ) -> None:
        self._repository = repository
        self._max_per_receiver = config.proxy_max_per_receiver
        self._audit = audit_sink
        self._time = time_authority
        self._metrics = metrics
        self._init_logger(component="ballots")

    async def cast_ballot(
        self,
        ctx: RequestContext,
        motion_id: UUID,
        voter_member_id: UUID,
        choice: BallotChoice,
        on_behalf_of: UUID | None = None,
        source: BallotSource = BallotSource.TABLET,
    ) -> Ballot:
        """Record a ballot.

        Args:
            ctx: Caller context.
            motion_id: Motion being voted on.
            voter_member_id: Member casting the ballot.
            choice: for, against, abstain or nsp.
            on_behalf_of: Giver the voter holds a proxy for, if any. The
                ballot then counts for the giver, with the giver's weight.
            source: ``manual`` ballots are entered by an operator.

        Raises:
            MeetingStateError: ``meeting_not_live``.
            MotionStateError: ``motion_not_open``.
            VoterNotEligibleError: ``member_inactive``, ``voter_not_present``,
                ``receiver_not_present``, ``proxy_not_held``, ``giver_present``
                or ``proxy_not_effective``.
            AlreadyVotedError: A ballot already exists for this member.
        """
        log = self._log_operation(
            "cast_ballot",
            motion_id=str(motion_id),
            voter_member_id=str(voter_member_id),
            proxy=on_behalf_of is not None,
        )
        try:
            async with unit_of_work(self._repository, ctx.tenant_id, "ballot") as tx:
                ballot, secret = await self._build_ballot(
                    tx, ctx, motion_id, voter_member_id, choice, on_behalf_of, source
                )
                await tx.insert_ballot(ballot)
        except GovernanceError as exc:
            if self._metrics is not None:
                self._metrics.record_ballot_rejected(exc.code)
            log.info("ballot_rejected", code=exc.code)
            raise

        payload = {
            "member_id": str(ballot.member_id),
            "weight": ballot.weight,
            "source": ballot.source.value,
            "proxy_source_member_id": (
                str(ballot.proxy_source_member_id) if ballot.proxy_source_member_id else None
            ),
        }
        if not secret:
            payload["choice"] = ballot.choice.value
        await self._audit.record(
            AuditRecord(
                event_type=BALLOT_CAST_EVENT_TYPE,
                resource_type="ballot",
                resource_id=ballot.id,
                tenant_id=ctx.tenant_id,
                meeting_id=ballot.meeting_id,
                payload=payload,
            )
        )
        if self._metrics is not None:
            self._metrics.record_ballot_cast(ballot.source.value)
        log.info("ballot_cast", weight=ballot.weight)
        return ballot

    async def _build_ballot(
        self,
        tx: GovernanceTransaction,
        ctx: RequestContext,
        motion_id: UUID,
        voter_member_id: UUID,
        choice: BallotChoice,
        on_behalf_of: UUID | None,
        source: BallotSource,
    ) -> tuple[Ballot, bool]:
        """Validate the cast and build the ballot. Returns it with the motion's secret flag."""
        motion = await tx.get_motion(motion_id)
        if motion is None:
            raise MotionNotFoundError(motion_id)
        meeting = await tx.get_meeting(motion.meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(motion.meeting_id)
        if source is BallotSource.MANUAL:
            require_roles(ctx, meeting.id, "cast_manual_ballot", CAST_MANUAL_BALLOT)
        if meeting.status is not MeetingStatus.LIVE:
            raise MeetingStateError(
                "meeting_not_live",
                meeting.id,
                meeting.status.value,
                "Ballots can only be cast while the meeting is live",
            )
        if not motion.is_open or motion.is_cancelled:
            raise MotionStateError("motion_not_open", motion_id, "Motion is not open for voting")

        owner_id = on_behalf_of or voter_member_id
        for member_id in {voter_member_id, owner_id}:
            member = await tx.get_member(member_id)
            if member is None or not member.is_active:
                raise VoterNotEligibleError(
                    "member_inactive", member_id, "Member is not an active member"
                )

        voter_attendance = await tx.get_attendance(meeting.id, voter_member_id)
        voter_present = voter_attendance is not None and voter_attendance.mode.is_direct

        if on_behalf_of is None:
            if not voter_present:
                raise VoterNotEligibleError(
                    "voter_not_present", voter_member_id, "Voter is not checked in"
                )
        else:
            if not voter_present:
                raise VoterNotEligibleError(
                    "receiver_not_present",
                    voter_member_id,
                    "A proxy can only be used by a receiver present in person or remotely",
                )
            proxies = await tx.list_proxies(meeting.id)
            holds = any(
                p.giver_member_id == on_behalf_of and p.receiver_member_id == voter_member_id
                for p in proxies
            )
            if not holds:
                raise VoterNotEligibleError(
                    "proxy_not_held",
                    on_behalf_of,
                    f"Member {voter_member_id} holds no active proxy for {on_behalf_of}",
                )
            resolution = resolve_proxies(
                await tx.list_members(),
                await tx.list_attendance(meeting.id),
                proxies,
                self._max_per_receiver,
            )
            if resolution.receiver_for(on_behalf_of) != voter_member_id:
                raise _ineffective_proxy(resolution, on_behalf_of, voter_member_id)

        owner_attendance = await tx.get_attendance(meeting.id, owner_id)
        if owner_attendance is not None:
            weight = owner_attendance.voting_power
        else:
            owner = await tx.get_member(owner_id)
            weight = owner.voting_power if owner is not None else 0.0

        ballot = Ballot(
            id=uuid4(),
            tenant_id=ctx.tenant_id,
            meeting_id=meeting.id,
            motion_id=motion_id,
            member_id=owner_id,
            choice=choice,
            weight=weight,
            cast_at=self._time.now(),
            source=source,
            proxy_source_member_id=voter_member_id if on_behalf_of is not None else None,
        )
        return ballot, motion.secret


def _ineffective_proxy(
    resolution: ProxyResolution, giver_member_id: UUID, receiver_member_id: UUID
) -> VoterNotEligibleError:
    kinds = sorted(
        {a.kind for a in resolution.anomalies if a.member_id == giver_member_id},
        key=lambda kind: kind.value,
    )
    if ProxyAnomalyKind.GIVER_PRESENT in kinds:
        return VoterNotEligibleError(
            "giver_present",
            giver_member_id,
            f"Member {giver_member_id} attends in person and votes with their own weight",
        )
    reasons = ", ".join(kind.value for kind in kinds) or "not resolved"
    return VoterNotEligibleError(
        "proxy_not_effective",
        giver_member_id,
        f"Delegation from {giver_member_id} to {receiver_member_id} is not counted ({reasons})",
    )
