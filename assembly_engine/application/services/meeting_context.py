"""Loads what the pure engines need from an open transaction.

Everything here is recomputed on each call: proxy resolution and the
eligible pool are never cached across transactions.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from assembly_engine.application.ports.governance_repository import GovernanceTransaction
from assembly_engine.application.ports.policy_store import PolicyStoreProtocol
from assembly_engine.config.governance_config import GovernanceConfig
from assembly_engine.domain.models.attendance import Attendance
from assembly_engine.domain.models.ballot import Ballot
from assembly_engine.domain.models.eligibility import EligiblePool
from assembly_engine.domain.models.meeting import Meeting
from assembly_engine.domain.models.member import Member
from assembly_engine.domain.models.motion import Motion
from assembly_engine.domain.models.policy import QuorumPolicy, VotePolicy
from assembly_engine.domain.models.proxy import Proxy
from assembly_engine.domain.models.proxy_resolution import ProxyResolution
from assembly_engine.domain.models.quorum import QuorumResult
from assembly_engine.domain.models.snapshot import MeetingSnapshot
from assembly_engine.domain.models.tally import DecisionResult
from assembly_engine.domain.services.decision_engine import decide, select_source, tally_ballots
from assembly_engine.domain.services.eligibility import build_eligible_pool
from assembly_engine.domain.services.proxy_resolver import resolve_proxies
from assembly_engine.domain.services.quorum_engine import compute_quorum, present_weight


@dataclass(frozen=True)
class ParticipationView:
    """Members, attendance and delegations of one meeting, resolved."""

    members: tuple[Member, ...]
    attendance: tuple[Attendance, ...]
    proxies: tuple[Proxy, ...]
    resolution: ProxyResolution
    pool: EligiblePool


class MeetingContextLoader:
    """Reads meeting data inside a transaction and runs the pure engines on it."""

    def __init__(self, policy_store: PolicyStoreProtocol, config: GovernanceConfig) -> None:
        self._policies = policy_store
        self._config = config

    async def participation(
        self,
        tx: GovernanceTransaction,
        meeting_id: UUID,
    ) -> ParticipationView:
        members = tuple(await tx.list_members())
        attendance = tuple(await tx.list_attendance(meeting_id))
        proxies = tuple(await tx.list_proxies(meeting_id))
        return ParticipationView(
            members=members,
            attendance=attendance,
            proxies=proxies,
            resolution=resolve_proxies(
                members, attendance, proxies, self._config.proxy_max_per_receiver
            ),
            pool=build_eligible_pool(self._config.eligibility_basis, members, attendance),
        )

    async def quorum_policy(
        self,
        tenant_id: UUID,
        meeting: Meeting,
        motion: Motion | None = None,
    ) -> QuorumPolicy | None:
        """Motion override first, then the meeting default."""
        policy_id = (motion.quorum_policy_id if motion else None) or meeting.quorum_policy_id
        if policy_id is None:
            return None
        return await self._policies.find_quorum_policy(tenant_id, policy_id)

    async def vote_policy(
        self,
        tenant_id: UUID,
        meeting: Meeting,
        motion: Motion | None = None,
    ) -> VotePolicy | None:
        policy_id = (motion.vote_policy_id if motion else None) or meeting.vote_policy_id
        if policy_id is None:
            return None
        return await self._policies.find_vote_policy(tenant_id, policy_id)

    async def meeting_quorum(
        self,
        tenant_id: UUID,
        meeting: Meeting,
        view: ParticipationView,
    ) -> QuorumResult:
        policy = await self.quorum_policy(tenant_id, meeting)
        return compute_quorum(
            policy, meeting.convocation_no, view.resolution, view.pool, view.attendance
        )

    async def motion_quorum(
        self,
        tenant_id: UUID,
        meeting: Meeting,
        motion: Motion,
        view: ParticipationView,
    ) -> QuorumResult:
        policy = await self.quorum_policy(tenant_id, meeting, motion)
        return compute_quorum(
            policy,
            meeting.convocation_no,
            view.resolution,
            view.pool,
            view.attendance,
            motion_opened_at=motion.opened_at,
        )

    async def motion_decision(
        self,
        tx: GovernanceTransaction,
        meeting: Meeting,
        motion: Motion,
        view: ParticipationView,
        ballots: list[Ballot] | None = None,
    ) -> DecisionResult:
        """Tally a motion and apply quorum and majority rules to it."""
        if ballots is None:
            ballots = await tx.list_ballots(motion.id)
        breakdown, source = select_source(
            tally_ballots(ballots, view.resolution, view.pool),
            motion.manual_tally,
        )
        quorum = await self.motion_quorum(tx.tenant_id, meeting, motion, view)
        return decide(
            breakdown,
            source,
            await self.vote_policy(tx.tenant_id, meeting, motion),
            quorum,
            view.pool,
            present_weight(view.resolution, view.pool),
        )

    async def snapshot(self, tx: GovernanceTransaction, meeting: Meeting) -> MeetingSnapshot:
        view = await self.participation(tx, meeting.id)
        motions = tuple(await tx.list_motions(meeting.id))
        ballots = {}
        for motion in motions:
            if motion.is_closed and not motion.is_cancelled:
                ballots[motion.id] = tuple(await tx.list_ballots(motion.id))
        return MeetingSnapshot(
            meeting=meeting,
            motions=motions,
            attendance=view.attendance,
            resolution=view.resolution,
            pool=view.pool,
            quorum=await self.meeting_quorum(tx.tenant_id, meeting, view),
            ballots_by_motion=ballots,
        )
