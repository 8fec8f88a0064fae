"""Consistency errors surfaced at the point of insertion.

Duplicate ballots, invalid delegations and inconsistent manual counts are
rejected here rather than silently coerced.
"""

from __future__ import annotations

from uuid import UUID

from assembly_engine.domain.exceptions import GovernanceError


class AlreadyVotedError(GovernanceError):
    """Raised when a ballot already exists for (motion_id, member_id).

    Attributes:
        motion_id: Motion being voted on.
        member_id: Member the ballot counts for.
    """

    code = "already_voted"

    def __init__(self, motion_id: UUID, member_id: UUID) -> None:
        self.motion_id = motion_id
        self.member_id = member_id
        super().__init__(
            f"Member {member_id} already voted on motion {motion_id}",
            detail={"motion_id": str(motion_id), "member_id": str(member_id)},
        )


class ProxyError(GovernanceError):
    """Base error for rejected delegations."""

    code = "proxy_error"

    def __init__(
        self,
        message: str,
        giver_member_id: UUID,
        receiver_member_id: UUID,
        **extra: object,
    ) -> None:
        self.giver_member_id = giver_member_id
        self.receiver_member_id = receiver_member_id
        super().__init__(
            message,
            detail={
                "giver_member_id": str(giver_member_id),
                "receiver_member_id": str(receiver_member_id),
                **extra,
            },
        )


class SelfDelegationError(ProxyError):
    code = "self_delegation"

    def __init__(self, member_id: UUID) -> None:
        super().__init__("A member cannot delegate to themselves", member_id, member_id)


class ProxyCycleError(ProxyError):
    """Raised when the delegation would close a loop (A -> B -> A)."""

    code = "proxy_cycle"

    def __init__(self, giver_member_id: UUID, receiver_member_id: UUID) -> None:
        super().__init__(
            f"Receiver {receiver_member_id} already delegates to {giver_member_id}",
            giver_member_id,
            receiver_member_id,
        )


class ProxyChainError(ProxyError):
    """Raised when a delegation would need more than one hop.

    Either the receiver already delegates their own vote, or the giver
    already holds proxies from other members.
    """

    code = "proxy_chain"

    def __init__(self, giver_member_id: UUID, receiver_member_id: UUID, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Proxy chains are not allowed: {reason}",
            giver_member_id,
            receiver_member_id,
            reason=reason,
        )


class ProxyCeilingError(ProxyError):
    """Raised when the receiver already holds the maximum number of proxies."""

    code = "proxy_ceiling"

    def __init__(
        self,
        giver_member_id: UUID,
        receiver_member_id: UUID,
        max_per_receiver: int,
    ) -> None:
        self.max_per_receiver = max_per_receiver
        super().__init__(
            f"Receiver {receiver_member_id} already holds {max_per_receiver} proxies",
            giver_member_id,
            receiver_member_id,
            max_per_receiver=max_per_receiver,
        )


class ProxyMemberMismatchError(ProxyError):
    """Raised when giver or receiver is not an active member of the tenant."""

    code = "proxy_member_invalid"

    def __init__(self, giver_member_id: UUID, receiver_member_id: UUID) -> None:
        super().__init__(
            "Giver and receiver must be active members of the same tenant",
            giver_member_id,
            receiver_member_id,
        )


class InvalidManualTallyError(GovernanceError):
    """Raised when an operator-entered count is not self-consistent."""

    code = "invalid_manual_tally"

    def __init__(self, motion_id: UUID, reason: str) -> None:
        self.motion_id = motion_id
        self.reason = reason
        super().__init__(
            f"Manual tally rejected: {reason}",
            detail={"motion_id": str(motion_id), "reason": reason},
        )
