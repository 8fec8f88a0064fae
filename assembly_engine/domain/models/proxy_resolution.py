"""Output of proxy resolution: per-member participation and anomalies."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any
from uuid import UUID


class ParticipationStatus(str, Enum):
    ABSENT_UNCOVERED = "absent_uncovered"
    PRESENT_DIRECT = "present_direct"
    PRESENT_AS_RECEIVER = "present_as_receiver"
    REPRESENTED = "represented"


class ProxyAnomalyKind(str, Enum):
    CHAIN = "chain"
    CYCLE = "cycle"
    CEILING = "ceiling"
    PROXY_MODE_WITHOUT_PROXY = "proxy_mode_without_proxy"
    GIVER_PRESENT = "giver_present"
    RECEIVER_ABSENT = "receiver_absent"

    @property
    def blocking(self) -> bool:
        return self in _BLOCKING_KINDS


_BLOCKING_KINDS = frozenset(
    {
        ProxyAnomalyKind.CHAIN,
        ProxyAnomalyKind.CYCLE,
        ProxyAnomalyKind.CEILING,
        ProxyAnomalyKind.PROXY_MODE_WITHOUT_PROXY,
    }
)


@dataclass(frozen=True, eq=True)
class ProxyAnomaly:
    kind: ProxyAnomalyKind
    member_id: UUID
    message: str
    related_member_id: UUID | None = None

    @property
    def blocking(self) -> bool:
        return self.kind.blocking

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "member_id": str(self.member_id),
            "related_member_id": str(self.related_member_id) if self.related_member_id else None,
            "blocking": self.blocking,
            "message": self.message,
        }


@dataclass(frozen=True, eq=True)
class MemberParticipation:
    """How one member takes part in the meeting.

    For a receiver, ``delegated_weight`` is the sum carried for
    ``givers``. For a represented giver, ``represented_by`` names the
    receiver and ``effective_weight`` is zero since the weight is carried
    by the receiver.
    """

    member_id: UUID
    status: ParticipationStatus
    own_weight: float
    delegated_weight: float = 0.0
    remote: bool = False
    represented_by: UUID | None = None
    givers: tuple[UUID, ...] = ()

    @property
    def is_present_directly(self) -> bool:
        return self.status in (
            ParticipationStatus.PRESENT_DIRECT,
            ParticipationStatus.PRESENT_AS_RECEIVER,
        )

    @property
    def effective_weight(self) -> float:
        if not self.is_present_directly:
            return 0.0
        return self.own_weight + self.delegated_weight


@dataclass(frozen=True)
class ProxyResolution:
    """Resolved participation for every known member of a meeting."""

    participations: Mapping[UUID, MemberParticipation] = field(default_factory=dict)
    anomalies: tuple[ProxyAnomaly, ...] = ()
    max_per_receiver: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "participations", MappingProxyType(dict(self.participations)))

    def get(self, member_id: UUID) -> MemberParticipation | None:
        return self.participations.get(member_id)

    def status_of(self, member_id: UUID) -> ParticipationStatus:
        participation = self.participations.get(member_id)
        if participation is None:
            return ParticipationStatus.ABSENT_UNCOVERED
        return participation.status

    def receiver_for(self, giver_member_id: UUID) -> UUID | None:
        participation = self.participations.get(giver_member_id)
        if participation is None or participation.status is not ParticipationStatus.REPRESENTED:
            return None
        return participation.represented_by

    def by_status(self, status: ParticipationStatus) -> list[MemberParticipation]:
        return [p for p in self.participations.values() if p.status is status]

    @property
    def blocking_anomalies(self) -> tuple[ProxyAnomaly, ...]:
        return tuple(a for a in self.anomalies if a.blocking)

    @property
    def ceiling_violations(self) -> tuple[ProxyAnomaly, ...]:
        return tuple(a for a in self.anomalies if a.kind is ProxyAnomalyKind.CEILING)
