"""Proxy delegation resolver.

Turns raw attendance and proxy rows into per-member participation and
effective weight. The resolver is pure and keeps no state between calls:
services run it again on every quorum or tally computation, inside the
transaction that read the rows.

Delegation depth is one hop. A member who receives proxies cannot pass
their own vote on, and a member present in person always votes with
their own weight.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from uuid import UUID

from assembly_engine.domain.models.attendance import Attendance, AttendanceMode
from assembly_engine.domain.models.member import Member
from assembly_engine.domain.models.proxy import Proxy
from assembly_engine.domain.models.proxy_resolution import (
    MemberParticipation,
    ParticipationStatus,
    ProxyAnomaly,
    ProxyAnomalyKind,
    ProxyResolution,
)


def _active_delegations(proxies: Iterable[Proxy]) -> dict[UUID, Proxy]:
    """giver -> most recent active proxy."""
    by_giver: dict[UUID, Proxy] = {}
    for proxy in sorted(proxies, key=lambda p: (p.created_at, str(p.id))):
        if proxy.is_active:
            by_giver[proxy.giver_member_id] = proxy
    return by_giver


def resolve_proxies(
    members: Iterable[Member],
    attendance: Iterable[Attendance],
    proxies: Iterable[Proxy],
    max_per_receiver: int,
) -> ProxyResolution:
    """Resolve participation for every member known to the meeting.

    Args:
        members: Tenant members, used for weights of members without an
            attendance row.
        attendance: Attendance rows of the meeting.
        proxies: Proxy rows of the meeting, revoked ones included.
        max_per_receiver: Incoming proxy cap per receiver.

    Returns:
        ProxyResolution with one MemberParticipation per member and the
        anomalies found. Ceiling violations are reported, never truncated.
    """
    member_by_id = {m.id: m for m in members}
    attendance_by_member = {a.member_id: a for a in attendance}

    def weight_of(member_id: UUID) -> float:
        row = attendance_by_member.get(member_id)
        if row is not None:
            return row.voting_power
        member = member_by_id.get(member_id)
        return member.voting_power if member is not None else 0.0

    def is_direct(member_id: UUID) -> bool:
        row = attendance_by_member.get(member_id)
        return row is not None and row.mode.is_direct

    delegations = _active_delegations(proxies)
    receivers = {p.receiver_member_id for p in delegations.values()}
    anomalies: list[ProxyAnomaly] = []

    # Rejected hops: a giver who is also a receiver cannot delegate further.
    covered: dict[UUID, UUID] = {}
    for giver, proxy in sorted(delegations.items(), key=lambda item: str(item[0])):
        receiver = proxy.receiver_member_id
        back = delegations.get(receiver)
        if back is not None and back.receiver_member_id == giver:
            anomalies.append(
                ProxyAnomaly(
                    kind=ProxyAnomalyKind.CYCLE,
                    member_id=giver,
                    related_member_id=receiver,
                    message=f"Delegations {giver} <-> {receiver} form a cycle",
                )
            )
            continue
        if giver in receivers:
            anomalies.append(
                ProxyAnomaly(
                    kind=ProxyAnomalyKind.CHAIN,
                    member_id=giver,
                    related_member_id=receiver,
                    message=f"Member {giver} holds proxies and cannot delegate to {receiver}",
                )
            )
            continue
        if is_direct(giver):
            anomalies.append(
                ProxyAnomaly(
                    kind=ProxyAnomalyKind.GIVER_PRESENT,
                    member_id=giver,
                    related_member_id=receiver,
                    message=f"Member {giver} attends in person, proxy to {receiver} ignored",
                )
            )
            continue
        if not is_direct(receiver):
            anomalies.append(
                ProxyAnomaly(
                    kind=ProxyAnomalyKind.RECEIVER_ABSENT,
                    member_id=giver,
                    related_member_id=receiver,
                    message=f"Receiver {receiver} is not present, {giver} is not represented",
                )
            )
            continue
        covered[giver] = receiver

    givers_by_receiver: dict[UUID, list[UUID]] = defaultdict(list)
    for giver, receiver in covered.items():
        givers_by_receiver[receiver].append(giver)

    for receiver, givers in sorted(givers_by_receiver.items(), key=lambda item: str(item[0])):
        if len(givers) > max_per_receiver:
            anomalies.append(
                ProxyAnomaly(
                    kind=ProxyAnomalyKind.CEILING,
                    member_id=receiver,
                    message=(
                        f"Receiver {receiver} holds {len(givers)} proxies, "
                        f"maximum is {max_per_receiver}"
                    ),
                )
            )

    participations: dict[UUID, MemberParticipation] = {}
    for member_id in set(member_by_id) | set(attendance_by_member):
        row = attendance_by_member.get(member_id)
        own = weight_of(member_id)
        if is_direct(member_id):
            givers = tuple(sorted(givers_by_receiver.get(member_id, ()), key=str))
            participations[member_id] = MemberParticipation(
                member_id=member_id,
                status=(
                    ParticipationStatus.PRESENT_AS_RECEIVER
                    if givers
                    else ParticipationStatus.PRESENT_DIRECT
                ),
                own_weight=own,
                delegated_weight=sum(weight_of(g) for g in givers),
                remote=row is not None and row.mode is AttendanceMode.REMOTE,
                givers=givers,
            )
        elif member_id in covered:
            participations[member_id] = MemberParticipation(
                member_id=member_id,
                status=ParticipationStatus.REPRESENTED,
                own_weight=own,
                represented_by=covered[member_id],
            )
        else:
            marked_proxy = row is not None and row.mode is AttendanceMode.PROXY
            if marked_proxy and member_id not in delegations:
                anomalies.append(
                    ProxyAnomaly(
                        kind=ProxyAnomalyKind.PROXY_MODE_WITHOUT_PROXY,
                        member_id=member_id,
                        message=f"Member {member_id} is marked as proxy without a delegation",
                    )
                )
            participations[member_id] = MemberParticipation(
                member_id=member_id,
                status=ParticipationStatus.ABSENT_UNCOVERED,
                own_weight=own,
            )

    anomalies.sort(key=lambda a: (a.kind.value, str(a.member_id)))
    return ProxyResolution(
        participations=participations,
        anomalies=tuple(anomalies),
        max_per_receiver=max_per_receiver,
    )


def would_create_cycle_or_chain(
    proxies: Iterable[Proxy],
    giver_member_id: UUID,
    receiver_member_id: UUID,
) -> str | None:
    """Check a proposed delegation against the active ones.

    Returns:
        ``"cycle"`` if the receiver already delegates to the giver,
        ``"chain"`` if it would create a second hop, None if acceptable.
        An existing delegation from the same giver is ignored since the
        new one replaces it.
    """
    delegations = {
        giver: proxy
        for giver, proxy in _active_delegations(proxies).items()
        if giver != giver_member_id
    }
    back = delegations.get(receiver_member_id)
    if back is not None and back.receiver_member_id == giver_member_id:
        return "cycle"
    if back is not None:
        return "chain"
    if any(p.receiver_member_id == giver_member_id for p in delegations.values()):
        return "chain"
    return None
