"""Vote delegation between two members of the same meeting."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, eq=True)
class Proxy:
    """A giver delegates their vote to a receiver for one meeting.

    A giver has at most one active (non-revoked) proxy per meeting.
    """

    id: UUID
    meeting_id: UUID
    tenant_id: UUID
    giver_member_id: UUID
    receiver_member_id: UUID
    created_at: datetime
    revoked_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.giver_member_id == self.receiver_member_id:
            raise ValueError("giver and receiver must differ")

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None

    def revoke(self, at: datetime) -> Proxy:
        return replace(self, revoked_at=at)
