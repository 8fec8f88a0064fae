"""Tenant member with a voting power."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, eq=True)
class Member:
    id: UUID
    tenant_id: UUID
    full_name: str
    voting_power: float = 1.0
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.voting_power < 0:
            raise ValueError(f"voting_power must be >= 0, got {self.voting_power}")
