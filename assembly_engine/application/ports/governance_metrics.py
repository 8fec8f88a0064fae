"""Metrics port for governance operations."""

from __future__ import annotations

from typing import Protocol


class GovernanceMetricsProtocol(Protocol):
    def record_transition(self, from_status: str, to_status: str, forced: bool) -> None: ...

    def record_transition_blocked(self, to_status: str, code: str) -> None: ...

    def record_ballot_cast(self, source: str) -> None: ...

    def record_ballot_rejected(self, code: str) -> None: ...

    def record_consolidation(self, source: str, decision: str) -> None: ...
