"""Prometheus counters for meeting governance.

Counts workflow transitions (forced or not), transitions blocked by a
governance error, ballots accepted and rejected, and motion
consolidations by source and decision.
"""

from __future__ import annotations

import os
import threading

from prometheus_client import CollectorRegistry, Counter

_metrics_lock = threading.Lock()


class GovernanceMetricsCollector:
    """Implements GovernanceMetricsProtocol on top of prometheus_client.

    Attributes:
        transitions_total: Applied transitions by from/to status and forced flag.
        transitions_blocked_total: Refused transitions by target status and error code.
        ballots_cast_total: Accepted ballots by source (tablet/manual).
        ballots_rejected_total: Refused ballots by error code.
        consolidations_total: Official results written by source and decision.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Args:
        registry: Optional custom registry for test isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "assembly-engine")

        self.transitions_total = Counter(
            name="governance_transitions_total",
            documentation="Meeting status transitions applied",
            labelnames=["from_status", "to_status", "forced", "service", "environment"],
            registry=self._registry,
        )
        self.transitions_blocked_total = Counter(
            name="governance_transitions_blocked_total",
            documentation="Meeting status transitions refused",
            labelnames=["to_status", "code", "service", "environment"],
            registry=self._registry,
        )
        self.ballots_cast_total = Counter(
            name="governance_ballots_cast_total",
            documentation="Ballots accepted",
            labelnames=["source", "service", "environment"],
            registry=self._registry,
        )
        self.ballots_rejected_total = Counter(
            name="governance_ballots_rejected_total",
            documentation="Ballots refused",
            labelnames=["code", "service", "environment"],
            registry=self._registry,
        )
        self.consolidations_total = Counter(
            name="governance_consolidations_total",
            documentation="Official motion results written",
            labelnames=["source", "decision", "service", "environment"],
            registry=self._registry,
        )

    def _common(self) -> dict[str, str]:
        return {"service": self._service_name, "environment": self._environment}

    def record_transition(self, from_status: str, to_status: str, forced: bool) -> None:
        self.transitions_total.labels(
            from_status=from_status,
            to_status=to_status,
            forced="true" if forced else "false",
            **self._common(),
        ).inc()

    def record_transition_blocked(self, to_status: str, code: str) -> None:
        self.transitions_blocked_total.labels(
            to_status=to_status, code=code, **self._common()
        ).inc()

    def record_ballot_cast(self, source: str) -> None:
        self.ballots_cast_total.labels(source=source, **self._common()).inc()

    def record_ballot_rejected(self, code: str) -> None:
        self.ballots_rejected_total.labels(code=code, **self._common()).inc()

    def record_consolidation(self, source: str, decision: str) -> None:
        self.consolidations_total.labels(
            source=source, decision=decision, **self._common()
        ).inc()

    def get_registry(self) -> CollectorRegistry:
        return self._registry


_governance_metrics_collector: GovernanceMetricsCollector | None = None


def get_governance_metrics_collector() -> GovernanceMetricsCollector:
    """Process-wide collector, created lazily (double-checked locking)."""
    global _governance_metrics_collector
    if _governance_metrics_collector is None:
        with _metrics_lock:
            if _governance_metrics_collector is None:
                _governance_metrics_collector = GovernanceMetricsCollector()
    return _governance_metrics_collector


def reset_governance_metrics_collector() -> None:
    """Drop the singleton (tests only)."""
    global _governance_metrics_collector
    with _metrics_lock:
        _governance_metrics_collector = None
