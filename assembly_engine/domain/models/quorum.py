"""Quorum computation results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID


@dataclass(frozen=True, eq=True)
class QuorumCondition:
    """One ratio check: numerator / denominator >= threshold."""

    basis: str
    threshold: float
    numerator: float
    denominator: float
    ratio: float
    met: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "basis": self.basis,
            "threshold": self.threshold,
            "numerator": self.numerator,
            "denominator": self.denominator,
            "ratio": self.ratio,
            "met": self.met,
        }


@dataclass(frozen=True, eq=True)
class QuorumResult:
    """Outcome of a quorum evaluation.

    ``applied`` is False when no policy is configured; ``met`` is then
    None, meaning quorum was not evaluated rather than failed.
    ``numerator``, ``eligible`` and ``ratio`` mirror the primary condition.
    """

    applied: bool
    met: bool | None
    ratio: float = 0.0
    numerator: float = 0.0
    eligible: float = 0.0
    threshold: float | None = None
    justification: str = ""
    policy_id: UUID | None = None
    convocation_no: int = 1
    primary: QuorumCondition | None = None
    secondary: QuorumCondition | None = None
    present_members: int = 0
    present_weight: float = 0.0
    late_cutoff_applied: bool = False

    @classmethod
    def not_applied(cls, convocation_no: int = 1) -> QuorumResult:
        return cls(
            applied=False,
            met=None,
            justification="No quorum policy configured: quorum not evaluated.",
            convocation_no=convocation_no,
        )

    @property
    def blocks_decision(self) -> bool:
        """True only when quorum was evaluated and failed."""
        return self.applied and self.met is False

    def to_dict(self) -> dict[str, Any]:
        return {
            "applied": self.applied,
            "met": self.met,
            "ratio": self.ratio,
            "numerator": self.numerator,
            "eligible": self.eligible,
            "threshold": self.threshold,
            "justification": self.justification,
            "policy_id": str(self.policy_id) if self.policy_id else None,
            "convocation_no": self.convocation_no,
            "primary": self.primary.to_dict() if self.primary else None,
            "secondary": self.secondary.to_dict() if self.secondary else None,
            "late_cutoff_applied": self.late_cutoff_applied,
        }
