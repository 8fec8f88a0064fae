"""Readiness reports and transition outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from assembly_engine.domain.models.meeting import MeetingStatus


@dataclass(frozen=True, eq=True)
class WorkflowIssue:
    """One readiness finding. ``code`` is stable, ``message`` is for humans."""

    code: str
    message: str
    detail: tuple[tuple[str, Any], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.detail:
            data["detail"] = dict(self.detail)
        return data


@dataclass(frozen=True, eq=True)
class ReadinessReport:
    """Blocking issues and non-blocking warnings for one transition hop."""

    from_status: MeetingStatus
    to_status: MeetingStatus
    issues: tuple[WorkflowIssue, ...] = ()
    warnings: tuple[WorkflowIssue, ...] = ()

    @property
    def can_proceed(self) -> bool:
        return not self.issues

    @property
    def issue_codes(self) -> tuple[str, ...]:
        return tuple(i.code for i in self.issues)

    @property
    def warning_codes(self) -> tuple[str, ...]:
        return tuple(w.code for w in self.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "can_proceed": self.can_proceed,
            "issues": [i.to_dict() for i in self.issues],
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass(frozen=True, eq=True)
class TransitionOption:
    """An outgoing transition with the role it needs and its readiness."""

    to_status: MeetingStatus
    required_role: str
    authorized: bool
    report: ReadinessReport


@dataclass(frozen=True, eq=True)
class TransitionOutcome:
    meeting_id: UUID
    from_status: MeetingStatus
    to_status: MeetingStatus
    actor: str
    at: datetime
    forced: bool = False
    overridden_issues: tuple[WorkflowIssue, ...] = ()
    warnings: tuple[WorkflowIssue, ...] = ()


@dataclass(frozen=True, eq=True)
class LaunchOutcome:
    meeting_id: UUID
    from_status: MeetingStatus
    to_status: MeetingStatus
    path: tuple[MeetingStatus, ...]
    actor: str
    at: datetime
    forced: bool = False
    hops: tuple[TransitionOutcome, ...] = field(default_factory=tuple)


@dataclass(frozen=True, eq=True)
class ReadinessChange:
    """What changed in a meeting's readiness since it was last reported.

    ``became_ready`` is True or False on a crossing and None when only the
    issue codes changed.
    """

    meeting_id: UUID
    ready: bool
    became_ready: bool | None
    added_codes: tuple[str, ...] = ()
    removed_codes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "meeting_id": str(self.meeting_id),
            "ready": self.ready,
            "became_ready": self.became_ready,
            "added_codes": list(self.added_codes),
            "removed_codes": list(self.removed_codes),
        }
