"""Readiness checks run before a lifecycle transition.

Each rule looks at a MeetingSnapshot and contributes either a blocking
issue or a warning for the requested hop. The same function serves the
read-only readiness display and the check re-run under the meeting lock.
"""

from __future__ import annotations

from assembly_engine.domain.models.attendance import AttendanceMode
from assembly_engine.domain.models.meeting import MeetingStatus
from assembly_engine.domain.models.snapshot import MeetingSnapshot
from assembly_engine.domain.models.workflow import ReadinessReport, WorkflowIssue
from assembly_engine.domain.services.decision_engine import tally_ballots

S = MeetingStatus

_ATTENDING_MODES = frozenset({AttendanceMode.PRESENT, AttendanceMode.REMOTE, AttendanceMode.PROXY})


def _issue(code: str, message: str, **detail: object) -> WorkflowIssue:
    return WorkflowIssue(code=code, message=message, detail=tuple(sorted(detail.items())))


def _no_motions(snapshot: MeetingSnapshot) -> WorkflowIssue | None:
    if any(not m.is_cancelled for m in snapshot.motions):
        return None
    return _issue("no_motions", "The agenda has no motion")


def _no_attendance(snapshot: MeetingSnapshot) -> WorkflowIssue | None:
    if any(a.mode in _ATTENDING_MODES for a in snapshot.attendance):
        return None
    return _issue("no_attendance", "No attendance has been recorded")


def _motion_open(snapshot: MeetingSnapshot) -> WorkflowIssue | None:
    open_motions = snapshot.open_motions
    if not open_motions:
        return None
    return _issue(
        "motion_open",
        f"{len(open_motions)} motion(s) still open",
        motion_ids=tuple(str(m.id) for m in open_motions),
    )


def _quorum_not_met(snapshot: MeetingSnapshot) -> WorkflowIssue | None:
    if not snapshot.quorum.blocks_decision:
        return None
    return _issue(
        "quorum_not_met",
        snapshot.quorum.justification or "Quorum is not met",
        ratio=snapshot.quorum.ratio,
    )


def _proxy_anomalies(snapshot: MeetingSnapshot) -> WorkflowIssue | None:
    blocking = snapshot.resolution.blocking_anomalies
    if not blocking:
        return None
    return _issue(
        "proxy_anomalies",
        f"{len(blocking)} unresolved proxy or eligibility anomaly(ies)",
        kinds=tuple(sorted({a.kind.value for a in blocking})),
    )


def _bad_results(snapshot: MeetingSnapshot) -> WorkflowIssue | None:
    """Closed motions with neither a usable manual count nor an eligible ballot."""
    unusable = []
    for motion in snapshot.closed_motions:
        if motion.has_consistent_manual_tally:
            continue
        ballots = snapshot.ballots_by_motion.get(motion.id, ())
        if tally_ballots(ballots, snapshot.resolution, snapshot.pool).ballot_count > 0:
            continue
        unusable.append(str(motion.id))
    if not unusable:
        return None
    return _issue(
        "bad_results",
        f"{len(unusable)} closed motion(s) have no exploitable result",
        motion_ids=tuple(unusable),
    )


def _not_consolidated(snapshot: MeetingSnapshot) -> WorkflowIssue | None:
    pending = [str(m.id) for m in snapshot.closed_motions if m.consolidated_at is None]
    if not pending:
        return None
    return _issue(
        "not_consolidated",
        f"{len(pending)} closed motion(s) not consolidated yet",
        motion_ids=tuple(pending),
    )


def evaluate_readiness(
    snapshot: MeetingSnapshot,
    from_status: MeetingStatus,
    to_status: MeetingStatus,
) -> ReadinessReport:
    """Return blocking issues and warnings for ``from_status -> to_status``.

    ``from_status`` may differ from the stored status when launch
    simulates an intermediate hop.
    """
    issues: list[WorkflowIssue | None] = []
    warnings: list[WorkflowIssue | None] = []
    meeting = snapshot.meeting

    if from_status.is_terminal():
        issues.append(_issue("archived_immutable", "Archived meetings cannot be modified"))
        return _report(from_status, to_status, issues, warnings)

    if to_status is S.SCHEDULED and from_status is S.DRAFT:
        issues.append(_no_motions(snapshot))

    elif to_status is S.FROZEN:
        if from_status is S.DRAFT:
            issues.append(_no_motions(snapshot))
        issues.append(_no_attendance(snapshot))
        if not meeting.has_president:
            warnings.append(_issue("no_president", "No president has been named yet"))

    elif to_status is S.LIVE:
        if not meeting.has_president:
            issues.append(_issue("missing_president", "A president must be named"))
        warnings.append(_quorum_not_met(snapshot))
        warnings.append(_proxy_anomalies(snapshot))

    elif to_status in (S.PAUSED, S.CLOSED):
        issues.append(_motion_open(snapshot))

    elif to_status is S.VALIDATED:
        if not meeting.has_president:
            issues.append(_issue("missing_president", "A president must be named"))
        issues.append(_motion_open(snapshot))
        issues.append(_bad_results(snapshot))
        issues.append(_proxy_anomalies(snapshot))
        warnings.append(_not_consolidated(snapshot))
        if snapshot.pool.fallback_used:
            warnings.append(
                _issue(
                    "eligibility_fallback",
                    "No attendance recorded: all active members treated as eligible",
                )
            )

    return _report(from_status, to_status, issues, warnings)


def _report(
    from_status: MeetingStatus,
    to_status: MeetingStatus,
    issues: list[WorkflowIssue | None],
    warnings: list[WorkflowIssue | None],
) -> ReadinessReport:
    return ReadinessReport(
        from_status=from_status,
        to_status=to_status,
        issues=tuple(i for i in issues if i is not None),
        warnings=tuple(w for w in warnings if w is not None),
    )
