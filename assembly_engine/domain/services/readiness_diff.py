"""Readiness change detection for the notification sink.

The first report for a meeting only sets the baseline. Later reports
produce a change when the meeting crosses into or out of ready, or when
the set of issue codes differs.
"""

from __future__ import annotations

from uuid import UUID

from assembly_engine.domain.models.workflow import ReadinessChange, ReadinessReport


def diff_readiness(
    meeting_id: UUID,
    previous: ReadinessReport | None,
    current: ReadinessReport,
) -> ReadinessChange | None:
    if previous is None:
        return None
    before = set(previous.issue_codes)
    after = set(current.issue_codes)
    crossed = previous.can_proceed != current.can_proceed
    if not crossed and before == after:
        return None
    return ReadinessChange(
        meeting_id=meeting_id,
        ready=current.can_proceed,
        became_ready=current.can_proceed if crossed else None,
        added_codes=tuple(sorted(after - before)),
        removed_codes=tuple(sorted(before - after)),
    )
