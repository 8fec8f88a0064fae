"""Audit event types and payloads emitted by the governance engine."""

from assembly_engine.domain.events.meeting_events import (
    MEETING_LAUNCHED_EVENT_TYPE,
    MEETING_TRANSITIONED_EVENT_TYPE,
    MeetingLaunchedPayload,
    MeetingTransitionedPayload,
)
from assembly_engine.domain.events.motion_events import (
    ATTENDANCE_RECORDED_EVENT_TYPE,
    BALLOT_CAST_EVENT_TYPE,
    MANUAL_TALLY_RECORDED_EVENT_TYPE,
    MOTION_CANCELLED_EVENT_TYPE,
    MOTION_CLOSED_EVENT_TYPE,
    MOTION_CONSOLIDATED_EVENT_TYPE,
    MOTION_OPENED_EVENT_TYPE,
    PROXY_REVOKED_EVENT_TYPE,
    PROXY_UPSERTED_EVENT_TYPE,
    MotionConsolidatedPayload,
)

__all__: list[str] = [
    "ATTENDANCE_RECORDED_EVENT_TYPE",
    "BALLOT_CAST_EVENT_TYPE",
    "MANUAL_TALLY_RECORDED_EVENT_TYPE",
    "MEETING_LAUNCHED_EVENT_TYPE",
    "MEETING_TRANSITIONED_EVENT_TYPE",
    "MOTION_CANCELLED_EVENT_TYPE",
    "MOTION_CLOSED_EVENT_TYPE",
    "MOTION_CONSOLIDATED_EVENT_TYPE",
    "MOTION_OPENED_EVENT_TYPE",
    "PROXY_REVOKED_EVENT_TYPE",
    "PROXY_UPSERTED_EVENT_TYPE",
    "MeetingLaunchedPayload",
    "MeetingTransitionedPayload",
    "MotionConsolidatedPayload",
]
