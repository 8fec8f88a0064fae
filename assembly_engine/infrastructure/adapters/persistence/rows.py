"""Conversion between domain dataclasses and database rows.

Column names match dataclass field names; enum fields are stored as
their string value.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields
from enum import Enum
from typing import Any

from assembly_engine.domain.models.attendance import Attendance, AttendanceMode
from assembly_engine.domain.models.ballot import Ballot, BallotChoice, BallotSource
from assembly_engine.domain.models.meeting import Meeting, MeetingStatus
from assembly_engine.domain.models.member import Member
from assembly_engine.domain.models.motion import Motion
from assembly_engine.domain.models.policy import (
    MajorityBase,
    QuorumDenominator,
    QuorumMode,
    QuorumPolicy,
    VotePolicy,
)
from assembly_engine.domain.models.proxy import Proxy
from assembly_engine.domain.models.tally import Decision, OfficialSource


def to_row(model: Any) -> dict[str, Any]:
    return {
        f.name: value.value if isinstance(value, Enum) else value
        for f in fields(model)
        for value in (getattr(model, f.name),)
    }


def _optional(enum_type: type[Enum], value: Any) -> Any:
    return enum_type(value) if value is not None else None


def meeting_from_row(row: Mapping[str, Any]) -> Meeting:
    data = dict(row)
    data["status"] = MeetingStatus(data["status"])
    return Meeting(**data)


def motion_from_row(row: Mapping[str, Any]) -> Motion:
    data = dict(row)
    data["decision"] = Decision(data["decision"])
    data["official_source"] = _optional(OfficialSource, data["official_source"])
    return Motion(**data)


def member_from_row(row: Mapping[str, Any]) -> Member:
    return Member(**row)


def attendance_from_row(row: Mapping[str, Any]) -> Attendance:
    data = dict(row)
    data["mode"] = AttendanceMode(data["mode"])
    return Attendance(**data)


def proxy_from_row(row: Mapping[str, Any]) -> Proxy:
    return Proxy(**row)


def ballot_from_row(row: Mapping[str, Any]) -> Ballot:
    data = dict(row)
    data["choice"] = BallotChoice(data["choice"])
    data["source"] = BallotSource(data["source"])
    return Ballot(**data)


def quorum_policy_from_row(row: Mapping[str, Any]) -> QuorumPolicy:
    data = {k: v for k, v in row.items() if k != "is_default"}
    data["mode"] = QuorumMode(data["mode"])
    data["denominator"] = QuorumDenominator(data["denominator"])
    data["denominator2"] = _optional(QuorumDenominator, data["denominator2"])
    return QuorumPolicy(**data)


def vote_policy_from_row(row: Mapping[str, Any]) -> VotePolicy:
    data = {k: v for k, v in row.items() if k != "is_default"}
    data["base"] = MajorityBase(data["base"])
    return VotePolicy(**data)
