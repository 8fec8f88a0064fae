"""Fixtures for the scenario tests.

Scenarios run every service together over the in-memory store, starting
from a draft meeting of ten members (voting power 1) with one motion on
the agenda, a 50% members quorum and a simple majority of expressed
votes. PostgreSQL adapter tests bring their own fixtures and only run
when DATABASE_URL is set.
"""

from dataclasses import dataclass

import pytest

from assembly_engine.domain.models.meeting import Meeting
from assembly_engine.domain.models.member import Member
from assembly_engine.domain.models.motion import Motion
from tests.helpers.governance_factory import GovernanceHarness


@dataclass
class Assembly:
    meeting: Meeting
    motion: Motion
    members: list[Member]


@pytest.fixture
def assembly(harness: GovernanceHarness) -> Assembly:
    harness.seed_policies(quorum_threshold=0.5, vote_threshold=0.5)
    members = harness.seed_members(10)
    meeting = harness.seed_meeting()
    motion = harness.seed_motion(meeting)
    return Assembly(meeting=meeting, motion=motion, members=members)
