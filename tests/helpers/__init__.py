"""Test helpers: controllable clock and governance data builders.

Usage:
    from tests.helpers import FakeTimeAuthority, GovernanceHarness
"""

from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.governance_factory import GovernanceHarness

__all__ = ["FakeTimeAuthority", "GovernanceHarness"]
