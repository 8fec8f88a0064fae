"""
Pytest configuration and shared fixtures for the governance engine tests.

Testing Standards:
- Async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async port mocking, stubs from infrastructure.stubs otherwise
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
- Time-dependent code gets a FakeTimeAuthority, never the wall clock
"""

import pytest

from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.governance_factory import GovernanceHarness


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from assembly_engine import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Time frozen at 2026-01-01T00:00:00 UTC."""
    return FakeTimeAuthority()


@pytest.fixture
def harness(fake_time_authority: FakeTimeAuthority) -> GovernanceHarness:
    """All governance services wired to in-memory ports and the fake clock."""
    return GovernanceHarness.build(clock=fake_time_authority)
