"""Configuration module for the governance engine.

Available Configurations:
- GovernanceConfig: proxy cap, eligibility basis, audit and notification delivery
"""

from assembly_engine.config.governance_config import (
    DEFAULT_GOVERNANCE_CONFIG,
    TEST_GOVERNANCE_CONFIG,
    GovernanceConfig,
)

__all__ = [
    "GovernanceConfig",
    "DEFAULT_GOVERNANCE_CONFIG",
    "TEST_GOVERNANCE_CONFIG",
]
