"""Lookup errors for tenant-scoped resources.

A resource that exists under another tenant is reported as not found.
"""

from __future__ import annotations

from uuid import UUID

from assembly_engine.domain.exceptions import GovernanceError


class ResourceNotFoundError(GovernanceError):
    resource: str = "resource"

    def __init__(self, resource_id: UUID) -> None:
        self.resource_id = resource_id
        super().__init__(
            f"{self.resource.capitalize()} {resource_id} not found",
            detail={f"{self.resource}_id": str(resource_id)},
        )


class MeetingNotFoundError(ResourceNotFoundError):
    code = "meeting_not_found"
    resource = "meeting"


class MotionNotFoundError(ResourceNotFoundError):
    code = "motion_not_found"
    resource = "motion"


class MemberNotFoundError(ResourceNotFoundError):
    code = "member_not_found"
    resource = "member"


class ProxyNotFoundError(ResourceNotFoundError):
    code = "proxy_not_found"
    resource = "proxy"
