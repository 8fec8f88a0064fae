"""Base exception classes for the governance domain layer."""

from __future__ import annotations

from typing import Any


class GovernanceError(Exception):
    """Base exception for all governance engine errors.

    Every engine failure carries a stable, machine-readable ``code`` so
    request handlers can map it to a response without parsing messages,
    plus an optional ``detail`` mapping with structured context (for
    example the list of blocking readiness issues).

    Engine errors describe a permission or business-rule gap. They are
    never retried automatically.
    """

    code: str = "governance_error"

    def __init__(self, message: str = "", detail: dict[str, Any] | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            detail: Structured context for the caller.
        """
        super().__init__(message)
        self.detail: dict[str, Any] = dict(detail or {})

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses and audit payloads."""
        return {
            "code": self.code,
            "message": str(self),
            "detail": dict(self.detail),
        }
