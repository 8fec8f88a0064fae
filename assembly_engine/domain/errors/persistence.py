"""Opaque persistence failures.

A database error during a transactional step rolls the whole step back
and is reported as ``<operation>_failed``. The caller may retry the entire
operation.
"""

from __future__ import annotations

from assembly_engine.domain.exceptions import GovernanceError


class OperationFailedError(GovernanceError):
    """Raised when the store fails during a unit of work.

    The original exception is chained via ``raise ... from`` and is never
    exposed in ``detail``.

    Attributes:
        operation: Short operation name, e.g. ``transition`` or ``launch``.
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        self.code = f"{operation}_failed"
        super().__init__(
            f"{operation} failed, no changes were applied",
            detail={"operation": operation},
        )
