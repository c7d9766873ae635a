"""
Error taxonomy for labdesk workflows.

Validation failures are raised locally before any collaborator call. The
remaining errors originate at (or are translated from) the collaborator
boundary and propagate unchanged to the caller.
"""

from __future__ import annotations

from typing import Hashable, Iterable, Optional


class LabdeskError(Exception):
    """Base class for every error raised by labdesk."""


class ValidationError(LabdeskError):
    """Invalid input detected before contacting the collaborator."""


class UnsupportedOperationError(ValidationError):
    """The collaborator lacks the capability required by the operation."""


class NotFoundError(LabdeskError):
    """A transition target no longer exists."""


class ConflictError(LabdeskError):
    """The target changed since it was loaded (stale version or terminal state)."""


class TransportError(LabdeskError):
    """The collaborator is unreachable or failed while serving the request."""


class PartialFailureError(LabdeskError):
    """
    A bulk operation reported fewer successes than requested.

    `failed_ids` is None when the collaborator only reports a success count.
    """

    def __init__(
        self,
        operation: str,
        requested: Iterable[Hashable],
        succeeded: int,
        failed_ids: Optional[Iterable[Hashable]] = None,
    ) -> None:
        self.operation = operation
        self.requested = frozenset(requested)
        self.succeeded = succeeded
        self.failed_ids = frozenset(failed_ids) if failed_ids is not None else None
        detail = (
            f" (failed ids: {sorted(self.failed_ids, key=str)})"
            if self.failed_ids is not None
            else ""
        )
        super().__init__(
            f"{operation}: {succeeded} of {len(self.requested)} records succeeded{detail}"
        )

    @property
    def failed_count(self) -> int:
        return len(self.requested) - self.succeeded


__all__ = [
    "LabdeskError",
    "ValidationError",
    "UnsupportedOperationError",
    "NotFoundError",
    "ConflictError",
    "TransportError",
    "PartialFailureError",
]
