"""
Collaborator contracts for labdesk.

The workflow core never touches storage directly. Anything that can fetch
records and registration requests and apply transitions to them implements the
`RecordStore` protocol (or subclasses `AbstractRecordStore`). Deletion is an
optional capability described separately by `SupportsDelete`.

Bulk operations return either a plain success count or a per-id mapping of
outcomes. Stores that can tell which ids failed should return the mapping.
"""

from __future__ import annotations

import abc
from typing import (
    AbstractSet,
    Any,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Union,
    runtime_checkable,
)

from labdesk.domain.models import (
    DecisionAction,
    ExportArtifact,
    ExportFormat,
    Record,
    RecordId,
    RegistrationRequest,
)

BulkResult = Union[int, Mapping[RecordId, bool]]


@runtime_checkable
class RecordStore(Protocol):
    """
    Persistence/query collaborator every workflow talks to.

    All methods are coroutines; callers await them one at a time.
    """

    async def fetch_active(self) -> Sequence[Record]:
        """Records currently in the active state."""
        ...

    async def fetch_archived(self) -> Sequence[Record]:
        """Records currently in the archived state."""
        ...

    async def fetch_pending(self) -> Sequence[RegistrationRequest]:
        """Registration requests still awaiting a decision, oldest first."""
        ...

    async def archive(self, ids: AbstractSet[RecordId], actor_id: int) -> BulkResult:
        """Move active records to the archive on behalf of `actor_id`."""
        ...

    async def restore(self, ids: AbstractSet[RecordId]) -> BulkResult:
        """Bring archived records back to the active state."""
        ...

    async def export(self, ids: AbstractSet[RecordId], format: ExportFormat) -> ExportArtifact:
        """Produce an export of the given records and return a reference to it."""
        ...

    async def forward(
        self, ids: AbstractSet[RecordId], approver_id: int, notes: str
    ) -> BulkResult:
        """Forward equipment reports to an administrator."""
        ...

    async def decide(
        self,
        request_id: int,
        approver_id: int,
        action: DecisionAction,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> None:
        """Approve or reject a pending registration request."""
        ...


@runtime_checkable
class SupportsDelete(Protocol):
    """Optional capability: permanent removal of records."""

    async def delete(self, ids: AbstractSet[RecordId]) -> BulkResult:
        ...


def supports_delete(store: Any) -> bool:
    return isinstance(store, SupportsDelete)


class AbstractRecordStore(abc.ABC):
    """
    Optional ABC helper for class-based stores.

    Subclasses implement every `RecordStore` method; add a `delete` coroutine to
    advertise the deletion capability.
    """

    @abc.abstractmethod
    async def fetch_active(self) -> Sequence[Record]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def fetch_archived(self) -> Sequence[Record]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def fetch_pending(self) -> Sequence[RegistrationRequest]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def archive(
        self, ids: AbstractSet[RecordId], actor_id: int
    ) -> BulkResult:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def restore(self, ids: AbstractSet[RecordId]) -> BulkResult:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def export(
        self, ids: AbstractSet[RecordId], format: ExportFormat
    ) -> ExportArtifact:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def forward(
        self, ids: AbstractSet[RecordId], approver_id: int, notes: str
    ) -> BulkResult:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def decide(
        self,
        request_id: int,
        approver_id: int,
        action: DecisionAction,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> None:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = [
    "AbstractRecordStore",
    "BulkResult",
    "RecordStore",
    "SupportsDelete",
    "supports_delete",
]
