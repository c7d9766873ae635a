"""
Bulk lifecycle transitions: archive, restore, delete, forward and export.

The controller validates locally, calls the collaborator once, and reports the
result. It never mutates records itself and never reloads: on success (or a
partial failure) the caller must reload the dataset and clear the transitioned
ids from its selection, in that order, before the view is consistent again.
`RecordBrowser` does exactly that.

Usage:
    controller = LifecycleTransitionController(store)
    outcome = await controller.restore({12, 13})
    print(outcome.succeeded)
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, FrozenSet, Iterable, Mapping, Optional, TypeVar

from labdesk.collaborators.abstract import BulkResult, RecordStore, supports_delete
from labdesk.domain.models import BulkOutcome, ExportArtifact, ExportFormat, RecordId
from labdesk.errors import (
    LabdeskError,
    PartialFailureError,
    TransportError,
    UnsupportedOperationError,
    ValidationError,
)
from labdesk.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


def _require_ids(ids: Iterable[RecordId], operation: str) -> FrozenSet[RecordId]:
    requested = frozenset(ids)
    if not requested:
        raise ValidationError(f"{operation}: no records selected")
    return requested


def _coerce_format(format: Any) -> ExportFormat:
    try:
        return ExportFormat(format)
    except ValueError as exc:
        allowed = ", ".join(f.value for f in ExportFormat)
        raise ValidationError(f"export: unsupported format {format!r} (use {allowed})") from exc


def to_outcome(
    operation: str, requested: FrozenSet[RecordId], result: Optional[BulkResult]
) -> BulkOutcome:
    """
    Normalize a collaborator's bulk result.

    A mapping pins down exactly which ids failed; a bare count only says how
    many succeeded; None means the collaborator reports plain success.
    """
    if result is None:
        return BulkOutcome(
            operation=operation,
            requested=requested,
            succeeded=len(requested),
            failed_ids=frozenset(),
        )
    if isinstance(result, Mapping):
        succeeded = {record_id for record_id in requested if result.get(record_id, False)}
        return BulkOutcome(
            operation=operation,
            requested=requested,
            succeeded=len(succeeded),
            failed_ids=requested - succeeded,
        )

    count = int(result)
    if count < 0 or count > len(requested):
        raise TransportError(
            f"{operation}: collaborator reported {count} successes for {len(requested)} records"
        )
    return BulkOutcome(
        operation=operation,
        requested=requested,
        succeeded=count,
        failed_ids=frozenset() if count == len(requested) else None,
    )


class LifecycleTransitionController:
    """
    Executes bulk state transitions against a `RecordStore`.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    @property
    def can_delete(self) -> bool:
        return supports_delete(self.store)

    async def _call(
        self, operation: str, requested: FrozenSet[RecordId], call: Callable[[], Awaitable[T]]
    ) -> T:
        log.info(
            f"[TRANSITION START] {operation}",
            extra={"operation": operation, "requested": len(requested)},
        )
        try:
            return await call()
        except LabdeskError as exc:
            log.warning(
                f"[TRANSITION FAILED] {operation}: {exc}",
                extra={"operation": operation, "error": type(exc).__name__},
            )
            raise
        except Exception as exc:
            log.exception(f"[TRANSITION FAILED] {operation}", extra={"operation": operation})
            raise TransportError(f"{operation} failed: {exc}") from exc

    async def _bulk(
        self,
        operation: str,
        requested: FrozenSet[RecordId],
        call: Callable[[], Awaitable[Optional[BulkResult]]],
    ) -> BulkOutcome:
        result = await self._call(operation, requested, call)
        outcome = to_outcome(operation, requested, result)
        if outcome.partial:
            log.warning(
                f"[TRANSITION PARTIAL] {operation}: {outcome.succeeded}/{len(requested)}",
                extra={
                    "operation": operation,
                    "succeeded": outcome.succeeded,
                    "requested": len(requested),
                },
            )
            raise PartialFailureError(
                operation, requested, outcome.succeeded, outcome.failed_ids
            )
        log.info(
            f"[TRANSITION SUCCESS] {operation}",
            extra={"operation": operation, "succeeded": outcome.succeeded},
        )
        return outcome

    async def archive(self, ids: Iterable[RecordId], actor_id: int) -> BulkOutcome:
        requested = _require_ids(ids, "archive")
        if actor_id is None:
            raise ValidationError("archive: an acting user is required")
        return await self._bulk("archive", requested, lambda: self.store.archive(requested, actor_id))

    async def restore(self, ids: Iterable[RecordId]) -> BulkOutcome:
        requested = _require_ids(ids, "restore")
        return await self._bulk("restore", requested, lambda: self.store.restore(requested))

    async def delete(self, ids: Iterable[RecordId]) -> BulkOutcome:
        """
        Permanently delete records.

        Callers must obtain explicit user confirmation first; the controller
        does not ask.
        """
        requested = _require_ids(ids, "delete")
        if not self.can_delete:
            raise UnsupportedOperationError("delete: the record store does not support deletion")
        return await self._bulk(
            "delete", requested, lambda: self.store.delete(requested)  # type: ignore[attr-defined]
        )

    async def forward(
        self, ids: Iterable[RecordId], approver_id: int, notes: str = ""
    ) -> BulkOutcome:
        requested = _require_ids(ids, "forward")
        if approver_id is None:
            raise ValidationError("forward: an approver is required")
        return await self._bulk(
            "forward", requested, lambda: self.store.forward(requested, approver_id, notes or "")
        )

    async def export(self, ids: Iterable[RecordId], format: Any) -> ExportArtifact:
        requested = _require_ids(ids, "export")
        export_format = _coerce_format(format)
        artifact = await self._call(
            "export", requested, lambda: self.store.export(requested, export_format)
        )
        log.info(
            f"[TRANSITION SUCCESS] export -> {artifact.reference}",
            extra={"operation": "export", "format": export_format.value, "count": artifact.count},
        )
        return artifact


__all__ = ["LifecycleTransitionController", "to_outcome"]
