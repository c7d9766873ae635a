"""
In-memory record store, plus a JSON-file variant for the CLI.

Mirrors the lab system's backend rules: archive only touches active records,
restore only archived ones, forwarding only equipment reports that were not yet
forwarded, and decisions only pending registrations. Bulk operations report
per-id outcomes.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import AbstractSet, Callable, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field

from labdesk.collaborators.abstract import AbstractRecordStore
from labdesk.config import get_settings
from labdesk.domain.models import (
    DecisionAction,
    ExportArtifact,
    ExportFormat,
    Record,
    RecordId,
    RecordKind,
    RecordStatus,
    RegistrationRequest,
    RequestStatus,
)
from labdesk.errors import ConflictError, NotFoundError, ValidationError
from labdesk.utils.logging import get_logger

log = get_logger(__name__)


class StoreSnapshot(BaseModel):
    """Serializable contents of a store."""

    records: List[Record] = Field(default_factory=list)
    registrations: List[RegistrationRequest] = Field(default_factory=list)


class InMemoryRecordStore(AbstractRecordStore):
    """
    Dictionary-backed store implementing the full collaborator contract,
    including deletion.
    """

    def __init__(
        self,
        records: Iterable[Record] = (),
        registrations: Iterable[RegistrationRequest] = (),
        export_dir: Optional[Path] = None,
    ) -> None:
        self._records: Dict[RecordId, Record] = {r.id: r for r in records}
        self._registrations: Dict[int, RegistrationRequest] = {r.id: r for r in registrations}
        self._export_dir = export_dir if export_dir is not None else get_settings().export_dir
        self.exports: List[ExportArtifact] = []

    # -- queries ---------------------------------------------------------------

    def _by_status(self, status: RecordStatus) -> List[Record]:
        matching = [r for r in self._records.values() if r.status is status]
        return sorted(matching, key=lambda r: r.timestamp, reverse=True)

    async def fetch_active(self) -> Sequence[Record]:
        return self._by_status(RecordStatus.ACTIVE)

    async def fetch_archived(self) -> Sequence[Record]:
        return self._by_status(RecordStatus.ARCHIVED)

    async def fetch_pending(self) -> Sequence[RegistrationRequest]:
        pending = [
            r for r in self._registrations.values() if r.status is RequestStatus.PENDING
        ]
        return sorted(pending, key=lambda r: r.submitted_at)

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            records=sorted(self._records.values(), key=lambda r: r.id),
            registrations=sorted(self._registrations.values(), key=lambda r: r.id),
        )

    # -- transitions -----------------------------------------------------------

    def _known(self, ids: AbstractSet[RecordId], operation: str) -> None:
        live = {
            record_id
            for record_id in ids
            if record_id in self._records
            and self._records[record_id].status is not RecordStatus.DELETED
        }
        if not live:
            raise NotFoundError(f"{operation}: none of the records {sorted(ids)} exist")

    def _apply(
        self,
        operation: str,
        ids: AbstractSet[RecordId],
        eligible: Callable[[Record], bool],
        changes: Dict[str, object],
    ) -> Dict[RecordId, bool]:
        self._known(ids, operation)
        outcome: Dict[RecordId, bool] = {}
        for record_id in sorted(ids):
            record = self._records.get(record_id)
            if record is None or not eligible(record):
                outcome[record_id] = False
                continue
            self._records[record_id] = record.model_copy(update=changes)
            outcome[record_id] = True
        affected = sum(outcome.values())
        log.info(
            f"[STORE] {operation} affected {affected} of {len(ids)} records",
            extra={"operation": operation, "affected": affected, "requested": len(ids)},
        )
        self._changed()
        return outcome

    async def archive(self, ids: AbstractSet[RecordId], actor_id: int) -> Dict[RecordId, bool]:
        return self._apply(
            "archive",
            ids,
            lambda r: r.status is RecordStatus.ACTIVE,
            {"status": RecordStatus.ARCHIVED},
        )

    async def restore(self, ids: AbstractSet[RecordId]) -> Dict[RecordId, bool]:
        return self._apply(
            "restore",
            ids,
            lambda r: r.status is RecordStatus.ARCHIVED,
            {"status": RecordStatus.ACTIVE},
        )

    async def delete(self, ids: AbstractSet[RecordId]) -> Dict[RecordId, bool]:
        return self._apply(
            "delete",
            ids,
            lambda r: r.status is not RecordStatus.DELETED,
            {"status": RecordStatus.DELETED},
        )

    async def forward(
        self, ids: AbstractSet[RecordId], approver_id: int, notes: str
    ) -> Dict[RecordId, bool]:
        self._known(ids, "forward")
        outcome: Dict[RecordId, bool] = {}
        for record_id in sorted(ids):
            record = self._records.get(record_id)
            if (
                record is None
                or record.kind is not RecordKind.EQUIPMENT_REPORT
                or record.forwarded
                or record.status is RecordStatus.DELETED
            ):
                outcome[record_id] = False
                continue
            details = dict(record.details)
            details["forwarded_by"] = str(approver_id)
            if notes:
                details["notes"] = notes
            self._records[record_id] = record.model_copy(
                update={"forwarded": True, "details": details}
            )
            outcome[record_id] = True
        log.info(
            f"[STORE] forward affected {sum(outcome.values())} of {len(ids)} records",
            extra={"operation": "forward", "approver_id": approver_id},
        )
        self._changed()
        return outcome

    async def export(self, ids: AbstractSet[RecordId], format: ExportFormat) -> ExportArtifact:
        self._known(ids, "export")
        count = sum(
            1
            for record_id in ids
            if record_id in self._records
            and self._records[record_id].status is not RecordStatus.DELETED
        )
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        reference = str(self._export_dir / f"records-{stamp}.{ExportFormat(format).value}")
        artifact = ExportArtifact(format=format, reference=reference, count=count)
        self.exports.append(artifact)
        log.info(f"[STORE] export of {count} records -> {reference}")
        return artifact

    async def decide(
        self,
        request_id: int,
        approver_id: int,
        action: DecisionAction,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> None:
        request = self._registrations.get(request_id)
        if request is None:
            raise NotFoundError(f"registration request {request_id} not found")
        if request.is_terminal:
            raise ConflictError(
                f"registration request {request_id} was already {request.status.value}"
            )
        if expected_version is not None and expected_version != request.version:
            raise ConflictError(
                f"registration request {request_id} changed "
                f"(expected version {expected_version}, found {request.version})"
            )
        action = DecisionAction(action)
        if action is DecisionAction.REJECT and not (reason or "").strip():
            raise ValidationError("rejection reason is required")

        self._registrations[request_id] = request.model_copy(
            update={
                "status": RequestStatus.APPROVED
                if action is DecisionAction.APPROVE
                else RequestStatus.REJECTED,
                "approver_id": approver_id,
                "rejection_reason": reason if action is DecisionAction.REJECT else None,
                "version": request.version + 1,
            }
        )
        log.info(
            f"[STORE] registration {request_id} {action.value}d by {approver_id}",
            extra={"request_id": request_id, "approver_id": approver_id},
        )
        self._changed()

    def _changed(self) -> None:
        """Hook for subclasses that persist state after each mutation."""


class JsonFileRecordStore(InMemoryRecordStore):
    """
    In-memory store snapshotted to a JSON file after every mutation, so separate
    CLI invocations share state.
    """

    def __init__(self, path: Path | str, export_dir: Optional[Path] = None) -> None:
        self.path = Path(path)
        snapshot = StoreSnapshot()
        if self.path.exists():
            with self.path.open("r", encoding="utf-8") as f:
                snapshot = StoreSnapshot.model_validate(json.load(f))
        super().__init__(snapshot.records, snapshot.registrations, export_dir=export_dir)

    def _changed(self) -> None:
        save_snapshot(self.snapshot(), self.path)


def save_snapshot(snapshot: StoreSnapshot, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(snapshot.model_dump(mode="json"), f, indent=2, sort_keys=True)
    log.debug("Store persisted", extra={"path": str(path)})


__all__ = ["InMemoryRecordStore", "JsonFileRecordStore", "StoreSnapshot", "save_snapshot"]
