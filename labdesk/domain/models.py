"""
Domain models for labdesk.

Records (login logs and equipment reports) move through an archival lifecycle;
registration requests move through a two-outcome approval workflow. All models
are frozen value types: state changes happen at the collaborator and come back
on the next fetch.
"""
from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, Field

RecordId = int

_KEY_SEPARATOR = re.compile(r"[T\s]")


def group_key_for(timestamp: str) -> str:
    """
    Date portion of a timestamp: the text before the first space or ``T``.

    Timestamps without a separator yield the whole string.
    """
    return _KEY_SEPARATOR.split(timestamp, maxsplit=1)[0]


class RecordStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class RecordKind(str, Enum):
    LOGIN_LOG = "login_log"
    EQUIPMENT_REPORT = "equipment_report"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


TERMINAL_REQUEST_STATUSES = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED})


class DecisionAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ExportFormat(str, Enum):
    CSV = "csv"
    PDF = "pdf"


class GroupState(str, Enum):
    """Tri-state selection indicator for a group of records."""

    ALL = "all"
    SOME = "some"
    NONE = "none"


_FROZEN = {"frozen": True, "populate_by_name": True}


class Record(BaseModel):
    """
    A lab record subject to the archival lifecycle.
    """

    id: RecordId = Field(..., description="Stable record identifier.")
    timestamp: str = Field(..., description="Submission or login time, ISO-8601 text.")
    status: RecordStatus = Field(RecordStatus.ACTIVE, description="Lifecycle state.")
    kind: RecordKind = Field(RecordKind.LOGIN_LOG, description="Record family.")
    owner_name: str = Field("", description="Student or teacher the record belongs to.")
    pc_number: Optional[str] = Field(None, description="Lab workstation label.")
    details: Dict[str, str] = Field(default_factory=dict, description="Free-form fields.")
    forwarded: bool = Field(False, description="Forwarded to an administrator.")

    model_config = _FROZEN

    @property
    def group_key(self) -> str:
        return group_key_for(self.timestamp)


class Group(BaseModel):
    """
    Records sharing a date-derived key, kept in input order.
    """

    key: str
    records: Tuple[Record, ...]
    expanded: bool = False

    model_config = _FROZEN

    @property
    def ids(self) -> Tuple[RecordId, ...]:
        return tuple(record.id for record in self.records)

    @property
    def size(self) -> int:
        return len(self.records)


class RegistrationRequest(BaseModel):
    """
    A pending student registration awaiting a working student's decision.
    """

    id: int
    status: RequestStatus = RequestStatus.PENDING
    approver_id: Optional[int] = None
    rejection_reason: Optional[str] = None
    submitted_at: datetime
    student_number: str = ""
    full_name: str = ""
    email: str = ""
    version: int = Field(0, ge=0, description="Bumped by the store on every change.")

    model_config = _FROZEN

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_REQUEST_STATUSES


class Window(BaseModel):
    """
    Slice of an ordered key sequence selected by the paginator.
    """

    start_index: int
    end_index: int
    clamped_page: int
    total_pages: int

    model_config = _FROZEN


class BulkOutcome(BaseModel):
    """
    Result of a bulk transition as reported by the collaborator.

    `failed_ids` is None when the collaborator only reported a success count.
    """

    operation: str
    requested: FrozenSet[RecordId]
    succeeded: int
    failed_ids: Optional[FrozenSet[RecordId]] = None

    model_config = _FROZEN

    @property
    def partial(self) -> bool:
        return self.succeeded < len(self.requested)


class ExportArtifact(BaseModel):
    """
    Reference to an export produced by the export collaborator.
    """

    format: ExportFormat
    reference: str
    count: int

    model_config = _FROZEN


__all__ = [
    "RecordId",
    "group_key_for",
    "RecordStatus",
    "RecordKind",
    "RequestStatus",
    "TERMINAL_REQUEST_STATUSES",
    "DecisionAction",
    "ExportFormat",
    "GroupState",
    "Record",
    "Group",
    "RegistrationRequest",
    "Window",
    "BulkOutcome",
    "ExportArtifact",
]
