"""
Pytest configuration for labdesk.

Provides fixtures for:
- Settings with test-specific overrides
- Record factories and the standard two-day scenario dataset
- A seeded in-memory store and a call-recording fake collaborator
"""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, AbstractSet, Callable, Dict, List, Optional, Sequence

import pytest

from labdesk.collaborators.memory import InMemoryRecordStore
from labdesk.config import Settings, get_settings
from labdesk.domain.models import (
    DecisionAction,
    ExportArtifact,
    ExportFormat,
    Record,
    RecordKind,
    RecordStatus,
    RegistrationRequest,
)


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Drop cached settings so env changes made by a test take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return Settings(
        log_level="DEBUG",
        page_size=5,
        export_dir=Path("exports"),
        approval_version_check=False,
    )


def make_record(
    record_id: int,
    timestamp: str,
    status: RecordStatus = RecordStatus.ARCHIVED,
    kind: RecordKind = RecordKind.LOGIN_LOG,
    **extra: Any,
) -> Record:
    return Record(id=record_id, timestamp=timestamp, status=status, kind=kind, **extra)


@pytest.fixture
def record_factory() -> Callable[..., Record]:
    return make_record


@pytest.fixture
def two_day_records() -> List[Record]:
    """Three records on 2024-01-01 and four on 2024-01-02, interleaved."""
    stamps = [
        "2024-01-01 08:00:00",
        "2024-01-02 09:00:00",
        "2024-01-01 10:30:00",
        "2024-01-02 11:15:00",
        "2024-01-02 13:45:00",
        "2024-01-01 15:00:00",
        "2024-01-02 16:20:00",
    ]
    return [make_record(index + 1, stamp) for index, stamp in enumerate(stamps)]


def make_registrations(count: int = 3) -> List[RegistrationRequest]:
    base = datetime(2024, 3, 1, 8, 0, 0)
    return [
        RegistrationRequest(
            id=index,
            submitted_at=base + timedelta(hours=index),
            student_number=f"2024-0000{index}",
            full_name=f"Student {index}",
            email=f"student{index}@example.edu",
        )
        for index in range(1, count + 1)
    ]


@pytest.fixture
def registrations() -> List[RegistrationRequest]:
    return make_registrations()


@pytest.fixture
def memory_store(
    two_day_records: List[Record], registrations: List[RegistrationRequest]
) -> InMemoryRecordStore:
    return InMemoryRecordStore(two_day_records, registrations, export_dir=Path("exports"))


class _FakeRecordStore:
    """
    Fake collaborator that records every call and returns canned results.

    Bulk results default to a plain success count covering every requested id.
    It has no `delete`, so it models a store without the deletion capability.
    """

    def __init__(
        self,
        active: Sequence[Record] = (),
        archived: Sequence[Record] = (),
        pending: Sequence[RegistrationRequest] = (),
    ) -> None:
        self.active = list(active)
        self.archived = list(archived)
        self.pending = list(pending)
        self.calls: List[tuple] = []
        self.results: Dict[str, Any] = {}
        self.errors: Dict[str, Exception] = {}

    def _result(self, name: str, ids: AbstractSet[int]) -> Any:
        if name in self.errors:
            raise self.errors[name]
        return self.results.get(name, len(ids))

    async def fetch_active(self) -> Sequence[Record]:
        self.calls.append(("fetch_active",))
        if "fetch_active" in self.errors:
            raise self.errors["fetch_active"]
        return list(self.active)

    async def fetch_archived(self) -> Sequence[Record]:
        self.calls.append(("fetch_archived",))
        if "fetch_archived" in self.errors:
            raise self.errors["fetch_archived"]
        return list(self.archived)

    async def fetch_pending(self) -> Sequence[RegistrationRequest]:
        self.calls.append(("fetch_pending",))
        if "fetch_pending" in self.errors:
            raise self.errors["fetch_pending"]
        return list(self.pending)

    async def archive(self, ids: AbstractSet[int], actor_id: int) -> Any:
        self.calls.append(("archive", frozenset(ids), actor_id))
        return self._result("archive", ids)

    async def restore(self, ids: AbstractSet[int]) -> Any:
        self.calls.append(("restore", frozenset(ids)))
        return self._result("restore", ids)

    async def export(self, ids: AbstractSet[int], format: ExportFormat) -> ExportArtifact:
        self.calls.append(("export", frozenset(ids), format))
        if "export" in self.errors:
            raise self.errors["export"]
        return ExportArtifact(format=format, reference=f"exports/test.{format.value}", count=len(ids))

    async def forward(self, ids: AbstractSet[int], approver_id: int, notes: str) -> Any:
        self.calls.append(("forward", frozenset(ids), approver_id, notes))
        return self._result("forward", ids)

    async def decide(
        self,
        request_id: int,
        approver_id: int,
        action: DecisionAction,
        reason: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> None:
        self.calls.append(("decide", request_id, approver_id, action, reason, expected_version))
        if "decide" in self.errors:
            raise self.errors["decide"]
        self.pending = [r for r in self.pending if r.id != request_id]

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]


class _FakeDeletingRecordStore(_FakeRecordStore):
    """Recording fake that also advertises the deletion capability."""

    async def delete(self, ids: AbstractSet[int]) -> Any:
        self.calls.append(("delete", frozenset(ids)))
        return self._result("delete", ids)


@pytest.fixture
def recording_store(two_day_records: List[Record]) -> _FakeRecordStore:
    return _FakeRecordStore(archived=two_day_records)


@pytest.fixture
def deleting_store(two_day_records: List[Record]) -> _FakeDeletingRecordStore:
    return _FakeDeletingRecordStore(archived=two_day_records)
