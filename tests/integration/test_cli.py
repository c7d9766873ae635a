"""
End-to-end tests for the labdesk CLI.

Each test points DATA_FILE at a fresh JSON file under tmp_path, seeds it, and
drives the typer app through CliRunner so every command goes through the real
browser, workflow and JSON-file store.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

import pytest
from typer.testing import CliRunner

from labdesk.collaborators.memory import StoreSnapshot, save_snapshot
from labdesk.config import get_settings
from labdesk.domain.models import Record, RecordKind, RecordStatus, RegistrationRequest
from labdesk.main import app

pytestmark = pytest.mark.integration

APPROVER_ID = 42


@pytest.fixture
def data_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "records.json"
    snapshot = StoreSnapshot(
        records=[
            Record(id=1, timestamp="2024-01-01 08:00:00", status=RecordStatus.ARCHIVED),
            Record(id=2, timestamp="2024-01-02 09:00:00", status=RecordStatus.ARCHIVED),
            Record(
                id=3,
                timestamp="2024-01-02 10:00:00",
                status=RecordStatus.ACTIVE,
                kind=RecordKind.EQUIPMENT_REPORT,
            ),
        ],
        registrations=[
            RegistrationRequest(id=1, submitted_at=datetime(2024, 3, 1, 8), full_name="Ana Reyes"),
        ],
    )
    save_snapshot(snapshot, path)
    monkeypatch.setenv("DATA_FILE", str(path))
    monkeypatch.setenv("EXPORT_DIR", str(tmp_path / "exports"))
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    yield path
    # CliRunner closes the stream the CLI configured logging with.
    logging.getLogger().handlers.clear()


def _stored(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_show_lists_archived_groups(runner: CliRunner, data_file: Path) -> None:
    result = runner.invoke(app, ["show", "--expand", "2024-01-01"])

    assert result.exit_code == 0, result.output
    assert "Tuesday, January 2, 2024" in result.output
    assert "Monday, January 1, 2024" in result.output


def test_restore_moves_records_and_persists(runner: CliRunner, data_file: Path) -> None:
    result = runner.invoke(app, ["restore", "1", "2"])

    assert result.exit_code == 0, result.output
    assert "Restored 2 record(s)." in result.output
    statuses = {r["id"]: r["status"] for r in _stored(data_file)["records"]}
    assert statuses == {1: "active", 2: "active", 3: "active"}


def test_delete_declined_at_prompt(runner: CliRunner, data_file: Path) -> None:
    result = runner.invoke(app, ["delete", "1"], input="n\n")

    assert result.exit_code == 0, result.output
    assert "Deletion cancelled." in result.output
    statuses = {r["id"]: r["status"] for r in _stored(data_file)["records"]}
    assert statuses[1] == "archived"


def test_forward_equipment_report(runner: CliRunner, data_file: Path) -> None:
    result = runner.invoke(app, ["forward", "3", "--approver", str(APPROVER_ID), "-n", "fan noise"])

    assert result.exit_code == 0, result.output
    assert "Forwarded 1 report(s)." in result.output


def test_reject_requires_reason(runner: CliRunner, data_file: Path) -> None:
    result = runner.invoke(app, ["reject", "1", "--approver", str(APPROVER_ID), "--reason", " "])

    assert result.exit_code == 1
    assert _stored(data_file)["registrations"][0]["status"] == "pending"


def test_approve_then_pending_is_empty(runner: CliRunner, data_file: Path) -> None:
    approved = runner.invoke(app, ["approve", "1", "--approver", str(APPROVER_ID)])
    pending = runner.invoke(app, ["pending"])

    assert approved.exit_code == 0, approved.output
    assert "Registration 1 approved." in approved.output
    assert "No pending registrations." in pending.output


def test_export_rejects_unknown_format(runner: CliRunner, data_file: Path) -> None:
    result = runner.invoke(app, ["export", "1", "--format", "xlsx"])

    assert result.exit_code == 1


def test_archive_declined_at_prompt(runner: CliRunner, data_file: Path) -> None:
    result = runner.invoke(app, ["archive", "3", "--actor", "7"], input="n\n")

    assert result.exit_code == 0, result.output
    assert "Archive cancelled." in result.output
    statuses = {r["id"]: r["status"] for r in _stored(data_file)["records"]}
    assert statuses[3] == "active"
