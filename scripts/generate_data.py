"""
Sample data generator for labdesk.

Writes a deterministic pseudo-random dataset of lab login logs, equipment
reports and pending registrations to the JSON file the CLI reads.
"""

from __future__ import annotations

import random
import sys
from datetime import UTC, date, datetime, time, timedelta
from pathlib import Path

import typer

from labdesk.collaborators.memory import StoreSnapshot, save_snapshot
from labdesk.config import get_settings
from labdesk.domain.models import (
    Record,
    RecordKind,
    RecordStatus,
    RegistrationRequest,
)

app = typer.Typer(help="Generate a sample labdesk dataset (JSON).")

_FIRST_NAMES = ["Ana", "Ben", "Carla", "Dario", "Elena", "Felix", "Gina", "Hugo", "Iris", "Jon"]
_LAST_NAMES = ["Reyes", "Santos", "Cruz", "Bautista", "Garcia", "Mendoza", "Torres", "Flores"]
_EQUIPMENT = ["computer", "mouse", "keyboard", "monitor"]


def _name(rng: random.Random) -> str:
    return f"{rng.choice(_FIRST_NAMES)} {rng.choice(_LAST_NAMES)}"


def _generate_records(
    rng: random.Random, rows: int, days: int, archived_ratio: float, today: date
) -> list[Record]:
    records: list[Record] = []
    for record_id in range(1, rows + 1):
        day = today - timedelta(days=rng.randrange(days))
        moment = datetime.combine(day, time(hour=rng.randint(7, 18), minute=rng.randint(0, 59)))
        kind = rng.choice([RecordKind.LOGIN_LOG, RecordKind.EQUIPMENT_REPORT])
        details: dict[str, str] = {}
        if kind is RecordKind.EQUIPMENT_REPORT:
            for item in _EQUIPMENT:
                details[f"{item}_status"] = rng.choice(["good", "good", "good", "issue"])
        records.append(
            Record(
                id=record_id,
                timestamp=moment.strftime("%Y-%m-%d %H:%M:%S"),
                status=RecordStatus.ARCHIVED
                if rng.random() < archived_ratio
                else RecordStatus.ACTIVE,
                kind=kind,
                owner_name=_name(rng),
                pc_number=f"PC-{rng.randint(1, 40):02d}",
                details=details,
            )
        )
    return records


def _generate_registrations(rng: random.Random, count: int) -> list[RegistrationRequest]:
    now = datetime.now(UTC)
    requests: list[RegistrationRequest] = []
    for request_id in range(1, count + 1):
        full_name = _name(rng)
        requests.append(
            RegistrationRequest(
                id=request_id,
                submitted_at=now - timedelta(hours=rng.randint(1, 72)),
                student_number=f"2024-{rng.randint(10000, 99999)}",
                full_name=full_name,
                email=f"{full_name.lower().replace(' ', '.')}@example.edu",
            )
        )
    return requests


def build_snapshot(
    rows: int, days: int, registrations: int, archived_ratio: float, seed: int
) -> StoreSnapshot:
    rng = random.Random(seed)
    today = datetime.now(UTC).date()
    return StoreSnapshot(
        records=_generate_records(rng, rows, days, archived_ratio, today),
        registrations=_generate_registrations(rng, registrations),
    )


@app.command()
def main(
    rows: int = typer.Option(60, "--rows", "-r", help="Number of records to generate."),
    days: int = typer.Option(14, "--days", "-d", help="Spread records over this many days."),
    registrations: int = typer.Option(
        5, "--registrations", help="Number of pending registrations."
    ),
    archived_ratio: float = typer.Option(
        0.5, "--archived-ratio", help="Share of records that start archived."
    ),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="JSON output path (defaults to DATA_FILE)."
    ),
) -> None:
    """
    Generate a sample dataset and write it where the CLI expects it.
    """
    path = output or get_settings().data_file
    snapshot = build_snapshot(rows, days, registrations, archived_ratio, seed)
    save_snapshot(snapshot, path)
    typer.echo(
        f"Wrote {len(snapshot.records)} records and "
        f"{len(snapshot.registrations)} registrations -> {path} (seed={seed})"
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
