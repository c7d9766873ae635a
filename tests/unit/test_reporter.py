from __future__ import annotations

from datetime import datetime

from rich.console import Console

from labdesk.domain.models import GroupState, Record, RegistrationRequest
from labdesk.reporter import format_group_date, print_browser_view, print_pending
from labdesk.workflows.browser import BrowserView, GroupView, ViewKind


def _console() -> Console:
    return Console(record=True, width=120, color_system=None)


def _view(**overrides) -> BrowserView:
    record = Record(id=5, timestamp="2024-01-02 09:00:00", owner_name="Ana [Reyes]")
    fields = dict(
        view=ViewKind.ARCHIVED,
        groups=(
            GroupView(key="2024-01-02", records=(record,), expanded=True, state=GroupState.ALL),
        ),
        current_page=1,
        total_pages=1,
        markers=(1,),
        total_groups=1,
        total_records=1,
        selected_count=1,
        loading=False,
        can_delete=True,
    )
    fields.update(overrides)
    return BrowserView(**fields)


def test_format_group_date() -> None:
    assert format_group_date("2024-01-02") == "Tuesday, January 2, 2024"
    assert format_group_date("not-a-date") == "Invalid Date"


def test_print_browser_view_renders_expanded_group() -> None:
    console = _console()

    print_browser_view(_view(), selected=[5], console=console)

    text = console.export_text()
    assert "Tuesday, January 2, 2024" in text
    assert "Ana [Reyes]" in text
    assert "1 selected" in text


def test_print_browser_view_empty_shows_error() -> None:
    console = _console()

    print_browser_view(_view(groups=(), last_error="[boom] store offline"), console=console)

    text = console.export_text()
    assert "[boom] store offline" in text
    assert "No archived records." in text


def test_print_pending() -> None:
    console = _console()
    request = RegistrationRequest(
        id=1, submitted_at=datetime(2024, 3, 1, 9, 30), full_name="Ben Cruz"
    )

    print_pending([request], console=console)
    print_pending([], console=console)

    text = console.export_text()
    assert "Ben Cruz" in text
    assert "2024-03-01 09:30" in text
    assert "No pending registrations." in text
