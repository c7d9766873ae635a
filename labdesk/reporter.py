from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from labdesk.domain.models import GroupState, RegistrationRequest
from labdesk.views.pagination import ELLIPSIS
from labdesk.workflows.browser import BrowserView, GroupView

_STATE_MARK = {
    GroupState.ALL: "●",
    GroupState.SOME: "◐",
    GroupState.NONE: "○",
}


def format_group_date(key: str) -> str:
    """
    Long-form date for a group header, e.g. "Tuesday, January 2, 2024".

    Keys that are not ISO dates render as "Invalid Date" rather than failing.
    """
    try:
        day = date.fromisoformat(key)
    except ValueError:
        return "Invalid Date"
    return f"{day.strftime('%A, %B')} {day.day}, {day.year}"


def format_page_bar(view: BrowserView) -> str:
    parts = []
    for marker in view.markers:
        if marker == ELLIPSIS:
            parts.append("…")
        elif marker == view.current_page:
            parts.append(f"[bold reverse] {marker} [/bold reverse]")
        else:
            parts.append(str(marker))
    return "  ".join(parts)


def _group_table(group: GroupView, selected: Iterable[int]) -> Table:
    chosen = set(selected)
    plural = "record" if group.size == 1 else "records"
    table = Table(
        title=f"{_STATE_MARK[group.state]} {format_group_date(group.key)} "
        f"[dim]({group.size} {plural})[/dim]",
        title_justify="left",
        box=box.ROUNDED,
    )
    table.add_column("", width=3)
    table.add_column("ID", justify="right", style="magenta")
    table.add_column("Time", style="green")
    table.add_column("Name", style="cyan")
    table.add_column("PC", justify="right")
    table.add_column("Kind", style="blue")
    table.add_column("Fwd", justify="center")

    for record in group.records:
        table.add_row(
            "●" if record.id in chosen else "○",
            str(record.id),
            record.timestamp,
            escape(record.owner_name) or "N/A",
            record.pc_number or "-",
            record.kind.value,
            "yes" if record.forwarded else "",
        )
    return table


def print_browser_view(
    view: BrowserView,
    selected: Iterable[int] = (),
    console: Optional[Console] = None,
) -> None:
    """
    Render one page of grouped records: collapsed groups show only their header,
    expanded groups show a row per record.
    """
    console = console or Console()
    chosen = list(selected)

    if view.last_error:
        console.print(f"[red]{escape(view.last_error)}[/red]")

    if not view.groups:
        console.print(f"[yellow]No {view.view.value} records.[/yellow]")
        return

    console.print(
        f"[bold]{view.view.value.title()} records[/bold] "
        f"[dim]{view.total_records} records in {view.total_groups} days │ "
        f"{view.selected_count} selected[/dim]"
    )
    for group in view.groups:
        if group.expanded:
            console.print(_group_table(group, chosen))
        else:
            plural = "record" if group.size == 1 else "records"
            console.print(
                f"{_STATE_MARK[group.state]} ▸ {format_group_date(group.key)} "
                f"[dim]({group.size} {plural})[/dim]"
            )

    if view.total_pages > 1:
        console.print(f"Page {view.current_page}/{view.total_pages}:  {format_page_bar(view)}")


def print_pending(
    requests: Iterable[RegistrationRequest], console: Optional[Console] = None
) -> None:
    console = console or Console()
    pending = list(requests)
    if not pending:
        console.print("[yellow]No pending registrations.[/yellow]")
        return

    table = Table(title="Pending Student Registrations", box=box.ROUNDED)
    table.add_column("ID", justify="right", style="magenta")
    table.add_column("Student No.", style="cyan")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Submitted", style="green")
    table.add_column("Ver", justify="right", style="dim")
    for request in pending:
        table.add_row(
            str(request.id),
            request.student_number,
            request.full_name,
            request.email,
            request.submitted_at.strftime("%Y-%m-%d %H:%M"),
            str(request.version),
        )
    console.print(table)


__all__ = ["format_group_date", "format_page_bar", "print_browser_view", "print_pending"]
