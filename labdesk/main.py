from __future__ import annotations

import asyncio
import sys
from typing import Any, Coroutine, List, NoReturn, Optional, TypeVar

import typer

from labdesk.collaborators.memory import JsonFileRecordStore
from labdesk.config import Settings, get_settings
from labdesk.errors import LabdeskError
from labdesk.reporter import print_browser_view, print_pending
from labdesk.utils.logging import configure_logging
from labdesk.workflows.approval import ApprovalWorkflow
from labdesk.workflows.browser import RecordBrowser, ViewKind

T = TypeVar("T")

app = typer.Typer(help="Lab records lifecycle and bulk workflow CLI.")


def _setup() -> Settings:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    return settings


def _store(settings: Settings) -> JsonFileRecordStore:
    return JsonFileRecordStore(settings.data_file, export_dir=settings.export_dir)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def _fail(exc: LabdeskError) -> NoReturn:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


async def _loaded_browser(settings: Settings, view: ViewKind) -> RecordBrowser:
    browser = RecordBrowser(_store(settings), view=view, page_size=settings.page_size)
    await browser.load()
    return browser


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"env={settings.app_env} data={settings.data_file} exports={settings.export_dir} | "
        f"page_size={settings.page_size} version_check={settings.approval_version_check}"
    )


@app.command()
def show(
    view: ViewKind = typer.Option(ViewKind.ARCHIVED, "--view", "-v", help="Which records to list."),
    page: int = typer.Option(1, "--page", "-p", help="Page of date groups to show."),
    date_from: Optional[str] = typer.Option(None, "--from", help="First date (YYYY-MM-DD)."),
    date_to: Optional[str] = typer.Option(None, "--to", help="Last date (YYYY-MM-DD)."),
    expand: List[str] = typer.Option(
        [], "--expand", "-e", help="Also expand the group for this date (repeatable)."
    ),
) -> None:
    """
    Show records grouped by day, newest first, one page at a time.
    """
    settings = _setup()

    async def _show() -> RecordBrowser:
        browser = await _loaded_browser(settings, view)
        browser.set_date_range(date_from, date_to)
        browser.change_page(page)
        for key in expand:
            browser.toggle_expanded(key)
        return browser

    try:
        browser = _run(_show())
    except LabdeskError as exc:
        _fail(exc)
    print_browser_view(browser.view_model(), selected=browser.selection.selected)


@app.command()
def archive(
    ids: List[int] = typer.Argument(..., help="Record ids to archive."),
    actor: int = typer.Option(..., "--actor", "-a", help="User id performing the archive."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """
    Move active records to the archive.
    """
    settings = _setup()

    def _confirm(count: int) -> bool:
        return yes or typer.confirm(f"Archive {count} record(s)?")

    async def _archive():
        browser = await _loaded_browser(settings, ViewKind.ACTIVE)
        return await browser.archive_selected(actor, ids=ids, confirm=_confirm)

    try:
        outcome = _run(_archive())
    except LabdeskError as exc:
        _fail(exc)
    if outcome is None:
        typer.echo("Archive cancelled.")
        return
    typer.echo(f"Archived {outcome.succeeded} record(s).")


@app.command()
def restore(ids: List[int] = typer.Argument(..., help="Record ids to restore.")) -> None:
    """
    Restore archived records to the active list.
    """
    settings = _setup()

    async def _restore():
        browser = await _loaded_browser(settings, ViewKind.ARCHIVED)
        return await browser.restore_selected(ids=ids)

    try:
        outcome = _run(_restore())
    except LabdeskError as exc:
        _fail(exc)
    typer.echo(f"Restored {outcome.succeeded} record(s).")


@app.command()
def delete(
    ids: List[int] = typer.Argument(..., help="Archived record ids to delete."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """
    Permanently delete archived records.
    """
    settings = _setup()

    def _confirm(count: int) -> bool:
        return yes or typer.confirm(f"Permanently delete {count} record(s)?")

    async def _delete():
        browser = await _loaded_browser(settings, ViewKind.ARCHIVED)
        return await browser.delete_selected(_confirm, ids=ids)

    try:
        outcome = _run(_delete())
    except LabdeskError as exc:
        _fail(exc)
    if outcome is None:
        typer.echo("Deletion cancelled.")
        return
    typer.echo(f"Deleted {outcome.succeeded} record(s).")


@app.command()
def export(
    ids: List[int] = typer.Argument(..., help="Record ids to export."),
    format: str = typer.Option("csv", "--format", "-f", help="Export format: csv or pdf."),
    view: ViewKind = typer.Option(ViewKind.ARCHIVED, "--view", "-v", help="View to export from."),
) -> None:
    """
    Export records and print the artifact reference.
    """
    settings = _setup()

    async def _export():
        browser = await _loaded_browser(settings, view)
        return await browser.export_selected(format, ids=ids)

    try:
        artifact = _run(_export())
    except LabdeskError as exc:
        _fail(exc)
    typer.echo(f"Exported {artifact.count} record(s) -> {artifact.reference}")


@app.command()
def forward(
    ids: List[int] = typer.Argument(..., help="Equipment report ids to forward."),
    approver: int = typer.Option(..., "--approver", help="Working student user id."),
    notes: str = typer.Option("", "--notes", "-n", help="Notes for the administrator."),
) -> None:
    """
    Forward equipment reports to an administrator.
    """
    settings = _setup()

    async def _forward():
        browser = await _loaded_browser(settings, ViewKind.ACTIVE)
        return await browser.forward_selected(approver, notes, ids=ids)

    try:
        outcome = _run(_forward())
    except LabdeskError as exc:
        _fail(exc)
    typer.echo(f"Forwarded {outcome.succeeded} report(s).")


@app.command()
def pending() -> None:
    """
    List registration requests awaiting a decision.
    """
    settings = _setup()
    workflow = ApprovalWorkflow(_store(settings))
    try:
        requests = _run(workflow.load_pending())
    except LabdeskError as exc:
        _fail(exc)
    print_pending(requests)


def _decide(settings: Settings, request_id: int, approver: int, reason: Optional[str]) -> None:
    workflow = ApprovalWorkflow(_store(settings))

    async def _apply() -> None:
        await workflow.load_pending()
        if reason is None:
            await workflow.approve(request_id, approver)
        else:
            await workflow.reject(request_id, approver, reason)

    try:
        _run(_apply())
    except LabdeskError as exc:
        _fail(exc)


@app.command()
def approve(
    request_id: int = typer.Argument(..., help="Registration request id."),
    approver: int = typer.Option(..., "--approver", help="Working student user id."),
) -> None:
    """
    Approve a pending registration.
    """
    _decide(_setup(), request_id, approver, None)
    typer.echo(f"Registration {request_id} approved.")


@app.command()
def reject(
    request_id: int = typer.Argument(..., help="Registration request id."),
    approver: int = typer.Option(..., "--approver", help="Working student user id."),
    reason: str = typer.Option(..., "--reason", "-r", help="Reason shown to the student."),
) -> None:
    """
    Reject a pending registration with a reason.
    """
    _decide(_setup(), request_id, approver, reason)
    typer.echo(f"Registration {request_id} rejected.")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
