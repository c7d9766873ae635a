"""
Record browser: the explicit controller behind one grouped, paginated view.

A `RecordBrowser` owns everything the presentation layer needs for a view of
active or archived records:

- the last accepted dataset and its date groups
- the page window over group keys
- the selection set for bulk actions
- the loading flag, the last accepted fetch sequence and the last error

Presentation code sends intents (toggle a record or group, expand a group,
change page, invoke a transition) and renders `view_model()`.

Usage:
    browser = RecordBrowser(store, view="archived")
    await browser.load()
    browser.toggle_group("2024-01-02")
    await browser.restore_selected()
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional, Sequence, Tuple

from pydantic import BaseModel

from labdesk.collaborators.abstract import RecordStore
from labdesk.config import get_settings
from labdesk.domain.models import (
    BulkOutcome,
    ExportArtifact,
    Group,
    GroupState,
    Record,
    RecordId,
)
from labdesk.errors import LabdeskError, PartialFailureError, TransportError, ValidationError
from labdesk.utils.logging import get_logger
from labdesk.views.grouping import filter_by_date_range, find_group, group, toggle_expanded
from labdesk.views.pagination import PageMarker, PageWindow
from labdesk.views.selection import SelectionSet
from labdesk.workflows.lifecycle import LifecycleTransitionController
from labdesk.workflows.tracking import RequestTracker

log = get_logger(__name__)

ConfirmCallback = Callable[[int], bool]


class ViewKind(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class TransitionKind(str, Enum):
    ARCHIVE = "archive"
    RESTORE = "restore"
    DELETE = "delete"
    FORWARD = "forward"
    EXPORT = "export"


class GroupView(BaseModel):
    key: str
    records: Tuple[Record, ...]
    expanded: bool
    state: GroupState

    model_config = {"frozen": True}

    @property
    def size(self) -> int:
        return len(self.records)


class BrowserView(BaseModel):
    """Snapshot of everything a renderer needs for one page."""

    view: ViewKind
    groups: Tuple[GroupView, ...]
    current_page: int
    total_pages: int
    markers: Tuple[PageMarker, ...]
    total_groups: int
    total_records: int
    selected_count: int
    loading: bool
    can_delete: bool
    last_error: Optional[str] = None

    model_config = {"frozen": True}


class RecordBrowser:
    def __init__(
        self,
        store: RecordStore,
        view: ViewKind | str = ViewKind.ARCHIVED,
        page_size: Optional[int] = None,
    ) -> None:
        self.store = store
        self.view = ViewKind(view)
        self.transitions = LifecycleTransitionController(store)
        self.selection = SelectionSet()
        self.last_error: Optional[str] = None
        self._records: Tuple[Record, ...] = ()
        self._visible: Tuple[Record, ...] = ()
        self._groups: Tuple[Group, ...] = ()
        self._date_range: Tuple[Optional[str], Optional[str]] = (None, None)
        self._page = PageWindow.at(1, page_size or get_settings().page_size, 0)
        self._tracker = RequestTracker(self.view.value)
        self._busy = RequestTracker(f"{self.view.value}-transitions")

    # -- state -----------------------------------------------------------------

    @property
    def records(self) -> Tuple[Record, ...]:
        """Every record from the last accepted fetch, before date filtering."""
        return self._records

    @property
    def groups(self) -> Tuple[Group, ...]:
        return self._groups

    @property
    def page(self) -> PageWindow:
        return self._page

    @property
    def loading(self) -> bool:
        """True while a fetch or a transition is waiting on the store."""
        return self._tracker.loading or self._busy.loading

    @property
    def tracker(self) -> RequestTracker:
        return self._tracker

    @property
    def date_range(self) -> Tuple[Optional[str], Optional[str]]:
        return self._date_range

    def visible_groups(self) -> Tuple[Group, ...]:
        win = self._page.window()
        return self._groups[win.start_index : win.end_index]

    def group_state(self, key: str) -> GroupState:
        found = find_group(self._groups, key)
        return self.selection.group_state(found.ids) if found else GroupState.NONE

    def view_model(self) -> BrowserView:
        groups = tuple(
            GroupView(
                key=g.key,
                records=g.records,
                expanded=g.expanded,
                state=self.selection.group_state(g.ids),
            )
            for g in self.visible_groups()
        )
        return BrowserView(
            view=self.view,
            groups=groups,
            current_page=self._page.current_page,
            total_pages=self._page.total_pages,
            markers=tuple(self._page.markers()),
            total_groups=len(self._groups),
            total_records=len(self._visible),
            selected_count=len(self.selection),
            loading=self.loading,
            can_delete=self.transitions.can_delete,
            last_error=self.last_error,
        )

    # -- loading ---------------------------------------------------------------

    async def _fetch(self) -> Sequence[Record]:
        if self.view is ViewKind.ACTIVE:
            return await self.store.fetch_active()
        return await self.store.fetch_archived()

    async def load(self) -> bool:
        """
        Fetch the dataset and rebuild groups, page window and selection.

        Returns False when the response was superseded by a newer fetch and
        therefore discarded.
        """
        async with self._tracker.track() as ticket:
            try:
                records = await self._fetch()
            except LabdeskError as exc:
                self.last_error = str(exc)
                raise
            except Exception as exc:
                log.exception(f"[FETCH FAILED] {self.view.value}")
                self.last_error = f"Failed to fetch {self.view.value} records: {exc}"
                raise TransportError(self.last_error) from exc

        if not ticket.accept():
            return False
        self._records = tuple(records)
        self.last_error = None
        self._rebuild()
        log.debug(
            f"[FETCH] {self.view.value}: {len(self._records)} records",
            extra={"sequence": ticket.sequence, "groups": len(self._groups)},
        )
        return True

    def _rebuild(self) -> None:
        start, end = self._date_range
        self._visible = tuple(filter_by_date_range(self._records, start, end))
        self._groups = group(self._visible)
        self._page = self._page.with_total(len(self._groups))
        self.selection.reconcile({record.id for record in self._visible})

    def set_date_range(self, start: Optional[str] = None, end: Optional[str] = None) -> None:
        if start and end and start > end:
            raise ValidationError(f"date range start {start} is after end {end}")
        self._date_range = (start or None, end or None)
        self._page = self._page.goto(1)
        self._rebuild()

    # -- intents ---------------------------------------------------------------

    def toggle_record(self, record_id: RecordId) -> bool:
        if record_id not in {record.id for record in self._visible}:
            raise ValidationError(f"record {record_id} is not in the current view")
        return self.selection.toggle_record(record_id)

    def toggle_group(self, key: str) -> GroupState:
        found = find_group(self._groups, key)
        if found is None:
            raise ValidationError(f"no group {key!r} in the current view")
        return self.selection.toggle_group(found.ids)

    def toggle_expanded(self, key: str) -> None:
        self._groups = toggle_expanded(self._groups, key)

    def change_page(self, page: int) -> PageWindow:
        self._page = self._page.goto(page)
        return self._page

    def next_page(self) -> PageWindow:
        self._page = self._page.next()
        return self._page

    def previous_page(self) -> PageWindow:
        self._page = self._page.previous()
        return self._page

    def clear_selection(self) -> None:
        self.selection.clear()

    # -- transitions -----------------------------------------------------------

    def _target(self, ids: Optional[Iterable[RecordId]]) -> FrozenSet[RecordId]:
        return frozenset(ids) if ids is not None else self.selection.selected

    async def _settle(self, transitioned: Iterable[RecordId]) -> bool:
        """
        Reload, then clear the transitioned ids from the selection.

        If the reload fails, dataset and selection are left exactly as they were
        and False is returned; the transition itself already happened.
        """
        try:
            await self.load()
        except LabdeskError as exc:
            log.warning(
                f"[RELOAD FAILED] {self.view.value} after transition: {exc}",
                extra={"view": self.view.value, "error": type(exc).__name__},
            )
            self.last_error = (
                f"Changes were saved but the {self.view.value} list could not be "
                f"refreshed: {exc}"
            )
            return False
        self.selection.discard(transitioned)
        return True

    async def _transition(self, call: Callable[[], Any]) -> Any:
        async with self._busy.track():
            try:
                outcome = await call()
            except PartialFailureError as exc:
                failed = exc.failed_ids or frozenset()
                refreshed = await self._settle(exc.requested - failed)
                self.last_error = str(exc) if refreshed else f"{exc}; {self.last_error}"
                raise
            except LabdeskError as exc:
                self.last_error = str(exc)
                raise
            await self._settle(outcome.requested)
        return outcome

    def _declined(
        self, operation: str, target: FrozenSet[RecordId], confirm: Optional[ConfirmCallback]
    ) -> bool:
        if target and confirm is not None and not confirm(len(target)):
            log.info(f"[{operation.upper()} DECLINED] {len(target)} records")
            return True
        return False

    async def archive_selected(
        self,
        actor_id: int,
        ids: Optional[Iterable[RecordId]] = None,
        confirm: Optional[ConfirmCallback] = None,
    ) -> Optional[BulkOutcome]:
        """
        Archive records, asking `confirm(count)` first when it is given.

        Returns None when the user declines.
        """
        target = self._target(ids)
        if self._declined("archive", target, confirm):
            return None
        return await self._transition(lambda: self.transitions.archive(target, actor_id))

    async def restore_selected(self, ids: Optional[Iterable[RecordId]] = None) -> BulkOutcome:
        target = self._target(ids)
        return await self._transition(lambda: self.transitions.restore(target))

    async def delete_selected(
        self, confirm: ConfirmCallback, ids: Optional[Iterable[RecordId]] = None
    ) -> Optional[BulkOutcome]:
        """
        Permanently delete records once `confirm(count)` returns True.

        Returns None when the user declines; nothing is sent to the store.
        """
        target = self._target(ids)
        if self._declined("delete", target, confirm):
            return None
        return await self._transition(lambda: self.transitions.delete(target))

    async def forward_selected(
        self, approver_id: int, notes: str = "", ids: Optional[Iterable[RecordId]] = None
    ) -> BulkOutcome:
        target = self._target(ids)
        return await self._transition(
            lambda: self.transitions.forward(target, approver_id, notes)
        )

    async def export_selected(
        self, format: str, ids: Optional[Iterable[RecordId]] = None
    ) -> ExportArtifact:
        """Export leaves records and selection as they are."""
        target = self._target(ids)
        async with self._busy.track():
            try:
                return await self.transitions.export(target, format)
            except LabdeskError as exc:
                self.last_error = str(exc)
                raise

    async def invoke(
        self,
        kind: TransitionKind | str,
        ids: Optional[Iterable[RecordId]] = None,
        **params: Any,
    ) -> Any:
        """Dispatch a transition intent by name."""
        kind = TransitionKind(kind)
        if kind is TransitionKind.ARCHIVE:
            return await self.archive_selected(
                _param(kind, params, "actor_id"), ids=ids, confirm=params.get("confirm")
            )
        if kind is TransitionKind.RESTORE:
            return await self.restore_selected(ids=ids)
        if kind is TransitionKind.DELETE:
            return await self.delete_selected(_param(kind, params, "confirm"), ids=ids)
        if kind is TransitionKind.FORWARD:
            return await self.forward_selected(
                _param(kind, params, "approver_id"), params.get("notes", ""), ids=ids
            )
        return await self.export_selected(_param(kind, params, "format"), ids=ids)


def _param(kind: TransitionKind, params: Dict[str, Any], name: str) -> Any:
    try:
        return params[name]
    except KeyError:
        raise ValidationError(f"{kind.value}: missing parameter {name!r}") from None


__all__ = [
    "BrowserView",
    "ConfirmCallback",
    "GroupView",
    "RecordBrowser",
    "TransitionKind",
    "ViewKind",
]
