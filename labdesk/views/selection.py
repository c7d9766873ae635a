"""
Selection set tracking for bulk actions.

The selection is an index into the most recently loaded dataset: it holds
stable record ids only and must be reconciled against every fresh load so that
ids of vanished records never leak onto unrelated rows.
"""

from __future__ import annotations

from typing import AbstractSet, FrozenSet, Iterable, Iterator, Set

from labdesk.domain.models import GroupState, RecordId
from labdesk.utils.logging import get_logger

log = get_logger(__name__)


class SelectionSet:
    """
    Mutable set of selected record ids with group-level queries.
    """

    def __init__(self, ids: Iterable[RecordId] = ()) -> None:
        self._ids: Set[RecordId] = set(ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._ids

    def __iter__(self) -> Iterator[RecordId]:
        return iter(sorted(self._ids))

    def __repr__(self) -> str:
        return f"SelectionSet({sorted(self._ids)!r})"

    @property
    def selected(self) -> FrozenSet[RecordId]:
        """Immutable snapshot of the current selection."""
        return frozenset(self._ids)

    @property
    def is_empty(self) -> bool:
        return not self._ids

    def toggle_record(self, record_id: RecordId) -> bool:
        """Flip one id; returns True if it is selected afterwards."""
        if record_id in self._ids:
            self._ids.remove(record_id)
            return False
        self._ids.add(record_id)
        return True

    def toggle_group(self, ids: Iterable[RecordId]) -> GroupState:
        """
        Select-all-or-none over a group.

        If every id is already selected they are all removed; otherwise all of
        them are added, including those already selected. Returns the group's
        state afterwards.
        """
        group_ids = list(ids)
        if not group_ids:
            return GroupState.NONE
        if self.group_state(group_ids) is GroupState.ALL:
            self._ids.difference_update(group_ids)
            return GroupState.NONE
        self._ids.update(group_ids)
        return GroupState.ALL

    def group_state(self, ids: Iterable[RecordId]) -> GroupState:
        """All, some or none of `ids` selected; an empty group counts as none."""
        group_ids = list(ids)
        hits = sum(1 for record_id in group_ids if record_id in self._ids)
        if group_ids and hits == len(group_ids):
            return GroupState.ALL
        if hits == 0:
            return GroupState.NONE
        return GroupState.SOME

    def discard(self, ids: Iterable[RecordId]) -> None:
        self._ids.difference_update(ids)

    def clear(self) -> None:
        self._ids.clear()

    def reconcile(self, valid_ids: AbstractSet[RecordId] | Iterable[RecordId]) -> FrozenSet[RecordId]:
        """
        Drop every selected id that is not in `valid_ids`.

        Returns the pruned ids.
        """
        valid = valid_ids if isinstance(valid_ids, AbstractSet) else set(valid_ids)
        stale = frozenset(record_id for record_id in self._ids if record_id not in valid)
        if stale:
            self._ids.difference_update(stale)
            log.debug(
                f"[SELECTION PRUNED] {len(stale)} stale ids",
                extra={"pruned": sorted(stale), "remaining": len(self._ids)},
            )
        return stale


__all__ = ["SelectionSet"]
