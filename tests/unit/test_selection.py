from __future__ import annotations

import logging
from itertools import combinations

import pytest

from labdesk.domain.models import GroupState
from labdesk.views.selection import SelectionSet

GROUP_IDS = (10, 11, 12)


def _subsets(ids):
    for size in range(len(ids) + 1):
        yield from combinations(ids, size)


def test_group_state_matches_selected_count() -> None:
    for chosen in _subsets(GROUP_IDS):
        selection = SelectionSet(chosen)
        state = selection.group_state(GROUP_IDS)
        if len(chosen) == len(GROUP_IDS):
            assert state is GroupState.ALL
        elif not chosen:
            assert state is GroupState.NONE
        else:
            assert state is GroupState.SOME


def test_empty_group_counts_as_none() -> None:
    selection = SelectionSet([1, 2])
    assert selection.group_state([]) is GroupState.NONE
    assert selection.toggle_group([]) is GroupState.NONE
    assert selection.selected == {1, 2}


def test_toggle_group_selects_all_unless_all_were_selected() -> None:
    outside = 99
    for chosen in _subsets(GROUP_IDS):
        selection = SelectionSet((*chosen, outside))
        was_all = len(chosen) == len(GROUP_IDS)

        state = selection.toggle_group(GROUP_IDS)

        if was_all:
            assert state is GroupState.NONE
            assert selection.selected == {outside}
        else:
            assert state is GroupState.ALL
            assert selection.selected == {*GROUP_IDS, outside}


def test_toggle_record_flips_membership() -> None:
    selection = SelectionSet()
    assert selection.toggle_record(5) is True
    assert 5 in selection
    assert selection.toggle_record(5) is False
    assert selection.is_empty


def test_reconcile_keeps_only_ids_still_present(caplog: pytest.LogCaptureFixture) -> None:
    selection = SelectionSet([1, 2, 3, 4])

    with caplog.at_level(logging.DEBUG, logger="labdesk.views.selection"):
        pruned = selection.reconcile({2, 4, 8})

    assert pruned == {1, 3}
    assert selection.selected == {2, 4}
    assert "[SELECTION PRUNED]" in caplog.text


def test_reconcile_accepts_any_iterable_and_is_idempotent() -> None:
    selection = SelectionSet([1, 2])
    assert selection.reconcile(iter([2])) == {1}
    assert selection.reconcile([2]) == frozenset()
    assert list(selection) == [2]


def test_discard_and_clear() -> None:
    selection = SelectionSet([1, 2, 3])
    selection.discard([1, 7])
    assert list(selection) == [2, 3]
    selection.clear()
    assert len(selection) == 0
