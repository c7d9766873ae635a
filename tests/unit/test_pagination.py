from __future__ import annotations

import pytest

from labdesk.errors import ValidationError
from labdesk.views.pagination import ELLIPSIS, PageWindow, page_markers, total_pages_for, window

PAGE_SIZE = 5
SHRUNK_TOTAL = 9


@pytest.mark.parametrize(
    ("total", "size", "expected"),
    [(0, 5, 1), (1, 5, 1), (5, 5, 1), (6, 5, 2), (12, 5, 3), (9, 5, 2), (7, 1, 7)],
)
def test_total_pages_is_at_least_one(total: int, size: int, expected: int) -> None:
    assert total_pages_for(total, size) == expected


def test_total_pages_rejects_non_positive_page_size() -> None:
    with pytest.raises(ValidationError):
        total_pages_for(10, 0)


def test_window_clamps_and_stays_in_bounds() -> None:
    for total in range(0, 23):
        for size in (1, 3, 5):
            for requested in range(-2, 12):
                win = window(total, size, requested)
                assert 1 <= win.clamped_page <= win.total_pages
                assert 0 <= win.start_index <= win.end_index <= total
                assert win.end_index - win.start_index <= size


def test_windows_tile_the_collection_exactly_once() -> None:
    total = 12
    pages = total_pages_for(total, PAGE_SIZE)
    covered = []
    for page in range(1, pages + 1):
        win = window(total, PAGE_SIZE, page)
        covered.extend(range(win.start_index, win.end_index))
    assert covered == list(range(total))


def test_empty_collection_yields_single_empty_page() -> None:
    win = window(0, PAGE_SIZE, 1)
    assert (win.start_index, win.end_index) == (0, 0)
    assert win.clamped_page == 1
    assert win.total_pages == 1


def test_shrinking_collection_clamps_current_page() -> None:
    page = PageWindow.at(3, PAGE_SIZE, 12)
    assert page.current_page == 3

    shrunk = page.with_total(SHRUNK_TOTAL)

    assert shrunk.total_pages == 2
    assert shrunk.current_page == 2
    win = shrunk.window()
    assert (win.start_index, win.end_index) == (5, 9)


def test_page_window_navigation_stays_in_range() -> None:
    page = PageWindow.at(1, PAGE_SIZE, 12)
    assert not page.has_previous
    assert page.previous().current_page == 1
    assert page.next().next().current_page == 3
    assert page.next().next().next().current_page == 3
    assert not page.goto(99).has_next
    assert page.goto(-4).current_page == 1


def test_page_markers_without_gaps() -> None:
    assert page_markers(1, 1) == [1]
    assert page_markers(3, 2) == [1, 2, 3]


def test_page_markers_collapse_each_gap_into_one_ellipsis() -> None:
    assert page_markers(10, 1) == [1, 2, ELLIPSIS, 10]
    assert page_markers(10, 5) == [1, ELLIPSIS, 4, 5, 6, ELLIPSIS, 10]
    assert page_markers(10, 10) == [1, ELLIPSIS, 9, 10]


def test_page_markers_single_hidden_page_is_still_collapsed() -> None:
    assert page_markers(5, 5) == [1, ELLIPSIS, 4, 5]
