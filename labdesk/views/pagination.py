"""
Paginator: pure windowing over an ordered key sequence.

The archive views page over group keys (dates), not over individual records,
so `total_items` is normally the number of groups.
"""

from __future__ import annotations

import math
from typing import List, Literal, Union

from pydantic import BaseModel, Field

from labdesk.domain.models import Window
from labdesk.errors import ValidationError

EllipsisMarker = Literal["..."]
PageMarker = Union[int, EllipsisMarker]
ELLIPSIS: EllipsisMarker = "..."


def total_pages_for(total_items: int, page_size: int) -> int:
    if page_size < 1:
        raise ValidationError(f"page_size must be at least 1, got {page_size}")
    return max(1, math.ceil(max(total_items, 0) / page_size))


def clamp_page(current_page: int, total_pages: int) -> int:
    return min(max(current_page, 1), total_pages)


def window(total_items: int, page_size: int, current_page: int) -> Window:
    """
    Compute the slice of items shown on `current_page`.

    The page is clamped into ``[1, total_pages]`` so a shrinking dataset never
    leaves the view pointing past the last page.
    """
    total_pages = total_pages_for(total_items, page_size)
    page = clamp_page(current_page, total_pages)
    total = max(total_items, 0)
    start = min((page - 1) * page_size, total)
    end = min(start + page_size, total)
    return Window(start_index=start, end_index=end, clamped_page=page, total_pages=total_pages)


def page_markers(total_pages: int, current_page: int) -> List[PageMarker]:
    """
    Page numbers to render, with gaps collapsed.

    Page ``p`` is shown when it is the first page, the last page, or within one of
    the current page. Each run of hidden pages, whatever its length, becomes a
    single ``"..."`` marker.
    """
    total_pages = max(total_pages, 1)
    current = clamp_page(current_page, total_pages)
    markers: List[PageMarker] = []
    for page in range(1, total_pages + 1):
        if page == 1 or page == total_pages or abs(page - current) <= 1:
            markers.append(page)
        elif markers and markers[-1] != ELLIPSIS:
            markers.append(ELLIPSIS)
    return markers


class PageWindow(BaseModel):
    """
    Current page position over a keyed collection.

    Always satisfies ``1 <= current_page <= total_pages``; every constructor
    path goes through `at`, which clamps.
    """

    current_page: int = Field(1, ge=1)
    page_size: int = Field(5, ge=1)
    total_items: int = Field(0, ge=0)

    model_config = {"frozen": True}

    @classmethod
    def at(cls, current_page: int, page_size: int, total_items: int) -> "PageWindow":
        clamped = window(total_items, page_size, current_page).clamped_page
        return cls(current_page=clamped, page_size=page_size, total_items=max(total_items, 0))

    @property
    def total_pages(self) -> int:
        return total_pages_for(self.total_items, self.page_size)

    def window(self) -> Window:
        return window(self.total_items, self.page_size, self.current_page)

    def markers(self) -> List[PageMarker]:
        return page_markers(self.total_pages, self.current_page)

    def goto(self, page: int) -> "PageWindow":
        return PageWindow.at(page, self.page_size, self.total_items)

    def next(self) -> "PageWindow":
        return self.goto(self.current_page + 1)

    def previous(self) -> "PageWindow":
        return self.goto(self.current_page - 1)

    def with_total(self, total_items: int) -> "PageWindow":
        """Re-clamp after the underlying collection grew or shrank."""
        return PageWindow.at(self.current_page, self.page_size, total_items)

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages


__all__ = [
    "ELLIPSIS",
    "PageMarker",
    "PageWindow",
    "clamp_page",
    "page_markers",
    "total_pages_for",
    "window",
]
