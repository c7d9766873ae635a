"""
View-model package for labdesk.

Pure building blocks the presentation layer renders: date grouping, selection
tracking and pagination. Nothing here talks to a collaborator.
"""

from labdesk.views.grouping import filter_by_date_range, find_group, group, toggle_expanded
from labdesk.views.pagination import ELLIPSIS, PageWindow, page_markers, window
from labdesk.views.selection import SelectionSet

__all__ = [
    "ELLIPSIS",
    "PageWindow",
    "SelectionSet",
    "filter_by_date_range",
    "find_group",
    "group",
    "page_markers",
    "toggle_expanded",
    "window",
]
