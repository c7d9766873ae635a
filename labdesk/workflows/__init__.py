"""
Workflows package for labdesk.

Everything that talks to a record store: bulk lifecycle transitions, the
registration approval workflow, and the record browser that ties grouping,
pagination and selection to a store.
"""

from labdesk.workflows.approval import ApprovalWorkflow
from labdesk.workflows.browser import (
    BrowserView,
    GroupView,
    RecordBrowser,
    TransitionKind,
    ViewKind,
)
from labdesk.workflows.lifecycle import LifecycleTransitionController
from labdesk.workflows.tracking import RequestTracker, Ticket

__all__ = [
    "ApprovalWorkflow",
    "BrowserView",
    "GroupView",
    "LifecycleTransitionController",
    "RecordBrowser",
    "RequestTracker",
    "Ticket",
    "TransitionKind",
    "ViewKind",
]
