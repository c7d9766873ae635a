"""
labdesk - record lifecycle and bulk workflow engine for computer-lab records.

Lab login logs and equipment reports are grouped by day, paged, selected in
bulk, and moved through their lifecycle:

- Date grouping with newest-first ordering
- Selection sets with tri-state group selection, reconciled on every load
- Bulk archive, restore, delete, forward and export against a record store
- A two-outcome approval workflow for pending student registrations

The storage, export formats and rendering belong to collaborators; this
package only defines the contracts it calls.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from labdesk.collaborators import InMemoryRecordStore, RecordStore, supports_delete
from labdesk.config import Settings, get_settings
from labdesk.errors import (
    ConflictError,
    LabdeskError,
    NotFoundError,
    PartialFailureError,
    TransportError,
    ValidationError,
)
from labdesk.utils.logging import configure_logging, get_logger
from labdesk.views import PageWindow, SelectionSet, group, page_markers, window
from labdesk.workflows import (
    ApprovalWorkflow,
    LifecycleTransitionController,
    RecordBrowser,
    ViewKind,
)

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Collaborators
    "InMemoryRecordStore",
    "RecordStore",
    "supports_delete",
    # Errors
    "ConflictError",
    "LabdeskError",
    "NotFoundError",
    "PartialFailureError",
    "TransportError",
    "ValidationError",
    # Views
    "PageWindow",
    "SelectionSet",
    "group",
    "page_markers",
    "window",
    # Workflows
    "ApprovalWorkflow",
    "LifecycleTransitionController",
    "RecordBrowser",
    "ViewKind",
    # Logging
    "configure_logging",
    "get_logger",
]
