"""
Collaborators package for labdesk.

Re-exports the store contracts and the bundled in-memory implementations so
downstream code can import from `labdesk.collaborators` directly.
"""

from labdesk.collaborators.abstract import (
    AbstractRecordStore,
    BulkResult,
    RecordStore,
    SupportsDelete,
    supports_delete,
)
from labdesk.collaborators.memory import (
    InMemoryRecordStore,
    JsonFileRecordStore,
    StoreSnapshot,
    save_snapshot,
)

__all__ = [
    # Contracts
    "AbstractRecordStore",
    "BulkResult",
    "RecordStore",
    "SupportsDelete",
    "supports_delete",
    # Implementations
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "StoreSnapshot",
    "save_snapshot",
]
