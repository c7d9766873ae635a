"""
Domain package for labdesk.

Exports the core domain models used across views, workflows and collaborators.
Keep this package focused on data definitions and validation concerns.
"""

from labdesk.domain.models import (
    BulkOutcome,
    DecisionAction,
    ExportArtifact,
    ExportFormat,
    Group,
    GroupState,
    Record,
    RecordId,
    RecordKind,
    RecordStatus,
    RegistrationRequest,
    RequestStatus,
    Window,
    group_key_for,
)

__all__ = [
    "BulkOutcome",
    "DecisionAction",
    "ExportArtifact",
    "ExportFormat",
    "Group",
    "GroupState",
    "Record",
    "RecordId",
    "RecordKind",
    "RecordStatus",
    "RegistrationRequest",
    "RequestStatus",
    "Window",
    "group_key_for",
]
