"""Issue tracker client and typed response models."""

from issue_label_sync.sync.tracker.client import TrackerClient
from issue_label_sync.sync.tracker.errors import MissingDataError, TrackerApiError
from issue_label_sync.sync.tracker.models import (
    Issue,
    IssuesPage,
    IssueUpdateResult,
    Label,
    LabelsPage,
    Project,
)

__all__ = [
    "Issue",
    "IssueUpdateResult",
    "IssuesPage",
    "Label",
    "LabelsPage",
    "MissingDataError",
    "Project",
    "TrackerApiError",
    "TrackerClient",
]
