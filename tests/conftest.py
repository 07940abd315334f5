"""Test configuration and fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from issue_label_sync.sync.retry import RetryPolicy
from issue_label_sync.sync.tracker.models import Issue, Label, Project

SETTINGS_ENV_VARS = (
    "LINEAR_API_KEY",
    "LINEAR_API_URL",
    "LOG_LEVEL",
    "LABEL_MODE",
    "LABEL_MAPPING_PATH",
    "RETRY_ATTEMPTS",
    "RETRY_DELAY_SECONDS",
    "ISSUE_PAGE_SIZE",
    "LABEL_PAGE_SIZE",
    "REQUEST_TIMEOUT_SECONDS",
)


class RecordingSleep:
    """Stand-in for time.sleep that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory with no settings variables set."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def retry(sleep: RecordingSleep) -> RetryPolicy:
    """A 3-attempt policy that never actually sleeps."""
    return RetryPolicy(attempts=3, delay_seconds=1.0, sleep=sleep)


def make_issue(
    identifier: str,
    *,
    labels: tuple[Label, ...] = (),
    project_identifier: str | None = None,
    project_name: str = "Project",
    with_project: bool = True,
) -> Issue:
    project = None
    if with_project:
        project = Project(
            id=f"proj-{project_name}",
            name=project_name,
            identifier=project_identifier,
        )
    return Issue(
        id=f"id-{identifier}",
        identifier=identifier,
        title=f"Issue {identifier}",
        labels=labels,
        project=project,
    )
