"""Apply planned label sets to the tracker, one issue at a time."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from issue_label_sync.sync.planner import PlanEntry
from issue_label_sync.sync.retry import RetryPolicy
from issue_label_sync.sync.tracker.models import IssueUpdateResult

logger = logging.getLogger(__name__)


class IssueUpdater(Protocol):
    def update_issue_labels(self, issue_id: str, label_ids: list[str]) -> IssueUpdateResult: ...


@dataclass(slots=True)
class ApplyReport:
    """Issue identifiers grouped by outcome."""

    updated: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped_dry_run: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def _label_names(ids: Iterable[str], names_by_id: Mapping[str, str]) -> list[str]:
    return [names_by_id.get(i, i) for i in ids]


def apply_plan(
    entries: Iterable[PlanEntry],
    updater: IssueUpdater,
    *,
    retry: RetryPolicy,
    dry_run: bool = False,
    label_names_by_id: Mapping[str, str] | None = None,
) -> ApplyReport:
    """Submit each planned label set.

    Transport failures are retried by `retry`. A response with
    `success: false` is a server decision and is not retried. Either way the
    failure is logged and the next issue proceeds.
    """

    names_by_id = label_names_by_id or {}
    report = ApplyReport()

    for entry in entries:
        issue = entry.issue
        label_ids = list(entry.target_label_ids)

        if dry_run:
            logger.info(
                "Dry run: would update issue labels",
                extra={
                    "issue": issue.identifier,
                    "labels": _label_names(label_ids, names_by_id),
                },
            )
            report.skipped_dry_run.append(issue.identifier)
            continue

        try:
            result = retry.run(
                lambda: updater.update_issue_labels(issue.id, label_ids),
                description=f"update {issue.identifier}",
            )
        except Exception as e:
            logger.error(
                "Failed to update issue labels",
                extra={"issue": issue.identifier, "error": str(e)},
            )
            report.failed.append(issue.identifier)
            continue

        if not result.success:
            logger.error(
                "Tracker rejected label update",
                extra={"issue": issue.identifier, "label_ids": label_ids},
            )
            report.failed.append(issue.identifier)
            continue

        if result.issue is not None:
            applied = [label.name for label in result.issue.labels]
        else:
            applied = _label_names(label_ids, names_by_id)
        logger.info(
            "Issue labels updated",
            extra={"issue": issue.identifier, "title": issue.title, "labels": applied},
        )
        report.updated.append(issue.identifier)

    return report
