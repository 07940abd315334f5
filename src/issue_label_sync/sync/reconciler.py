"""Run the reconciliation phases in order.

Phases are hard sequence points: each completes before the next starts and
there is no rollback. A failure while fetching issues or labels aborts the
run before any mutation is attempted, so updates never run against a partial
read of the workspace.

Two runs against the same workspace at once are not guarded against; the
last writer wins. Schedule runs so they do not overlap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from issue_label_sync.sync.applier import ApplyReport, apply_plan
from issue_label_sync.sync.labels.resolvers import LabelRequirementResolver
from issue_label_sync.sync.logging import set_phase
from issue_label_sync.sync.pagination import fetch_all
from issue_label_sync.sync.planner import (
    ReconciliationPlan,
    WorkspaceSnapshot,
    build_snapshot,
    plan_reconciliation,
)
from issue_label_sync.sync.retry import RetryPolicy
from issue_label_sync.sync.tracker.models import Issue, IssuesPage, IssueUpdateResult, Label, LabelsPage

logger = logging.getLogger(__name__)


class RunPhase(str, Enum):
    START = "start"
    FETCH_ISSUES = "fetch_issues"
    FETCH_LABELS = "fetch_labels"
    LOAD_MAPPING = "load_mapping"
    PLAN = "plan"
    APPLY = "apply"
    DONE = "done"


ALLOWED_TRANSITIONS: dict[RunPhase, set[RunPhase]] = {
    RunPhase.START: {RunPhase.FETCH_ISSUES},
    RunPhase.FETCH_ISSUES: {RunPhase.FETCH_LABELS},
    RunPhase.FETCH_LABELS: {RunPhase.LOAD_MAPPING, RunPhase.PLAN},
    RunPhase.LOAD_MAPPING: {RunPhase.PLAN},
    RunPhase.PLAN: {RunPhase.APPLY},
    RunPhase.APPLY: {RunPhase.DONE},
    RunPhase.DONE: set(),
}


class IllegalTransitionError(ValueError):
    pass


def transition(*, current: RunPhase, to: RunPhase) -> RunPhase:
    if to not in ALLOWED_TRANSITIONS[current]:
        raise IllegalTransitionError(f"Illegal transition: {current.value} -> {to.value}")
    return to


class TrackerOperations(Protocol):
    def list_issues_page(self, cursor: str | None, *, first: int = ...) -> IssuesPage: ...

    def list_labels_page(self, cursor: str | None, *, first: int = ...) -> LabelsPage: ...

    def update_issue_labels(self, issue_id: str, label_ids: list[str]) -> IssueUpdateResult: ...


@dataclass(slots=True)
class RunSummary:
    issues_total: int = 0
    labels_total: int = 0
    planned: int = 0
    skipped: int = 0
    already_labeled: int = 0
    updated: int = 0
    failed: int = 0
    dry_run: bool = False
    phases: list[RunPhase] = field(default_factory=list)


class LabelReconciler:
    """Fetch, plan and apply canonical labels for a whole workspace."""

    def __init__(
        self,
        *,
        tracker: TrackerOperations,
        resolver: LabelRequirementResolver,
        retry: RetryPolicy | None = None,
        issue_page_size: int = 50,
        label_page_size: int = 100,
        dry_run: bool = False,
    ) -> None:
        self._tracker = tracker
        self._resolver = resolver
        self._retry = retry or RetryPolicy()
        self._issue_page_size = issue_page_size
        self._label_page_size = label_page_size
        self._dry_run = dry_run
        self._phase = RunPhase.START
        self._summary = RunSummary(dry_run=dry_run)

    @property
    def phase(self) -> RunPhase:
        return self._phase

    def _enter(self, phase: RunPhase) -> None:
        self._phase = transition(current=self._phase, to=phase)
        self._summary.phases.append(phase)
        set_phase(phase.value)
        logger.info("Entering phase")

    def fetch_issues(self) -> list[Issue]:
        return fetch_all(
            lambda cursor: self._tracker.list_issues_page(cursor, first=self._issue_page_size),
            retry=self._retry,
            description="issues",
        )

    def fetch_labels(self) -> list[Label]:
        return fetch_all(
            lambda cursor: self._tracker.list_labels_page(cursor, first=self._label_page_size),
            retry=self._retry,
            description="labels",
        )

    def run(self) -> RunSummary:
        """Run every phase once.

        Raises:
            Exception: Whatever the fetch phases raised after retries; the
                run stops without applying anything.
        """

        try:
            return self._run()
        finally:
            set_phase(None)

    def _run(self) -> RunSummary:
        if self._phase is not RunPhase.START:
            raise IllegalTransitionError("A reconciler instance runs only once")

        self._enter(RunPhase.FETCH_ISSUES)
        issues = self.fetch_issues()
        self._summary.issues_total = len(issues)

        self._enter(RunPhase.FETCH_LABELS)
        labels = self.fetch_labels()
        self._summary.labels_total = len(labels)

        snapshot: WorkspaceSnapshot = build_snapshot(issues, labels)

        if self._resolver.uses_mapping:
            self._enter(RunPhase.LOAD_MAPPING)
            logger.info("Label mapping ready", extra={"resolver": self._resolver.describe()})

        self._enter(RunPhase.PLAN)
        plan: ReconciliationPlan = plan_reconciliation(snapshot, self._resolver)
        self._summary.planned = len(plan.entries)
        self._summary.skipped = len(plan.skipped)
        self._summary.already_labeled = plan.already_labeled

        self._enter(RunPhase.APPLY)
        report: ApplyReport = apply_plan(
            plan.entries,
            self._tracker,
            retry=self._retry,
            dry_run=self._dry_run,
            label_names_by_id={label.id: label.name for label in snapshot.labels},
        )
        self._summary.updated = len(report.updated)
        self._summary.failed = len(report.failed)

        self._enter(RunPhase.DONE)
        logger.info(
            "Reconciliation finished",
            extra={
                "issues": self._summary.issues_total,
                "labels": self._summary.labels_total,
                "planned": self._summary.planned,
                "updated": self._summary.updated,
                "failed": self._summary.failed,
                "dry_run": self._dry_run,
            },
        )
        return self._summary
