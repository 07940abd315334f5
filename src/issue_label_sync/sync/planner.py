"""Decide which issues need canonical labels and what their label set becomes.

Planning is additive only: existing labels are always kept, and labels that
do not exist in the workspace are never created.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from issue_label_sync.sync.labels.resolvers import LabelRequirementResolver
from issue_label_sync.sync.labels.rules import LabelInferenceError, LabelRequirement
from issue_label_sync.sync.tracker.models import Issue, Label

logger = logging.getLogger(__name__)

SKIP_NO_PROJECT = "no_project"
SKIP_UNRESOLVABLE = "unresolvable_project"
SKIP_UNCHANGED = "no_applicable_labels"


@dataclass(frozen=True, slots=True)
class WorkspaceSnapshot:
    """Issues and labels read once at the start of a run."""

    issues: tuple[Issue, ...]
    labels: tuple[Label, ...]
    label_ids_by_name: Mapping[str, str]


def build_snapshot(issues: Iterable[Issue], labels: Iterable[Label]) -> WorkspaceSnapshot:
    """Freeze the fetched collections and index labels by name.

    Names are unique in the workspace at any instant, but a listing can race
    a rename; if a name repeats, the first label listed wins.
    """

    label_tuple = tuple(labels)
    by_name: dict[str, str] = {}
    for label in label_tuple:
        existing = by_name.get(label.name)
        if existing is not None and existing != label.id:
            logger.warning(
                "Duplicate label name in workspace; keeping the first",
                extra={"label": label.name, "kept_id": existing, "ignored_id": label.id},
            )
            continue
        by_name[label.name] = label.id

    return WorkspaceSnapshot(
        issues=tuple(issues),
        labels=label_tuple,
        label_ids_by_name=MappingProxyType(by_name),
    )


@dataclass(frozen=True, slots=True)
class PlanEntry:
    """An issue to update and the full label-id set it should end up with."""

    issue: Issue
    requirement: LabelRequirement
    target_label_ids: tuple[str, ...]
    missing_labels: tuple[str, ...] = ()

    @property
    def added_label_ids(self) -> tuple[str, ...]:
        existing = set(self.issue.label_ids)
        return tuple(i for i in self.target_label_ids if i not in existing)


@dataclass(frozen=True, slots=True)
class SkippedIssue:
    issue: Issue
    reason: str
    detail: str = ""


@dataclass(frozen=True, slots=True)
class ReconciliationPlan:
    entries: tuple[PlanEntry, ...] = field(default_factory=tuple)
    skipped: tuple[SkippedIssue, ...] = field(default_factory=tuple)
    already_labeled: int = 0


def _target_label_ids(
    issue: Issue,
    requirement: LabelRequirement,
    label_ids_by_name: Mapping[str, str],
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    target = list(issue.label_ids)
    missing: list[str] = []
    for name in requirement:
        label_id = label_ids_by_name.get(name)
        if label_id is None:
            missing.append(name)
            continue
        if label_id not in target:
            target.append(label_id)
    return tuple(target), tuple(missing)


def plan_reconciliation(
    snapshot: WorkspaceSnapshot,
    resolver: LabelRequirementResolver,
) -> ReconciliationPlan:
    """Compute the update set for every issue in `snapshot`.

    Issues are skipped, never raised on, when they have no project, when the
    resolver cannot handle their project, or when none of their missing
    labels exist in the workspace.
    """

    entries: list[PlanEntry] = []
    skipped: list[SkippedIssue] = []
    already_labeled = 0

    for issue in snapshot.issues:
        if issue.project is None:
            logger.debug("Issue has no project; skipping", extra={"issue": issue.identifier})
            skipped.append(SkippedIssue(issue=issue, reason=SKIP_NO_PROJECT))
            continue

        try:
            requirement = resolver.resolve(issue.project)
        except LabelInferenceError as e:
            logger.info(
                "Project could not be resolved to labels; skipping",
                extra={"issue": issue.identifier, "project": issue.project.name, "error": str(e)},
            )
            skipped.append(SkippedIssue(issue=issue, reason=SKIP_UNRESOLVABLE, detail=str(e)))
            continue

        current_names = issue.label_names
        if all(name in current_names for name in requirement):
            already_labeled += 1
            continue

        target, missing = _target_label_ids(issue, requirement, snapshot.label_ids_by_name)
        for name in missing:
            logger.warning(
                "Required label does not exist in workspace; not creating it",
                extra={"issue": issue.identifier, "label": name},
            )

        # Labels are only ever added, so a size change is the change signal.
        if len(target) == len(issue.label_ids):
            skipped.append(
                SkippedIssue(issue=issue, reason=SKIP_UNCHANGED, detail=", ".join(missing))
            )
            continue

        entries.append(
            PlanEntry(
                issue=issue,
                requirement=requirement,
                target_label_ids=target,
                missing_labels=missing,
            )
        )

    logger.info(
        "Reconciliation planned",
        extra={
            "issues": len(snapshot.issues),
            "planned": len(entries),
            "skipped": len(skipped),
            "already_labeled": already_labeled,
        },
    )
    return ReconciliationPlan(
        entries=tuple(entries),
        skipped=tuple(skipped),
        already_labeled=already_labeled,
    )
