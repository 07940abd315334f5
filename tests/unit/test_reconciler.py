"""Unit tests for the reconciliation run and its phase ordering."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
import requests
from conftest import make_issue

from issue_label_sync.sync.labels.mapping import ProjectLabelMapping
from issue_label_sync.sync.labels.resolvers import MappingResolver, StaticRangeResolver
from issue_label_sync.sync.logging import current_phase
from issue_label_sync.sync.reconciler import (
    IllegalTransitionError,
    LabelReconciler,
    RunPhase,
    transition,
)
from issue_label_sync.sync.retry import RetryPolicy
from issue_label_sync.sync.tracker.client import TrackerClient
from issue_label_sync.sync.tracker.models import (
    IssuesPage,
    IssueUpdateResult,
    Label,
    LabelsPage,
)

SYSTEM_100 = Label(id="L-sys-100", name="[100-199]")
AREA_50 = Label(id="L-area-50", name="[50]")


def _tracker(issue_pages: list[IssuesPage], label_pages: list[LabelsPage]) -> Mock:
    tracker = Mock(spec=TrackerClient)
    tracker.list_issues_page.side_effect = issue_pages
    tracker.list_labels_page.side_effect = label_pages
    tracker.update_issue_labels.return_value = IssueUpdateResult(success=True)
    return tracker


def test_end_to_end_adds_missing_area_label(retry: RetryPolicy) -> None:
    issue = make_issue("ENG-1", labels=(SYSTEM_100,), project_identifier="150.2")
    tracker = _tracker(
        [IssuesPage(issues=(issue,), has_next_page=False, end_cursor=None)],
        [
            LabelsPage(labels=(SYSTEM_100,), has_next_page=True, end_cursor="c1"),
            LabelsPage(labels=(AREA_50,), has_next_page=False, end_cursor=None),
        ],
    )

    summary = LabelReconciler(tracker=tracker, resolver=StaticRangeResolver(), retry=retry).run()

    tracker.update_issue_labels.assert_called_once_with("id-ENG-1", ["L-sys-100", "L-area-50"])
    assert summary.issues_total == 1
    assert summary.labels_total == 2
    assert summary.planned == 1
    assert summary.updated == 1
    assert summary.phases == [
        RunPhase.FETCH_ISSUES,
        RunPhase.FETCH_LABELS,
        RunPhase.PLAN,
        RunPhase.APPLY,
        RunPhase.DONE,
    ]


def test_page_sizes_are_passed_to_tracker(retry: RetryPolicy) -> None:
    tracker = _tracker(
        [IssuesPage(issues=(), has_next_page=False, end_cursor=None)],
        [LabelsPage(labels=(), has_next_page=False, end_cursor=None)],
    )

    LabelReconciler(
        tracker=tracker,
        resolver=StaticRangeResolver(),
        retry=retry,
        issue_page_size=25,
        label_page_size=75,
    ).run()

    tracker.list_issues_page.assert_called_once_with(None, first=25)
    tracker.list_labels_page.assert_called_once_with(None, first=75)


def test_mapping_mode_visits_load_mapping_phase(retry: RetryPolicy) -> None:
    mapping = ProjectLabelMapping.model_validate(
        {"Billing": {"001 Core Systems": "[100-199]", "002 Core Areas": "[50]"}}
    )
    issue = make_issue("ENG-2", project_name="Billing")
    tracker = _tracker(
        [IssuesPage(issues=(issue,), has_next_page=False, end_cursor=None)],
        [LabelsPage(labels=(SYSTEM_100, AREA_50), has_next_page=False, end_cursor=None)],
    )

    summary = LabelReconciler(
        tracker=tracker, resolver=MappingResolver(mapping), retry=retry
    ).run()

    assert RunPhase.LOAD_MAPPING in summary.phases
    assert summary.phases.index(RunPhase.LOAD_MAPPING) == 2
    assert summary.updated == 1


def test_fetch_failure_aborts_before_any_update(retry: RetryPolicy) -> None:
    tracker = Mock(spec=TrackerClient)
    tracker.list_issues_page.return_value = IssuesPage(
        issues=(make_issue("ENG-3", project_identifier="150.2"),),
        has_next_page=False,
        end_cursor=None,
    )
    tracker.list_labels_page.side_effect = requests.HTTPError("500 Server Error")

    reconciler = LabelReconciler(tracker=tracker, resolver=StaticRangeResolver(), retry=retry)
    with pytest.raises(requests.HTTPError):
        reconciler.run()

    assert tracker.list_labels_page.call_count == 3
    tracker.update_issue_labels.assert_not_called()
    assert reconciler.phase is RunPhase.FETCH_LABELS


def test_log_phase_follows_the_run_and_is_cleared_after(retry: RetryPolicy) -> None:
    seen: list[str | None] = []

    def list_labels(cursor: str | None, *, first: int) -> LabelsPage:
        seen.append(current_phase())
        raise requests.HTTPError("503 Service Unavailable")

    tracker = Mock(spec=TrackerClient)
    tracker.list_issues_page.return_value = IssuesPage(issues=(), has_next_page=False, end_cursor=None)
    tracker.list_labels_page.side_effect = list_labels

    with pytest.raises(requests.HTTPError):
        LabelReconciler(tracker=tracker, resolver=StaticRangeResolver(), retry=retry).run()

    assert seen == ["fetch_labels"] * 3
    assert current_phase() is None


def test_update_failures_do_not_abort_the_run(retry: RetryPolicy) -> None:
    issues = (
        make_issue("ENG-4", project_identifier="150.2"),
        make_issue("ENG-5", project_identifier="150.3"),
    )
    tracker = _tracker(
        [IssuesPage(issues=issues, has_next_page=False, end_cursor=None)],
        [LabelsPage(labels=(SYSTEM_100, AREA_50), has_next_page=False, end_cursor=None)],
    )
    tracker.update_issue_labels.side_effect = [
        IssueUpdateResult(success=False),
        IssueUpdateResult(success=True),
    ]

    summary = LabelReconciler(tracker=tracker, resolver=StaticRangeResolver(), retry=retry).run()

    assert summary.failed == 1
    assert summary.updated == 1
    assert summary.phases[-1] is RunPhase.DONE


def test_reconciler_runs_only_once(retry: RetryPolicy) -> None:
    tracker = _tracker(
        [IssuesPage(issues=(), has_next_page=False, end_cursor=None)],
        [LabelsPage(labels=(), has_next_page=False, end_cursor=None)],
    )
    reconciler = LabelReconciler(tracker=tracker, resolver=StaticRangeResolver(), retry=retry)
    reconciler.run()

    with pytest.raises(IllegalTransitionError):
        reconciler.run()


def test_transition_rejects_skipping_phases() -> None:
    with pytest.raises(IllegalTransitionError):
        transition(current=RunPhase.FETCH_ISSUES, to=RunPhase.PLAN)
    with pytest.raises(IllegalTransitionError):
        transition(current=RunPhase.PLAN, to=RunPhase.DONE)
