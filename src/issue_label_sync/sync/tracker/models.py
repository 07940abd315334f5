"""Typed views of the tracker entities and per-operation responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from issue_label_sync.sync.tracker.errors import MissingDataError


@dataclass(frozen=True, slots=True)
class Label:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class Project:
    """The project an issue belongs to.

    `identifier` is the dot-delimited project key (e.g. "150.2"); the tracker
    may omit it, in which case only `name` is available.
    """

    id: str
    name: str
    identifier: str | None = None


@dataclass(frozen=True, slots=True)
class Issue:
    id: str
    identifier: str
    title: str
    labels: tuple[Label, ...] = field(default_factory=tuple)
    project: Project | None = None

    @property
    def label_ids(self) -> tuple[str, ...]:
        return tuple(label.id for label in self.labels)

    @property
    def label_names(self) -> frozenset[str]:
        return frozenset(label.name for label in self.labels)


@dataclass(frozen=True, slots=True)
class IssuesPage:
    issues: tuple[Issue, ...]
    has_next_page: bool
    end_cursor: str | None

    @property
    def items(self) -> tuple[Issue, ...]:
        return self.issues


@dataclass(frozen=True, slots=True)
class LabelsPage:
    labels: tuple[Label, ...]
    has_next_page: bool
    end_cursor: str | None

    @property
    def items(self) -> tuple[Label, ...]:
        return self.labels


@dataclass(frozen=True, slots=True)
class IssueUpdateResult:
    """Outcome of an update mutation that reached the server without errors."""

    success: bool
    issue: Issue | None = None


def _require_str(node: dict[str, Any], key: str, *, kind: str) -> str:
    value = node.get(key)
    if not isinstance(value, str) or not value:
        raise MissingDataError(f"Unexpected {kind} node: missing {key}")
    return value


def parse_label(node: object) -> Label:
    if not isinstance(node, dict):
        raise MissingDataError("Unexpected label node")
    return Label(id=_require_str(node, "id", kind="label"), name=_require_str(node, "name", kind="label"))


def parse_project(node: object) -> Project | None:
    if node is None:
        return None
    if not isinstance(node, dict):
        raise MissingDataError("Unexpected project node")
    identifier = node.get("identifier")
    return Project(
        id=_require_str(node, "id", kind="project"),
        name=_require_str(node, "name", kind="project"),
        identifier=identifier if isinstance(identifier, str) else None,
    )


def parse_issue(node: object) -> Issue:
    if not isinstance(node, dict):
        raise MissingDataError("Unexpected issue node")

    labels_conn = node.get("labels")
    label_nodes = labels_conn.get("nodes") if isinstance(labels_conn, dict) else None
    if not isinstance(label_nodes, list):
        raise MissingDataError("Unexpected issue node: missing labels")
    label_page = labels_conn.get("pageInfo")
    if isinstance(label_page, dict) and label_page.get("hasNextPage") is True:
        raise MissingDataError(
            f"Issue {node.get('identifier')!r} has more labels than one page; refusing a partial label set"
        )

    title = node.get("title")
    return Issue(
        id=_require_str(node, "id", kind="issue"),
        identifier=_require_str(node, "identifier", kind="issue"),
        title=title if isinstance(title, str) else "",
        labels=tuple(parse_label(n) for n in label_nodes),
        project=parse_project(node.get("project")),
    )


def parse_page_info(connection: dict[str, Any]) -> tuple[bool, str | None]:
    page_info = connection.get("pageInfo")
    if not isinstance(page_info, dict):
        raise MissingDataError("Unexpected connection: missing pageInfo")
    has_next = page_info.get("hasNextPage")
    if not isinstance(has_next, bool):
        raise MissingDataError("Unexpected connection: missing hasNextPage")
    cursor = page_info.get("endCursor")
    return has_next, cursor if isinstance(cursor, str) and cursor else None
