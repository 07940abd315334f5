"""GraphQL client for the issue tracker.

Only the three operations the reconciliation needs are exposed: listing
issues, listing labels and replacing an issue's label set. Retries are the
caller's concern; every method here makes exactly one HTTP request.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import requests

from issue_label_sync.sync.tracker.errors import MissingDataError, TrackerApiError
from issue_label_sync.sync.tracker.models import (
    IssuesPage,
    IssueUpdateResult,
    LabelsPage,
    parse_issue,
    parse_label,
    parse_page_info,
)

logger = logging.getLogger(__name__)

ISSUE_LABELS_PAGE_SIZE = 250

# issueUpdate replaces the whole label set, so an issue's labels must be read
# in full; parse_issue rejects a truncated connection.
_ISSUE_FIELDS = f"""
    id
    identifier
    title
    labels(first: {ISSUE_LABELS_PAGE_SIZE}) {{
      nodes {{ id name }}
      pageInfo {{ hasNextPage }}
    }}
    project {{ id name identifier }}
"""

ISSUES_QUERY = (
    "query Issues($first: Int!, $after: String) {"
    "  issues(first: $first, after: $after) {"
    "    nodes {" + _ISSUE_FIELDS + "}"
    "    pageInfo { hasNextPage endCursor }"
    "  }"
    "}"
)

LABELS_QUERY = """
query Labels($first: Int!, $after: String) {
  issueLabels(first: $first, after: $after) {
    nodes { id name }
    pageInfo { hasNextPage endCursor }
  }
}
"""

UPDATE_ISSUE_MUTATION = (
    "mutation UpdateIssue($id: String!, $labelIds: [String!]!) {"
    "  issueUpdate(id: $id, input: { labelIds: $labelIds }) {"
    "    success"
    "    issue {" + _ISSUE_FIELDS + "}"
    "  }"
    "}"
)


class TrackerClient:
    """Small wrapper around the tracker's GraphQL endpoint."""

    def __init__(
        self,
        *,
        api_key: str,
        api_url: str = "https://api.linear.app/graphql",
        timeout_seconds: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Tracker API key is required")

        self._api_url = api_url.rstrip("/")
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        # The tracker expects the raw key, not a "Bearer" token.
        self._session.headers.update(
            {
                "Authorization": api_key,
                "Content-Type": "application/json",
                "User-Agent": "issue-label-sync",
            }
        )

    @property
    def api_url(self) -> str:
        return self._api_url

    def _graphql(self, *, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """POST a GraphQL document and return its `data` object.

        Raises:
            requests.HTTPError: on non-2xx responses.
            TrackerApiError: when the response carries an `errors` list.
            MissingDataError: when the response has neither data nor errors.
        """

        resp = self._session.post(
            self._api_url,
            json={"query": query, "variables": variables},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        try:
            payload = resp.json()
        except ValueError as e:
            raise MissingDataError("Tracker response is not valid JSON") from e
        if not isinstance(payload, dict):
            raise MissingDataError("Tracker response is not a JSON object")

        errors = payload.get("errors")
        if errors:
            messages: list[str] = []
            if isinstance(errors, list):
                for item in errors:
                    if isinstance(item, dict) and isinstance(item.get("message"), str):
                        messages.append(item["message"])
            raise TrackerApiError(messages)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise MissingDataError("Tracker response has no data payload")
        return data

    @staticmethod
    def _connection(data: dict[str, Any], key: str) -> dict[str, Any]:
        conn = data.get(key)
        if not isinstance(conn, dict) or not isinstance(conn.get("nodes"), list):
            raise MissingDataError(f"Tracker response is missing {key}")
        return conn

    def list_issues_page(self, cursor: str | None, *, first: int = 50) -> IssuesPage:
        data = self._graphql(query=ISSUES_QUERY, variables={"first": first, "after": cursor})
        conn = self._connection(data, "issues")
        has_next, end_cursor = parse_page_info(conn)
        issues = tuple(parse_issue(node) for node in conn["nodes"])
        logger.debug(
            "Fetched issues page",
            extra={"count": len(issues), "has_next_page": has_next},
        )
        return IssuesPage(issues=issues, has_next_page=has_next, end_cursor=end_cursor)

    def list_labels_page(self, cursor: str | None, *, first: int = 100) -> LabelsPage:
        data = self._graphql(query=LABELS_QUERY, variables={"first": first, "after": cursor})
        conn = self._connection(data, "issueLabels")
        has_next, end_cursor = parse_page_info(conn)
        labels = tuple(parse_label(node) for node in conn["nodes"])
        logger.debug(
            "Fetched labels page",
            extra={"count": len(labels), "has_next_page": has_next},
        )
        return LabelsPage(labels=labels, has_next_page=has_next, end_cursor=end_cursor)

    def update_issue_labels(self, issue_id: str, label_ids: Sequence[str]) -> IssueUpdateResult:
        """Replace the label set of an issue.

        A well-formed response with `success: false` is returned, not raised.
        """

        if not issue_id:
            raise ValueError("issue_id is required")

        data = self._graphql(
            query=UPDATE_ISSUE_MUTATION,
            variables={"id": issue_id, "labelIds": list(label_ids)},
        )
        result = data.get("issueUpdate")
        if not isinstance(result, dict) or not isinstance(result.get("success"), bool):
            raise MissingDataError("Tracker response is missing issueUpdate")

        issue_node = result.get("issue")
        issue = parse_issue(issue_node) if issue_node is not None else None
        return IssueUpdateResult(success=result["success"], issue=issue)

    def close(self) -> None:
        self._session.close()
