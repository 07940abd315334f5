"""Cursor-based pagination.

Walks a page-fetch function from the first page until the tracker reports
there are no more pages, collecting items in order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Protocol, TypeVar

from issue_label_sync.sync.retry import RetryPolicy
from issue_label_sync.sync.tracker.errors import MissingDataError

logger = logging.getLogger(__name__)

T_co = TypeVar("T_co", covariant=True)
T = TypeVar("T")


class Page(Protocol[T_co]):
    @property
    def items(self) -> Sequence[T_co]: ...

    @property
    def has_next_page(self) -> bool: ...

    @property
    def end_cursor(self) -> str | None: ...


def fetch_all(
    fetch_page: Callable[[str | None], Page[T]],
    *,
    retry: RetryPolicy,
    description: str = "page",
) -> list[T]:
    """Fetch every page and return the concatenated items.

    Each page request goes through `retry`. If a page still fails after the
    attempt budget, the error propagates and nothing is returned.

    Raises:
        MissingDataError: If a page claims a next page but has no cursor.
    """

    items: list[T] = []
    cursor: str | None = None
    page_number = 0

    while True:
        page_number += 1
        request_cursor = cursor
        page = retry.run(
            lambda: fetch_page(request_cursor),
            description=f"fetch {description} page {page_number}",
        )
        items.extend(page.items)

        if not page.has_next_page:
            break
        if page.end_cursor is None:
            raise MissingDataError(
                f"{description} page {page_number} reports more pages but no end cursor"
            )
        cursor = page.end_cursor

    logger.info(
        "Pagination complete",
        extra={"collection": description, "pages": page_number, "count": len(items)},
    )
    return items
