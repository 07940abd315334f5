"""Errors raised while talking to the issue tracker."""

from __future__ import annotations


class TrackerApiError(RuntimeError):
    """The tracker answered with an explicit GraphQL `errors` list."""

    def __init__(self, messages: list[str]) -> None:
        self.messages = messages
        super().__init__("Tracker GraphQL error: " + ("; ".join(messages) or "unknown error"))


class MissingDataError(RuntimeError):
    """A response carried neither data nor errors, or data of the wrong shape."""
