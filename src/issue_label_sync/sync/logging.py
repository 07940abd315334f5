"""Structured logging for reconciliation runs.

Every line is one JSON object. The reconciler records which phase it is in,
and a filter stamps that phase on each record; an `issue` passed through
`extra=` is lifted to the top level next to it, so the history of one issue
or one phase can be grepped out of a run's output.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

_current_phase: ContextVar[str | None] = ContextVar("label_sync_phase", default=None)

# Attributes every LogRecord carries; anything else came in through `extra=`
# or a filter.
_STANDARD_RECORD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}

TOP_LEVEL_FIELDS: tuple[str, ...] = ("phase", "issue")


def set_phase(phase: str | None) -> None:
    _current_phase.set(phase)


def current_phase() -> str | None:
    return _current_phase.get()


def resolve_level(name: str) -> int:
    """Map a level name such as "info" to its number.

    Raises:
        ValueError: If the name is not a standard logging level.
    """

    levels = logging.getLevelNamesMapping()
    key = name.strip().upper()
    if key not in levels:
        known = ", ".join(sorted(k for k in levels if k != "NOTSET"))
        raise ValueError(f"Unknown log level {name!r}; expected one of {known}")
    return levels[key]


class PhaseFilter(logging.Filter):
    """Attach the current run phase to records that do not name one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "phase", None) is None:
            record.phase = current_phase()
        return True


class RunLogFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        fields: dict[str, Any] = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
        }

        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in TOP_LEVEL_FIELDS:
            value = fields.pop(key, None)
            if value is not None:
                entry[key] = value
        if fields:
            entry["data"] = fields
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)

        # Label names and titles are user content; never fail on odd values.
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: str) -> None:
    """Route all logging to stdout as run-scoped JSON lines.

    Raises:
        ValueError: If `level` is not a logging level name.
    """

    numeric_level = resolve_level(level)

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(RunLogFormatter())
    handler.addFilter(PhaseFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    # Connection chatter from requests is only useful when debugging.
    logging.getLogger("urllib3").setLevel(
        logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    )
