"""Canonical label names derived from a project identifier.

A project identifier is a dot-delimited key such as "150.2". Its first
segment starts with a 3-digit system number:

- the system label names the hundred-block that number falls in,
  e.g. 150 -> "[100-199]"
- the area label is the 3 characters after the leading digit,
  e.g. "150" -> "[50]" (shorter segments yield shorter areas)

These functions are pure.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

SYSTEM_NUMBER_DIGITS = 3


class LabelInferenceError(ValueError):
    """A project could not be turned into a label requirement."""


class InvalidIdentifierError(LabelInferenceError):
    """The project identifier is empty or does not start with digits."""


@dataclass(frozen=True, slots=True)
class LabelRequirement:
    """The two canonical label names an issue must carry."""

    system_label: str
    area_label: str

    def __iter__(self) -> Iterator[str]:
        yield self.system_label
        yield self.area_label


def _leading_segment(identifier: str) -> str:
    if not identifier:
        raise InvalidIdentifierError("Project identifier is empty")
    segment = identifier.split(".")[0]
    if not segment:
        raise InvalidIdentifierError(f"Project identifier has an empty first segment: {identifier!r}")
    return segment


def _system_number(segment: str, identifier: str) -> int:
    digits = segment[:SYSTEM_NUMBER_DIGITS]
    # isdigit() alone accepts superscripts and other non-ASCII digits.
    if not (digits.isascii() and digits.isdigit()):
        raise InvalidIdentifierError(f"Project identifier does not start with a number: {identifier!r}")
    return int(digits)


def system_range(system_number: int) -> tuple[int, int]:
    """Return the inclusive hundred-block containing `system_number`."""

    lower = system_number // 100 * 100
    return lower, lower + 99


def infer_system_label(identifier: str) -> str:
    segment = _leading_segment(identifier)
    lower, upper = system_range(_system_number(segment, identifier))
    return f"[{lower:03d}-{upper:03d}]"


def infer_area_label(identifier: str) -> str:
    segment = _leading_segment(identifier)
    _system_number(segment, identifier)
    return f"[{segment[1:4]}]"


def infer_requirement(identifier: str) -> LabelRequirement:
    return LabelRequirement(
        system_label=infer_system_label(identifier),
        area_label=infer_area_label(identifier),
    )
