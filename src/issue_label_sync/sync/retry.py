"""Fixed-delay retry for tracker calls.

The tracker is expected to fail transiently and recover quickly, so retries
use a constant delay with no jitter or backoff.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_retry(
    operation: Callable[[], T],
    *,
    attempts: int = 3,
    delay_seconds: float = 1.0,
    description: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call `operation` until it succeeds or the attempt budget is spent.

    Attempts run strictly one after another. The last failure is re-raised
    unchanged.

    Args:
        operation: Zero-argument callable to invoke.
        attempts: Total number of calls allowed, including the first.
        delay_seconds: Pause between consecutive attempts.
        description: Human-readable name used in log lines.
        sleep: Injected for tests.

    Raises:
        ValueError: If `attempts` < 1 or `delay_seconds` < 0.
    """

    if attempts < 1:
        raise ValueError("attempts must be >= 1")
    if delay_seconds < 0:
        raise ValueError("delay_seconds must be >= 0")

    attempt = 1
    while True:
        try:
            return operation()
        except Exception as e:
            remaining = attempts - attempt
            if remaining <= 0:
                raise
            logger.warning(
                "Retrying after failure",
                extra={
                    "operation": description,
                    "error": str(e),
                    "remaining_attempts": remaining,
                    "delay_seconds": delay_seconds,
                },
            )
            sleep(delay_seconds)
            attempt += 1


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Retry settings passed through the fetch and apply phases."""

    attempts: int = 3
    delay_seconds: float = 1.0
    sleep: Callable[[float], None] = time.sleep

    def run(self, operation: Callable[[], T], *, description: str = "operation") -> T:
        return with_retry(
            operation,
            attempts=self.attempts,
            delay_seconds=self.delay_seconds,
            description=description,
            sleep=self.sleep,
        )
