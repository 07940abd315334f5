"""Unit tests for the fixed-delay retry wrapper."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from issue_label_sync.sync.retry import RetryPolicy, with_retry


def test_retry_returns_value_after_two_failures(sleep) -> None:
    operation = Mock(side_effect=[RuntimeError("boom"), RuntimeError("boom"), "ok"])

    result = with_retry(operation, attempts=3, delay_seconds=1.0, sleep=sleep)

    assert result == "ok"
    assert operation.call_count == 3
    assert sleep.calls == [1.0, 1.0]


def test_retry_reraises_final_failure_unchanged(sleep) -> None:
    final = ConnectionError("still down")
    operation = Mock(side_effect=[ConnectionError("down"), ConnectionError("down"), final])

    with pytest.raises(ConnectionError) as excinfo:
        with_retry(operation, attempts=3, delay_seconds=0.5, sleep=sleep)

    assert excinfo.value is final
    assert operation.call_count == 3
    assert sleep.calls == [0.5, 0.5]


def test_retry_does_not_sleep_on_first_success(sleep) -> None:
    operation = Mock(return_value=42)

    assert with_retry(operation, sleep=sleep) == 42
    assert sleep.calls == []


def test_single_attempt_never_retries(sleep) -> None:
    operation = Mock(side_effect=ValueError("bad"))

    with pytest.raises(ValueError, match="bad"):
        with_retry(operation, attempts=1, sleep=sleep)

    assert operation.call_count == 1
    assert sleep.calls == []


def test_retry_logs_remaining_attempts(sleep, caplog: pytest.LogCaptureFixture) -> None:
    operation = Mock(side_effect=[RuntimeError("x"), RuntimeError("x"), "ok"])

    with caplog.at_level("WARNING", logger="issue_label_sync.sync.retry"):
        with_retry(operation, attempts=3, description="fetch issues", sleep=sleep)

    remaining = [getattr(r, "remaining_attempts", None) for r in caplog.records]
    assert remaining == [2, 1]


@pytest.mark.parametrize("attempts, delay", [(0, 1.0), (3, -1.0)])
def test_retry_rejects_invalid_budget(attempts: int, delay: float) -> None:
    with pytest.raises(ValueError):
        with_retry(Mock(), attempts=attempts, delay_seconds=delay)


def test_policy_passes_its_settings(sleep) -> None:
    policy = RetryPolicy(attempts=2, delay_seconds=3.0, sleep=sleep)
    operation = Mock(side_effect=[RuntimeError("x"), "done"])

    assert policy.run(operation, description="op") == "done"
    assert sleep.calls == [3.0]
