from typing import Any

import pytest

from argeon.utils.retry import RetriesExhaustedError, RetryPolicy, attempt_with_policy


class Flaky:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures: int, error: Exception = OSError("connection reset")):
        self.failures = failures
        self.error = error
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


def test_linear_backoff_delays() -> None:
    policy = RetryPolicy(max_attempts=4, base_delay=1.5)
    assert [policy.delay_for(n) for n in (1, 2, 3)] == [1.5, 3.0, 4.5]


def test_policy_needs_an_attempt() -> None:
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)


async def test_exhausted_after_max_attempts(no_sleep: Any) -> None:
    operation = Flaky(failures=10)
    with pytest.raises(RetriesExhaustedError) as exc_info:
        await attempt_with_policy(operation, RetryPolicy(), description="mods/a.jar")

    assert operation.calls == 3
    assert exc_info.value.attempts == 3
    assert isinstance(exc_info.value.last_error, OSError)
    assert [c.args[0] for c in no_sleep.await_args_list] == [1.0, 2.0]


async def test_success_after_one_failure(no_sleep: Any) -> None:
    operation = Flaky(failures=1)
    assert await attempt_with_policy(operation, RetryPolicy()) == "ok"
    assert operation.calls == 2
    assert [c.args[0] for c in no_sleep.await_args_list] == [1.0]


async def test_first_success_does_not_sleep(no_sleep: Any) -> None:
    operation = Flaky(failures=0)
    assert await attempt_with_policy(operation, RetryPolicy()) == "ok"
    no_sleep.assert_not_awaited()


async def test_unlisted_errors_propagate_immediately(no_sleep: Any) -> None:
    operation = Flaky(failures=5, error=KeyError("boom"))
    with pytest.raises(KeyError):
        await attempt_with_policy(operation, RetryPolicy(), retry_on=(OSError,))
    assert operation.calls == 1
    no_sleep.assert_not_awaited()
