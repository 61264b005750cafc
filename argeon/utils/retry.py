"""
Retry policy and a generic attempt-with-policy primitive.
Used by the download engine, the client jar step and mod-loader metadata lookups.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many times to try an operation and how long to wait in between.

    Backoff is linear: the wait after failed attempt ``n`` is ``n * base_delay``
    seconds, so the defaults wait 1s before attempt 2 and 2s before attempt 3.
    """

    max_attempts: int = 3
    base_delay: float = 1.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("A retry policy needs at least one attempt.")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given (1-indexed) failed attempt."""
        return attempt * self.base_delay


class RetriesExhaustedError(Exception):
    """Raised when every attempt allowed by a policy failed."""

    def __init__(self, description: str, attempts: int, last_error: BaseException):
        super().__init__(
            f"{description} failed after {attempts} attempt(s): {last_error}"
        )
        self.attempts = attempts
        self.last_error = last_error


async def attempt_with_policy(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    description: str = "operation",
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """
    Runs ``operation`` until it succeeds or the policy gives up.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt.
        policy: The retry policy to follow.
        description: Human-readable label used in log messages.
        retry_on: Exception types counted as a failed attempt; anything else
            propagates immediately.

    Returns:
        Whatever the first successful attempt returned.

    Raises:
        RetriesExhaustedError: If every attempt failed.
    """
    last_exception: BaseException | None = None
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except retry_on as e:
            last_exception = e
            log.debug(
                f"Attempt {attempt}/{policy.max_attempts} for '{description}' failed: {e}"
            )
            if attempt < policy.max_attempts:
                await asyncio.sleep(policy.delay_for(attempt))

    raise RetriesExhaustedError(description, policy.max_attempts, last_exception)
