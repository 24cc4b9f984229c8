"""Bounded retry loop with per-attempt timeout for completion requests."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from ..core.logger import get_logger
from .exceptions import CompletionFailure, TransportFailure

logger = get_logger("ai.retry")

T = TypeVar("T")

MAX_ATTEMPTS = 10  # 1 initial request + 9 retries
ATTEMPT_TIMEOUT = 30.0  # seconds


@dataclass
class RetryState:
    """Ephemeral bookkeeping for one retried request.

    Attributes:
        max_attempts: Total number of tries allowed
        timeout: Seconds allowed for each try
        attempt: Number of tries started so far
        last_error: Message of the most recent failure
    """

    max_attempts: int = MAX_ATTEMPTS
    timeout: float = ATTEMPT_TIMEOUT
    attempt: int = 0
    last_error: str | None = None

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts


RetryCallback = Callable[[RetryState], Awaitable[None]]


async def run_with_retries(
    operation: Callable[[], Awaitable[T]],
    state: RetryState,
    on_retry: RetryCallback | None = None,
    retry_on: tuple[type[Exception], ...] = (Exception,),
) -> T:
    """Run ``operation`` until it succeeds or the attempt budget is spent.

    Every attempt is cancelled once ``state.timeout`` elapses; a timeout counts
    as a failure like any exception in ``retry_on``. ``on_retry`` is awaited
    after each failed attempt that will be followed by another one, never after
    the last.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        state: Retry state, updated in place
        on_retry: Optional callback notified before the next attempt
        retry_on: Exception types treated as retryable failures

    Returns:
        The result of the first successful attempt

    Raises:
        CompletionFailure: If all attempts failed
    """
    while not state.exhausted:
        state.attempt += 1
        if state.attempt > 1:
            logger.info("Retry attempt %d/%d", state.attempt - 1, state.max_attempts - 1)

        try:
            return await asyncio.wait_for(operation(), timeout=state.timeout)
        except asyncio.TimeoutError:
            error: Exception = TransportFailure(
                f"Request timeout after {int(state.timeout * 1000)}ms"
            )
            logger.error("Request timeout after %sms", int(state.timeout * 1000))
        except retry_on as exc:
            error = exc
            logger.error("Attempt %d/%d failed: %s", state.attempt, state.max_attempts, exc)

        state.last_error = str(error)

        if not state.exhausted and on_retry is not None:
            await on_retry(state)

    raise CompletionFailure(
        f"Failed to get chat response after {state.max_attempts} attempts: {state.last_error}",
        attempts=state.attempt,
        last_error=state.last_error,
    )
