"""Bounded retry policy for single retryable operations.

The policy only knows how to repeat one awaitable; the fan-out around it
(:mod:`newsrag.utils.concurrency`) stays unaware of retries.  Built on
tenacity's ``AsyncRetrying`` with a fixed wait between attempts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

_T = TypeVar("_T")

RetryCallback = Callable[[int, BaseException], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry an operation up to *max_attempts* times, sleeping *delay_seconds* between.

    The last exception is re-raised unchanged once attempts are exhausted.
    """

    max_attempts: int = 3
    delay_seconds: float = 0.5

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")

    async def call(
        self,
        operation: Callable[[], Awaitable[_T]],
        on_retry: RetryCallback | None = None,
    ) -> _T:
        """Await ``operation()`` until it succeeds or attempts run out.

        Parameters
        ----------
        operation:
            Zero-argument coroutine factory; called once per attempt.
        on_retry:
            Optional ``(attempt_number, exception)`` callback invoked before
            each backoff sleep (i.e. not after the final attempt).
        """

        def _before_sleep(state: RetryCallState) -> None:
            if on_retry is not None and state.outcome is not None:
                exc = state.outcome.exception()
                if exc is not None:
                    on_retry(state.attempt_number, exc)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.delay_seconds),
            retry=retry_if_exception_type(Exception),
            before_sleep=_before_sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                result = await operation()
        return result
