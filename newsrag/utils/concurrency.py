"""Bounded-concurrency worker pool for the pipeline stages.

Every stage fans out over a list of identifiers (latest items, stories to
chunk, stories to embed).  :class:`WorkerPool` wraps each call in a shared
semaphore acquire/release, so at most ``concurrency`` operations
are in flight at any moment.

Workers report how each item ended by returning an :class:`ItemOutcome`
(``None`` counts as success).  An exception escaping a worker is a
pool-level fault: the pool still drains every other item, then
:meth:`PoolReport.raise_for_errors` raises :class:`WorkerPoolError` so the
whole invocation fails without claiming partial success.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Generic, Iterable, TypeVar

import structlog

from newsrag.utils.errors import WorkerPoolError
from newsrag.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


class ItemOutcome(str, Enum):
    """How a single pool item finished."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class PoolReport(Generic[_T]):
    """Aggregate result of one :meth:`WorkerPool.run` call."""

    outcomes: dict[ItemOutcome, int] = field(default_factory=dict)
    errors: list[tuple[_T, BaseException]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.outcomes.values()) + len(self.errors)

    def count(self, outcome: ItemOutcome) -> int:
        return self.outcomes.get(outcome, 0)

    def raise_for_errors(self) -> None:
        """Raise :class:`WorkerPoolError` if any worker raised."""
        if not self.errors:
            return
        raw = [exc for _, exc in self.errors]
        raise WorkerPoolError(raw) from raw[0]

    def as_log_fields(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "succeeded": self.count(ItemOutcome.SUCCEEDED),
            "skipped": self.count(ItemOutcome.SKIPPED),
            "failed": self.count(ItemOutcome.FAILED),
            "errors": len(self.errors),
        }


class WorkerPool:
    """Runs an async worker over many items with at most *concurrency* in flight.

    Parameters
    ----------
    concurrency:
        Maximum number of simultaneously running workers.  Must be >= 1.
    name:
        Label attached to log entries (e.g. ``"scrape"``).
    """

    def __init__(self, concurrency: int, name: str = "pool") -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._concurrency = concurrency
        self._name = name

    @property
    def concurrency(self) -> int:
        return self._concurrency

    async def run(
        self,
        items: Iterable[_T],
        worker: Callable[[_T], Awaitable[ItemOutcome | None]],
    ) -> PoolReport[_T]:
        """Run *worker* over *items* and collect outcomes and raised errors.

        Never raises for worker exceptions; they are collected on the
        returned report.  Cancellation is propagated unchanged.
        """
        item_list = list(items)
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _wrapped(item: _T) -> ItemOutcome | None:
            async with semaphore:
                return await worker(item)

        results = await asyncio.gather(
            *(_wrapped(item) for item in item_list),
            return_exceptions=True,
        )

        counts: Counter[ItemOutcome] = Counter()
        errors: list[tuple[_T, BaseException]] = []
        for item, result in zip(item_list, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    # CancelledError / KeyboardInterrupt are not worker faults.
                    raise result
                _logger.error(
                    "worker_failed",
                    pool=self._name,
                    item=str(item),
                    error_type=type(result).__name__,
                    error=str(result),
                )
                errors.append((item, result))
            else:
                counts[result or ItemOutcome.SUCCEEDED] += 1

        report: PoolReport[_T] = PoolReport(outcomes=dict(counts), errors=errors)
        _logger.info("worker_pool_done", pool=self._name, **report.as_log_fields())
        return report

    async def process(
        self,
        items: Iterable[_T],
        worker: Callable[[_T], Awaitable[ItemOutcome | None]],
    ) -> PoolReport[_T]:
        """Like :meth:`run`, but raise :class:`WorkerPoolError` if any worker raised."""
        report = await self.run(items, worker)
        report.raise_for_errors()
        return report
