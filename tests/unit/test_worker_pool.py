"""Unit tests for WorkerPool and PoolReport."""

from __future__ import annotations

import asyncio

import pytest

from newsrag.utils.concurrency import ItemOutcome, WorkerPool
from newsrag.utils.errors import WorkerPoolError


class TestWorkerPool:
    async def test_concurrency_never_exceeds_limit(self) -> None:
        in_flight = 0
        peak = 0

        async def worker(_: int) -> None:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1

        await WorkerPool(3).run(range(20), worker)

        assert peak == 3

    async def test_outcomes_are_counted(self) -> None:
        async def worker(item: int) -> ItemOutcome | None:
            if item % 3 == 0:
                return ItemOutcome.SKIPPED
            if item % 3 == 1:
                return ItemOutcome.FAILED
            return None

        report = await WorkerPool(4).run(range(9), worker)

        assert report.count(ItemOutcome.SKIPPED) == 3
        assert report.count(ItemOutcome.FAILED) == 3
        assert report.count(ItemOutcome.SUCCEEDED) == 3
        assert report.total == 9

    async def test_errors_collected_and_all_items_processed(self) -> None:
        processed: list[int] = []

        async def worker(item: int) -> None:
            if item == 2:
                raise ValueError("boom")
            processed.append(item)

        report = await WorkerPool(2).run(range(5), worker)

        assert sorted(processed) == [0, 1, 3, 4]
        assert [item for item, _ in report.errors] == [2]

    async def test_process_raises_pool_error_after_draining(self) -> None:
        processed: list[int] = []

        async def worker(item: int) -> None:
            if item in (1, 3):
                raise KeyError(item)
            processed.append(item)

        with pytest.raises(WorkerPoolError) as exc_info:
            await WorkerPool(8).process(range(5), worker)

        assert sorted(processed) == [0, 2, 4]
        assert len(exc_info.value.errors) == 2
        assert isinstance(exc_info.value.__cause__, KeyError)

    async def test_empty_input(self) -> None:
        async def worker(_: int) -> None:
            raise AssertionError("never called")

        report = await WorkerPool(1).process([], worker)
        assert report.total == 0

    def test_concurrency_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            WorkerPool(0)
