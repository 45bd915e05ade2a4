"""Scrape stage: pull new stories from a content source into the store.

For one publication the scraper lists the source's latest items, drops
those already stored, and fetches the rest through a bounded worker pool.
Each item is fetched under a :class:`RetryPolicy`; once its attempts run
out the item is logged and abandoned without failing the batch.  Stories
with too few content blocks are discarded as thin.
"""

from __future__ import annotations

from typing import Mapping

import structlog

from newsrag.interfaces.news_source import INewsSource
from newsrag.interfaces.story_store import IStoryStore
from newsrag.models.story import LatestItem
from newsrag.utils.concurrency import ItemOutcome, PoolReport, WorkerPool
from newsrag.utils.errors import UnknownPublicationError
from newsrag.utils.logging import get_logger
from newsrag.utils.retry import RetryPolicy

logger: structlog.BoundLogger = get_logger(__name__)


class ScraperService:
    """Fetches and stores the latest stories of a publication.

    Parameters
    ----------
    store:
        Story store receiving the upserts.
    sources:
        Publication name -> content source registry.
    retry_policy:
        Per-item retry policy (default 3 attempts, 0.5 s apart).
    concurrency:
        Maximum number of items fetched at once.
    thin_story_max_blocks:
        Stories with this many content blocks or fewer are discarded.
    """

    def __init__(
        self,
        store: IStoryStore,
        sources: Mapping[str, INewsSource],
        retry_policy: RetryPolicy | None = None,
        concurrency: int = 8,
        thin_story_max_blocks: int = 3,
    ) -> None:
        self._store = store
        self._sources = dict(sources)
        self._retry_policy = retry_policy or RetryPolicy()
        self._pool = WorkerPool(concurrency, name="scrape")
        self._thin_story_max_blocks = thin_story_max_blocks

    async def scrape(self, publication: str, limit: int) -> PoolReport[LatestItem]:
        """Scrape up to *limit* of the newest items of *publication*.

        Raises
        ------
        UnknownPublicationError
            If no content source is registered for *publication*.
        WorkerPoolError
            If a worker raised outside the per-item retry handling.
        """
        source = self._sources.get(publication)
        if source is None:
            raise UnknownPublicationError(publication)

        existing = set(await self._store.list_story_ids(publication))
        latest = await source.list_latest(limit)

        seen: set[str] = set()
        pending: list[LatestItem] = []
        for item in latest:
            if item.id in existing or item.id in seen:
                continue
            seen.add(item.id)
            pending.append(item)

        logger.info(
            "scrape_started",
            publication=publication,
            listed=len(latest),
            already_stored=len(latest) - len(pending),
            pending=len(pending),
        )

        async def _worker(item: LatestItem) -> ItemOutcome:
            return await self._scrape_item(source, publication, item)

        report = await self._pool.process(pending, _worker)
        logger.info("scrape_completed", publication=publication, **report.as_log_fields())
        return report

    async def _scrape_item(
        self, source: INewsSource, publication: str, item: LatestItem
    ) -> ItemOutcome:
        async def _attempt() -> ItemOutcome:
            story = await source.get_story(item.id)
            if len(story.content) <= self._thin_story_max_blocks:
                logger.info(
                    "story_skipped_thin_content",
                    publication=publication,
                    story_id=item.id,
                    blocks=len(story.content),
                )
                return ItemOutcome.SKIPPED
            await self._store.upsert_story(story)
            return ItemOutcome.SUCCEEDED

        def _on_retry(attempt: int, exc: BaseException) -> None:
            logger.warning(
                "story_fetch_retry",
                publication=publication,
                story_id=item.id,
                attempt=attempt,
                error=str(exc),
            )

        try:
            return await self._retry_policy.call(_attempt, on_retry=_on_retry)
        except Exception as exc:
            logger.error(
                "story_fetch_abandoned",
                publication=publication,
                story_id=item.id,
                attempts=self._retry_policy.max_attempts,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return ItemOutcome.FAILED
