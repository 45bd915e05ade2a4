"""Chunk stage: split stored stories into word-budgeted chunks.

Chunking is greedy and deterministic.  Blocks are appended to the current
chunk until its word count reaches the budget, at which point the chunk is
closed; a non-empty remainder becomes the final chunk.  Boundaries only
ever fall between blocks, so a single long block can make a chunk exceed
the budget.

Chunks are versioned: running the stage with a new ``version`` chunks
every story again without touching chunks of other versions, and running
it twice with the same version only picks up stories that have none yet.
"""

from __future__ import annotations

from typing import Sequence

import structlog

from newsrag.interfaces.story_store import IStoryStore
from newsrag.models.content import ContentBlock, word_count
from newsrag.models.story import ChunkDraft
from newsrag.utils.concurrency import ItemOutcome, PoolReport, WorkerPool

logger = structlog.get_logger(logger_name=__name__)


def split_into_chunks(
    blocks: Sequence[ContentBlock], words_per_chunk: int
) -> list[list[ContentBlock]]:
    """Partition *blocks* into consecutive groups of at least *words_per_chunk* words.

    Every group but the last reaches the budget; concatenating the groups
    reproduces *blocks* exactly.

    Raises
    ------
    ValueError
        If *words_per_chunk* is less than 1.
    """
    if words_per_chunk < 1:
        raise ValueError("words_per_chunk must be >= 1")

    chunks: list[list[ContentBlock]] = []
    current: list[ContentBlock] = []
    for block in blocks:
        current.append(block)
        if word_count(current) >= words_per_chunk:
            chunks.append(current)
            current = []
    if current:
        chunks.append(current)
    return chunks


class ChunkerService:
    """Creates chunks at a given version for every story that lacks them."""

    def __init__(self, store: IStoryStore, concurrency: int = 8) -> None:
        self._store = store
        self._pool = WorkerPool(concurrency, name="chunk")

    async def chunk(
        self, publication: str, version: int, words_per_chunk: int
    ) -> PoolReport[str]:
        """Chunk every story of *publication* that has no chunks at *version*.

        Raises
        ------
        ValueError
            If *words_per_chunk* is less than 1.
        WorkerPoolError
            After the pool drains, if any story failed.
        """
        if words_per_chunk < 1:
            raise ValueError("words_per_chunk must be >= 1")

        story_ids = await self._store.list_story_ids_without_chunks(publication, version)
        logger.info(
            "chunk_started",
            publication=publication,
            version=version,
            words_per_chunk=words_per_chunk,
            stories=len(story_ids),
        )

        async def _worker(story_id: str) -> ItemOutcome:
            return await self._chunk_story(publication, story_id, version, words_per_chunk)

        report = await self._pool.process(story_ids, _worker)
        logger.info("chunk_completed", publication=publication, version=version,
                    **report.as_log_fields())
        return report

    async def _chunk_story(
        self, publication: str, story_id: str, version: int, words_per_chunk: int
    ) -> ItemOutcome:
        story = await self._store.find_story(publication, story_id)
        groups = split_into_chunks(story.content, words_per_chunk)
        if groups:
            # One batch per story: a failure leaves the story unchunked at
            # this version, so the next run picks it up again.
            await self._store.insert_chunks([
                ChunkDraft(
                    publication=publication,
                    story_id=story_id,
                    version=version,
                    index=index,
                    content=content,
                    embedding=None,
                )
                for index, content in enumerate(groups)
            ])
        logger.debug("story_chunked", publication=publication, story_id=story_id,
                     chunks=len(groups))
        return ItemOutcome.SUCCEEDED if groups else ItemOutcome.SKIPPED
