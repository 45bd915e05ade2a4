"""Embed stage: attach an embedding vector to every chunk that lacks one.

Resumable: chunks that already carry an embedding are skipped, so a
failed run can simply be repeated.
"""

from __future__ import annotations

import structlog

from newsrag.interfaces.embedding_provider import IEmbeddingProvider
from newsrag.interfaces.story_store import IStoryStore
from newsrag.models.content import to_markdown
from newsrag.utils.concurrency import ItemOutcome, PoolReport, WorkerPool

logger = structlog.get_logger(logger_name=__name__)


class EmbedderService:
    """Embeds the markdown rendering of each chunk of a publication."""

    def __init__(
        self,
        store: IStoryStore,
        embedding_provider: IEmbeddingProvider,
        concurrency: int = 64,
    ) -> None:
        self._store = store
        self._embedding_provider = embedding_provider
        self._pool = WorkerPool(concurrency, name="embed")

    async def embed(self, publication: str, version: int) -> PoolReport[str]:
        """Embed every un-embedded chunk of *publication* at *version*.

        Raises
        ------
        WorkerPoolError
            After the pool drains, if any story's worker raised (for
            example an :class:`EmbeddingError` when no vector came back).
        """
        story_ids = await self._store.list_story_ids(publication)
        logger.info("embed_started", publication=publication, version=version,
                    stories=len(story_ids))

        async def _worker(story_id: str) -> ItemOutcome:
            return await self._embed_story(publication, story_id, version)

        report = await self._pool.process(story_ids, _worker)
        logger.info("embed_completed", publication=publication, version=version,
                    **report.as_log_fields())
        return report

    async def _embed_story(self, publication: str, story_id: str, version: int) -> ItemOutcome:
        chunks = await self._store.list_chunks(publication, story_id, version)
        if not chunks:
            logger.info("story_has_no_chunks", publication=publication,
                        story_id=story_id, version=version)
            return ItemOutcome.SKIPPED

        embedded = 0
        for chunk in chunks:
            if chunk.has_embedding:
                continue
            vector = await self._embedding_provider.embed(to_markdown(chunk.content))
            await self._store.insert_embedding(chunk.id, vector)
            embedded += 1
            logger.debug("chunk_embedded", chunk_id=chunk.id, story_id=story_id,
                         index=chunk.index)

        return ItemOutcome.SUCCEEDED if embedded else ItemOutcome.SKIPPED
