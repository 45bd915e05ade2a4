"""Unit tests for EmbedderService."""

from __future__ import annotations

import pytest

from newsrag.models.content import to_markdown
from newsrag.services.chunker import ChunkerService
from newsrag.services.embedder import EmbedderService
from newsrag.utils.errors import EmbeddingError, WorkerPoolError
from tests.conftest import FakeEmbeddingProvider, InMemoryStoryStore, make_draft


@pytest.fixture
async def chunked_store() -> InMemoryStoryStore:
    store = InMemoryStoryStore()
    for story_id in ("a", "b"):
        await store.upsert_story(make_draft(story_id))
    await ChunkerService(store).chunk("test", version=1, words_per_chunk=15)
    return store


class TestEmbedderService:
    async def test_embeds_every_chunk_markdown(self, chunked_store) -> None:
        provider = FakeEmbeddingProvider()

        await EmbedderService(chunked_store, provider).embed("test", 1)

        chunks = list(chunked_store.chunks.values())
        assert chunks and all(c.embedding == [1.0, 0.0, 0.0] for c in chunks)
        assert sorted(provider.calls) == sorted(to_markdown(c.content) for c in chunks)

    async def test_second_run_embeds_nothing(self, chunked_store) -> None:
        provider = FakeEmbeddingProvider()
        service = EmbedderService(chunked_store, provider)
        await service.embed("test", 1)
        provider.calls.clear()

        await service.embed("test", 1)

        assert provider.calls == []

    async def test_resumes_after_partial_run(self, chunked_store) -> None:
        first_id = next(iter(chunked_store.chunks))
        await chunked_store.insert_embedding(first_id, [0.0, 1.0, 0.0])
        provider = FakeEmbeddingProvider()

        await EmbedderService(chunked_store, provider).embed("test", 1)

        assert len(provider.calls) == len(chunked_store.chunks) - 1
        assert chunked_store.chunks[first_id].embedding == [0.0, 1.0, 0.0]

    async def test_story_without_chunks_at_version_is_skipped(self, chunked_store) -> None:
        provider = FakeEmbeddingProvider()

        report = await EmbedderService(chunked_store, provider).embed("test", 99)

        assert provider.calls == []
        assert report.total == 2

    async def test_missing_vector_fails_the_run(self, chunked_store) -> None:
        service = EmbedderService(chunked_store, FakeEmbeddingProvider(empty=True))

        with pytest.raises(WorkerPoolError) as exc_info:
            await service.embed("test", 1)

        assert all(isinstance(e, EmbeddingError) for e in exc_info.value.errors)
        assert all(c.embedding is None for c in chunked_store.chunks.values())
