"""Shared pytest fixtures and in-memory fakes for the newsrag test suite."""

from __future__ import annotations

import itertools
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import pytest
import structlog

from newsrag.config.settings import Settings
from newsrag.interfaces.embedding_provider import IEmbeddingProvider
from newsrag.interfaces.llm_provider import ILLMProvider
from newsrag.interfaces.news_source import INewsSource
from newsrag.interfaces.story_store import IStoryStore
from newsrag.interfaces.vector_index import IVectorIndex
from newsrag.models.content import BlockKind, ContentBlock
from newsrag.models.search import ChatMessage, GenerationParams
from newsrag.models.story import (
    ChunkDraft,
    LatestItem,
    NewsStory,
    NewsStoryChunk,
    StoryDraft,
    VectorMatch,
)
from newsrag.pipeline.context import PipelineContext, build_services
from newsrag.utils.errors import EmbeddingError, LLMError, RecordNotFoundError

PUBLISHED = datetime(2023, 3, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def text_block(text: str) -> ContentBlock:
    return ContentBlock(kind=BlockKind.TEXT, text=text)


def words(n: int, word: str = "sana") -> str:
    """Return *n* space-separated words."""
    return " ".join([word] * n)


def make_draft(
    story_id: str = "story-1",
    publication: str = "test",
    blocks: list[ContentBlock] | None = None,
    headline: str | None = "Otsikko",
    published_at: datetime = PUBLISHED,
) -> StoryDraft:
    content: list[ContentBlock] = []
    if headline is not None:
        content.append(ContentBlock(kind=BlockKind.HEADLINE, text=headline))
    content.extend(blocks if blocks is not None else [text_block(words(10)) for _ in range(4)])
    return StoryDraft(
        publication=publication,
        story_id=story_id,
        href=f"https://news.example/{story_id}",
        content=content,
        published_at=published_at,
        updated_at=None,
    )


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class InMemoryStoryStore(IStoryStore):
    """Dict-backed story store with the same keying rules as the SQLite one."""

    def __init__(self) -> None:
        self.stories: dict[tuple[str, str], NewsStory] = {}
        self.chunks: dict[str, NewsStoryChunk] = {}
        self.upserts = 0
        self._ids = itertools.count(1)

    async def initialize(self) -> None:
        return None

    def get_provider_name(self) -> str:
        return "memory"

    async def upsert_story(self, story: StoryDraft) -> None:
        self.upserts += 1
        existing = self.stories.get(story.natural_key)
        story_pk = existing.id if existing else str(next(self._ids))
        self.stories[story.natural_key] = NewsStory(id=story_pk, **story.model_dump())

    async def list_story_ids(self, publication: str) -> list[str]:
        return [sid for (pub, sid) in self.stories if pub == publication]

    async def list_story_ids_without_chunks(self, publication: str, version: int) -> list[str]:
        chunked = {
            c.story_id for c in self.chunks.values()
            if c.publication == publication and c.version == version
        }
        return [sid for sid in await self.list_story_ids(publication) if sid not in chunked]

    async def find_story(self, publication: str, story_id: str) -> NewsStory:
        try:
            return self.stories[(publication, story_id)]
        except KeyError:
            raise RecordNotFoundError(f"story {publication}/{story_id} not found") from None

    async def insert_chunk(self, chunk: ChunkDraft) -> str:
        if chunk.story_key not in self.stories:
            raise RecordNotFoundError(f"story {chunk.publication}/{chunk.story_id} not found")
        chunk_id = str(next(self._ids))
        self.chunks[chunk_id] = NewsStoryChunk(id=chunk_id, **chunk.model_dump())
        return chunk_id

    async def insert_chunks(self, chunks: list[ChunkDraft]) -> list[str]:
        for chunk in chunks:
            if chunk.story_key not in self.stories:
                raise RecordNotFoundError(f"story {chunk.publication}/{chunk.story_id} not found")
        return [await self.insert_chunk(chunk) for chunk in chunks]

    async def insert_embedding(self, chunk_id: str, embedding: list[float]) -> None:
        chunk = await self.find_chunk(chunk_id)
        self.chunks[chunk_id] = chunk.model_copy(update={"embedding": embedding})

    async def list_chunks(
        self, publication: str, story_id: str, version: int
    ) -> list[NewsStoryChunk]:
        return sorted(
            (
                c for c in self.chunks.values()
                if c.story_key == (publication, story_id) and c.version == version
            ),
            key=lambda c: c.index,
        )

    async def find_chunk(self, chunk_id: str) -> NewsStoryChunk:
        try:
            return self.chunks[chunk_id]
        except KeyError:
            raise RecordNotFoundError(f"chunk {chunk_id} not found") from None


class FakeNewsSource(INewsSource):
    """Source serving pre-built drafts; ``failures`` maps item ids to raise counts."""

    def __init__(
        self,
        drafts: list[StoryDraft] | None = None,
        failures: dict[str, int] | None = None,
    ) -> None:
        self.drafts = {d.story_id: d for d in drafts or []}
        self.failures = dict(failures or {})
        self.fetch_calls: list[str] = []

    async def list_latest(self, n: int) -> list[LatestItem]:
        return [LatestItem(id=sid) for sid in list(self.drafts)[:n]]

    async def get_story(self, item_id: str) -> StoryDraft:
        self.fetch_calls.append(item_id)
        if self.failures.get(item_id, 0) > 0:
            self.failures[item_id] -= 1
            raise ConnectionError(f"transient failure for {item_id}")
        return self.drafts[item_id]

    def get_provider_name(self) -> str:
        return "fake"


class FakeEmbeddingProvider(IEmbeddingProvider):
    """Returns a fixed vector per text; ``vectors`` overrides by exact text."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, empty: bool = False) -> None:
        self.vectors = dict(vectors or {})
        self.empty = empty
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.empty:
            raise EmbeddingError("provider returned no embedding", provider_name="fake")
        return self.vectors.get(text, [1.0, 0.0, 0.0])

    def get_provider_name(self) -> str:
        return "fake_embedding"

    def is_available(self) -> bool:
        return True


class FakeLLMProvider(ILLMProvider):
    """Records prompts; answers with ``answer`` or streams ``deltas``."""

    def __init__(
        self,
        answer: str = "Vastaus.",
        deltas: list[str] | None = None,
        fail_after: int | None = None,
    ) -> None:
        self.answer = answer
        self.deltas = list(deltas if deltas is not None else ["Vas", "taus", "."])
        self.fail_after = fail_after
        self.calls: list[tuple[list[ChatMessage], GenerationParams | None]] = []

    async def complete(
        self, messages: list[ChatMessage], params: GenerationParams | None = None
    ) -> str:
        self.calls.append((messages, params))
        return self.answer

    async def stream(
        self, messages: list[ChatMessage], params: GenerationParams | None = None
    ) -> AsyncIterator[str]:
        self.calls.append((messages, params))
        for i, delta in enumerate(self.deltas):
            if self.fail_after is not None and i >= self.fail_after:
                raise LLMError("malformed stream increment", provider_name="fake")
            yield delta

    def get_provider_name(self) -> str:
        return "fake_llm"

    def is_available(self) -> bool:
        return True


class FakeVectorIndex(IVectorIndex):
    """Returns a canned ranking regardless of the query vector."""

    def __init__(self, matches: list[VectorMatch] | None = None) -> None:
        self.matches = list(matches or [])
        self.calls: list[tuple[list[float], float, int]] = []

    async def search(
        self, query_vector: list[float], threshold: float, count: int
    ) -> list[VectorMatch]:
        self.calls.append((query_vector, threshold, count))
        return [m for m in self.matches if m.similarity >= threshold][:count]

    def get_provider_name(self) -> str:
        return "fake_index"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _uncached_loggers() -> None:
    """Resolve sys.stdout per log call so capsys streams never outlive their test."""
    structlog.configure(cache_logger_on_first_use=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="sk-test",
        openai_base_url="",
        scrape_retry_delay_seconds=0.0,
        database_path=":memory:",
    )


@pytest.fixture
def store() -> InMemoryStoryStore:
    return InMemoryStoryStore()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "newsrag-test.db"


def make_context(
    settings: Settings,
    store: IStoryStore,
    sources: dict[str, INewsSource] | None = None,
    embedding_provider: IEmbeddingProvider | None = None,
    llm: ILLMProvider | None = None,
    vector_index: IVectorIndex | None = None,
) -> PipelineContext:
    """Build a PipelineContext around fakes."""
    sources = sources if sources is not None else {"test": FakeNewsSource()}
    embedding_provider = embedding_provider or FakeEmbeddingProvider()
    llm = llm or FakeLLMProvider()
    vector_index = vector_index or FakeVectorIndex()
    scraper, chunker, embedder, search = build_services(
        settings, store, vector_index, embedding_provider, llm, sources
    )
    return PipelineContext(
        settings=settings,
        store=store,
        vector_index=vector_index,
        embedding_provider=embedding_provider,
        llm=llm,
        sources=sources,
        scraper=scraper,
        chunker=chunker,
        embedder=embedder,
        search=search,
    )
