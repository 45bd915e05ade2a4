"""Abstract base class for the durable story store.

# ─── ADAPTER PATTERN ─────────────────────────────────────────────────
#
# The story store is the only mutable shared resource in the pipeline:
# every stage reads and writes through it, and no in-memory state is
# shared between stages.  The concrete implementation is SQLiteStoryStore
# (newsrag/providers/store/sqlite_story_store.py).
#
# All operations are async so a network-backed relational store can be
# swapped in without touching the stage services.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from newsrag.models.story import ChunkDraft, NewsStory, NewsStoryChunk, StoryDraft


class IStoryStore(ABC):
    """Contract for keyed storage of stories, chunks, and chunk embeddings."""

    # ── Lifecycle ──────────────────────────────────────────────────────

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables/indices if they don't exist.  Called at startup."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""

    # ── Stories ────────────────────────────────────────────────────────

    @abstractmethod
    async def upsert_story(self, story: StoryDraft) -> None:
        """Insert *story* or update the row with the same natural key.

        The natural key is ``(publication, story_id)``; repeated upserts
        never create a second row.
        """

    @abstractmethod
    async def list_story_ids(self, publication: str) -> list[str]:
        """Return the source-assigned ids of every stored story of *publication*."""

    @abstractmethod
    async def list_story_ids_without_chunks(self, publication: str, version: int) -> list[str]:
        """Return story ids of *publication* that have no chunk at *version*."""

    @abstractmethod
    async def find_story(self, publication: str, story_id: str) -> NewsStory:
        """Return the story with the given natural key.

        Raises
        ------
        newsrag.utils.errors.RecordNotFoundError
            If no such story exists.
        """

    # ── Chunks ─────────────────────────────────────────────────────────

    @abstractmethod
    async def insert_chunk(self, chunk: ChunkDraft) -> str:
        """Persist *chunk* under its parent story and return the new chunk id.

        Raises
        ------
        newsrag.utils.errors.RecordNotFoundError
            If the parent story does not exist.
        """

    @abstractmethod
    async def insert_chunks(self, chunks: list[ChunkDraft]) -> list[str]:
        """Persist *chunks* atomically and return their ids in input order.

        Either every chunk is stored or none is, so a failed batch leaves
        the story without chunks at that version.

        Raises
        ------
        newsrag.utils.errors.RecordNotFoundError
            If a parent story does not exist.
        """

    @abstractmethod
    async def insert_embedding(self, chunk_id: str, embedding: list[float]) -> None:
        """Store *embedding* on the chunk identified by *chunk_id*."""

    @abstractmethod
    async def list_chunks(
        self, publication: str, story_id: str, version: int
    ) -> list[NewsStoryChunk]:
        """Return the story's chunks at *version*, ordered by index."""

    @abstractmethod
    async def find_chunk(self, chunk_id: str) -> NewsStoryChunk:
        """Return the chunk with surrogate key *chunk_id*.

        Raises
        ------
        newsrag.utils.errors.RecordNotFoundError
            If no such chunk exists.
        """
