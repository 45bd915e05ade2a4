"""SQLite-backed story store.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing IStoryStore).
#
# Database: ``data/newsrag.db`` by default.  Two tables:
#
#   stories       - one row per (publication, story_id); content as JSON
#   story_chunks  - one row per (story, version, index); content as JSON,
#                   embedding as a JSON array (NULL until embedded)
#
# Every stage talks to the store through parameterized queries only.
# Concurrent writers touch different natural keys, so the UNIQUE
# constraints plus ON CONFLICT upserts are the only coordination needed.
# A story's chunks for one version are written in a single transaction,
# so a story either has all of them or none.
#
# Uses ``aiosqlite`` for async I/O and ``PRAGMA journal_mode=WAL`` so the
# embedder's readers don't block on the chunker's writers.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite
import structlog

from newsrag.interfaces.story_store import IStoryStore
from newsrag.models.content import ContentBlock
from newsrag.models.story import ChunkDraft, NewsStory, NewsStoryChunk, StoryDraft
from newsrag.utils.errors import RecordNotFoundError, StorageError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/newsrag.db")
# Seconds a writer waits on a locked database before failing.
_BUSY_TIMEOUT = 30.0

# ── Schema DDL ────────────────────────────────────────────────────────

_CREATE_STORIES_TABLE = """\
CREATE TABLE IF NOT EXISTS stories (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    publication   TEXT    NOT NULL,
    story_id      TEXT    NOT NULL,
    href          TEXT    NOT NULL,
    published_at  TEXT    NOT NULL,
    updated_at    TEXT,
    content       TEXT    NOT NULL,
    UNIQUE(publication, story_id)
);
"""

_CREATE_CHUNKS_TABLE = """\
CREATE TABLE IF NOT EXISTS story_chunks (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    story_pk     INTEGER NOT NULL REFERENCES stories(id),
    version      INTEGER NOT NULL,
    chunk_index  INTEGER NOT NULL,
    content      TEXT    NOT NULL,
    embedding    TEXT,
    UNIQUE(story_pk, version, chunk_index)
);
"""

_CREATE_INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_stories_publication ON stories(publication);",
    "CREATE INDEX IF NOT EXISTS idx_chunks_story_version ON story_chunks(story_pk, version);",
]

# ── DML ───────────────────────────────────────────────────────────────

_UPSERT_STORY = """\
INSERT INTO stories (publication, story_id, href, published_at, updated_at, content)
VALUES (?, ?, ?, ?, ?, ?)
ON CONFLICT(publication, story_id)
DO UPDATE SET href = excluded.href,
              published_at = excluded.published_at,
              updated_at = excluded.updated_at,
              content = excluded.content;
"""

_SELECT_STORY_IDS = """\
SELECT story_id FROM stories WHERE publication = ? ORDER BY id;
"""

_SELECT_STORY_IDS_WITHOUT_CHUNKS = """\
SELECT s.story_id
FROM stories s
WHERE s.publication = ?
  AND NOT EXISTS (
      SELECT 1 FROM story_chunks c
      WHERE c.story_pk = s.id AND c.version = ?
  )
ORDER BY s.id;
"""

_SELECT_STORY = """\
SELECT id, publication, story_id, href, published_at, updated_at, content
FROM stories
WHERE publication = ? AND story_id = ?;
"""

_INSERT_CHUNK = """\
INSERT INTO story_chunks (story_pk, version, chunk_index, content, embedding)
SELECT s.id, ?, ?, ?, ?
FROM stories s
WHERE s.publication = ? AND s.story_id = ?;
"""

_UPDATE_EMBEDDING = """\
UPDATE story_chunks SET embedding = ? WHERE id = ?;
"""

_SELECT_CHUNK_COLUMNS = """\
SELECT c.id, s.publication, s.story_id, c.version, c.chunk_index, c.content, c.embedding
FROM story_chunks c
JOIN stories s ON s.id = c.story_pk
"""

_SELECT_CHUNKS = _SELECT_CHUNK_COLUMNS + """\
WHERE s.publication = ? AND s.story_id = ? AND c.version = ?
ORDER BY c.chunk_index ASC;
"""

_SELECT_CHUNK = _SELECT_CHUNK_COLUMNS + """\
WHERE c.id = ?;
"""


def _dump_content(blocks: list[ContentBlock]) -> str:
    return json.dumps([block.to_json() for block in blocks], ensure_ascii=False)


def _load_content(raw: str) -> list[ContentBlock]:
    return [ContentBlock.model_validate(item) for item in json.loads(raw)]


class SQLiteStoryStore(IStoryStore):
    """Story, chunk, and embedding persistence in a single SQLite file."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[aiosqlite.Connection]:
        """Open a connection; driver errors surface as :class:`StorageError`."""
        try:
            async with aiosqlite.connect(str(self._db_path), timeout=_BUSY_TIMEOUT) as db:
                yield db
        except aiosqlite.Error as exc:
            logger.error("story_store_query_failed", operation=operation, error=str(exc))
            raise StorageError(
                message=f"{operation} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def initialize(self) -> None:
        """Create all tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with self._session("initialize") as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute(_CREATE_STORIES_TABLE)
            await db.execute(_CREATE_CHUNKS_TABLE)
            for idx_sql in _CREATE_INDICES:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("story_store_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return "sqlite_story_store"

    # ── Stories ────────────────────────────────────────────────────────

    async def upsert_story(self, story: StoryDraft) -> None:
        async with self._session("upsert_story") as db:
            await db.execute(_UPSERT_STORY, (
                story.publication,
                story.story_id,
                story.href,
                story.published_at.isoformat(),
                story.updated_at.isoformat() if story.updated_at else None,
                _dump_content(story.content),
            ))
            await db.commit()
        logger.debug("story_upserted", publication=story.publication, story_id=story.story_id)

    async def list_story_ids(self, publication: str) -> list[str]:
        async with self._session("list_story_ids") as db:
            cursor = await db.execute(_SELECT_STORY_IDS, (publication,))
            rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def list_story_ids_without_chunks(self, publication: str, version: int) -> list[str]:
        async with self._session("list_story_ids_without_chunks") as db:
            cursor = await db.execute(_SELECT_STORY_IDS_WITHOUT_CHUNKS, (publication, version))
            rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def find_story(self, publication: str, story_id: str) -> NewsStory:
        async with self._session("find_story") as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_STORY, (publication, story_id))
            row = await cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(
                message=f"story {publication}/{story_id} not found",
                provider_name=self.get_provider_name(),
            )
        return self._row_to_story(dict(row))

    # ── Chunks ─────────────────────────────────────────────────────────

    async def insert_chunk(self, chunk: ChunkDraft) -> str:
        (chunk_id,) = await self.insert_chunks([chunk])
        return chunk_id

    async def insert_chunks(self, chunks: list[ChunkDraft]) -> list[str]:
        chunk_ids: list[str] = []
        async with self._session("insert_chunks") as db:
            try:
                for chunk in chunks:
                    cursor = await db.execute(_INSERT_CHUNK, (
                        chunk.version,
                        chunk.index,
                        _dump_content(chunk.content),
                        json.dumps(chunk.embedding) if chunk.embedding is not None else None,
                        chunk.publication,
                        chunk.story_id,
                    ))
                    if cursor.rowcount == 0:
                        raise RecordNotFoundError(
                            message=f"story {chunk.publication}/{chunk.story_id} not found",
                            provider_name=self.get_provider_name(),
                        )
                    chunk_ids.append(str(cursor.lastrowid))
            except Exception:
                # Nothing from a failed batch may become visible.
                await db.rollback()
                raise
            await db.commit()
        return chunk_ids

    async def insert_embedding(self, chunk_id: str, embedding: list[float]) -> None:
        async with self._session("insert_embedding") as db:
            cursor = await db.execute(
                _UPDATE_EMBEDDING, (json.dumps(embedding), self._parse_chunk_id(chunk_id))
            )
            if cursor.rowcount == 0:
                raise RecordNotFoundError(
                    message=f"chunk {chunk_id} not found",
                    provider_name=self.get_provider_name(),
                )
            await db.commit()

    async def list_chunks(
        self, publication: str, story_id: str, version: int
    ) -> list[NewsStoryChunk]:
        async with self._session("list_chunks") as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_CHUNKS, (publication, story_id, version))
            rows = await cursor.fetchall()
        return [self._row_to_chunk(dict(row)) for row in rows]

    async def find_chunk(self, chunk_id: str) -> NewsStoryChunk:
        async with self._session("find_chunk") as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(_SELECT_CHUNK, (self._parse_chunk_id(chunk_id),))
            row = await cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(
                message=f"chunk {chunk_id} not found",
                provider_name=self.get_provider_name(),
            )
        return self._row_to_chunk(dict(row))

    # ── Helpers ────────────────────────────────────────────────────────

    def _parse_chunk_id(self, chunk_id: str) -> int:
        try:
            return int(chunk_id)
        except (TypeError, ValueError) as exc:
            raise RecordNotFoundError(
                message=f"chunk {chunk_id!r} not found",
                provider_name=self.get_provider_name(),
            ) from exc

    @staticmethod
    def _row_to_story(row: dict[str, Any]) -> NewsStory:
        return NewsStory(
            id=str(row["id"]),
            publication=row["publication"],
            story_id=row["story_id"],
            href=row["href"],
            content=_load_content(row["content"]),
            published_at=datetime.fromisoformat(row["published_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]) if row["updated_at"] else None,
        )

    @staticmethod
    def _row_to_chunk(row: dict[str, Any]) -> NewsStoryChunk:
        return NewsStoryChunk(
            id=str(row["id"]),
            publication=row["publication"],
            story_id=row["story_id"],
            version=row["version"],
            index=row["chunk_index"],
            content=_load_content(row["content"]),
            embedding=json.loads(row["embedding"]) if row["embedding"] else None,
        )
