"""Brute-force cosine-similarity index over embedded chunks in SQLite.

Reads every chunk whose embedding is set from the story store's database,
stacks the vectors into a numpy matrix and ranks them against the query
vector in a single pass.  There is no separate index to build: a chunk is
searchable as soon as the embed stage writes its vector.
"""

from __future__ import annotations

import json
from pathlib import Path

import aiosqlite
import numpy as np
import structlog

from newsrag.interfaces.vector_index import IVectorIndex
from newsrag.models.story import VectorMatch
from newsrag.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)

_SELECT_EMBEDDED_CHUNKS = """\
SELECT id, embedding FROM story_chunks WHERE embedding IS NOT NULL;
"""


def cosine_similarities(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Return the cosine similarity of every row of *matrix* to *query*.

    Rows (or a query) with zero norm score ``0.0``.
    """
    row_norms = np.linalg.norm(matrix, axis=1)
    query_norm = np.linalg.norm(query)
    denom = row_norms * query_norm
    dots = matrix @ query
    return np.divide(dots, denom, out=np.zeros_like(dots, dtype=np.float64), where=denom > 0)


class SQLiteVectorIndex(IVectorIndex):
    """Similarity search over the ``story_chunks.embedding`` column."""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)

    async def search(
        self,
        query_vector: list[float],
        threshold: float,
        count: int,
    ) -> list[VectorMatch]:
        if count <= 0:
            return []

        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(_SELECT_EMBEDDED_CHUNKS)
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            logger.error("vector_search_failed", error=str(exc))
            raise StorageError(
                message=f"vector search failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        query = np.asarray(query_vector, dtype=np.float64)
        ids: list[str] = []
        vectors: list[list[float]] = []
        for chunk_id, raw in rows:
            vector = json.loads(raw)
            if len(vector) != query.shape[0]:
                logger.warning(
                    "embedding_dimension_mismatch",
                    chunk_id=chunk_id,
                    expected=query.shape[0],
                    got=len(vector),
                )
                continue
            ids.append(str(chunk_id))
            vectors.append(vector)

        if not vectors:
            return []

        scores = cosine_similarities(np.asarray(vectors, dtype=np.float64), query)
        # Stable sort keeps insertion order among equal scores.
        order = np.argsort(-scores, kind="stable")
        matches = [
            VectorMatch(id=ids[i], similarity=float(scores[i]))
            for i in order
            if scores[i] >= threshold
        ][:count]

        logger.debug(
            "vector_search",
            candidates=len(ids),
            matches=len(matches),
            threshold=threshold,
        )
        return matches

    def get_provider_name(self) -> str:
        return "sqlite_vector_index"
