"""Unit tests for SQLiteVectorIndex and the cosine helper."""

from __future__ import annotations

import numpy as np
import pytest

from newsrag.models.story import ChunkDraft
from newsrag.providers.store.sqlite_story_store import SQLiteStoryStore
from newsrag.providers.vector_index.sqlite_vector_index import (
    SQLiteVectorIndex,
    cosine_similarities,
)
from newsrag.utils.errors import StorageError
from tests.conftest import make_draft, text_block


@pytest.fixture
async def seeded(db_path) -> dict[str, str]:
    store = SQLiteStoryStore(db_path)
    await store.initialize()
    await store.upsert_story(make_draft("a"))
    vectors = {
        "same": [1.0, 0.0],
        "close": [0.9, 0.1],
        "orthogonal": [0.0, 1.0],
        "pending": None,
    }
    ids: dict[str, str] = {}
    for index, (name, vector) in enumerate(vectors.items()):
        ids[name] = await store.insert_chunk(ChunkDraft(
            publication="test", story_id="a", version=1, index=index,
            content=[text_block(name)],
        ))
        if vector is not None:
            await store.insert_embedding(ids[name], vector)
    return ids


class TestCosineSimilarities:
    def test_known_values(self) -> None:
        matrix = np.array([[1.0, 0.0], [0.0, 2.0], [-3.0, 0.0]])
        scores = cosine_similarities(matrix, np.array([1.0, 0.0]))
        assert scores.tolist() == pytest.approx([1.0, 0.0, -1.0])

    def test_zero_vectors_score_zero(self) -> None:
        scores = cosine_similarities(np.array([[0.0, 0.0]]), np.array([1.0, 0.0]))
        assert scores.tolist() == [0.0]


class TestSQLiteVectorIndex:
    async def test_ranked_descending_and_thresholded(self, db_path, seeded) -> None:
        matches = await SQLiteVectorIndex(db_path).search([1.0, 0.0], 0.78, 8)

        assert [m.id for m in matches] == [seeded["same"], seeded["close"]]
        assert matches[0].similarity == pytest.approx(1.0)
        assert all(m.similarity >= 0.78 for m in matches)

    async def test_count_truncates(self, db_path, seeded) -> None:
        matches = await SQLiteVectorIndex(db_path).search([1.0, 0.0], -1.0, 2)
        assert [m.id for m in matches] == [seeded["same"], seeded["close"]]

    async def test_unembedded_chunks_never_returned(self, db_path, seeded) -> None:
        matches = await SQLiteVectorIndex(db_path).search([1.0, 0.0], -1.0, 10)
        assert seeded["pending"] not in {m.id for m in matches}
        assert len(matches) == 3

    async def test_dimension_mismatch_skipped(self, db_path, seeded) -> None:
        assert await SQLiteVectorIndex(db_path).search([1.0, 0.0, 0.0], -1.0, 10) == []

    async def test_missing_schema_raises_storage_error(self, db_path) -> None:
        with pytest.raises(StorageError) as exc_info:
            await SQLiteVectorIndex(db_path).search([1.0, 0.0], 0.5, 8)
        assert exc_info.value.provider_name == "sqlite_vector_index"
