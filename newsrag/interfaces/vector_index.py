"""Abstract base class for vector-similarity search over chunk embeddings.

The index is consulted with a single call per query; building or
refreshing it is implicit in the embed stage (embeddings are written to the
story store and the index reads from there).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from newsrag.models.story import VectorMatch


# Concrete implementation: SQLiteVectorIndex (newsrag/providers/vector_index/)
class IVectorIndex(ABC):
    """Contract for similarity search engines used by the search service."""

    @abstractmethod
    async def search(
        self,
        query_vector: list[float],
        threshold: float,
        count: int,
    ) -> list[VectorMatch]:
        """Return up to *count* chunk ids whose similarity is >= *threshold*.

        Parameters
        ----------
        query_vector:
            Embedding of the user's query.
        threshold:
            Minimum cosine similarity for a chunk to be returned.
        count:
            Maximum number of matches.

        Returns
        -------
        list[VectorMatch]
            Ranked by similarity, descending.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this index."""
