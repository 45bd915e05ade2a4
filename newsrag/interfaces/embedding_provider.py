"""Abstract base class for text-embedding service providers.

Defines the contract for turning text into a fixed-length vector.  The
vector is opaque to the pipeline beyond its role as a similarity-search
key, so providers are interchangeable as long as the same one is used for
chunks and queries.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OpenAIEmbeddingProvider (newsrag/providers/embedding/)
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by the embedder and search."""

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Generate an embedding vector for *text*.

        Returns
        -------
        list[float]
            The embedding vector.  Every call of one provider and model
            returns vectors of the same length.

        Raises
        ------
        newsrag.utils.errors.EmbeddingError
            If the API call fails or the response carries no vector.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this embedding provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (credentials present)."""
