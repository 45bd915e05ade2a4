"""Embedding provider implementations.

Only one adapter ships: :class:`OpenAIEmbeddingProvider`, which also
covers OpenAI-compatible endpoints through ``OPENAI_BASE_URL``.
"""

from newsrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OpenAIEmbeddingProvider"]
