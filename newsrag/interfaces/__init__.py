"""Public interface definitions for all external collaborators.

Every external service the pipeline touches is accessed exclusively
through the abstract base classes defined here.  Concrete adapters live in
``newsrag/providers/`` and are wired together once per process in
``newsrag/pipeline/context.py``; tests inject fakes instead.

CONCRETE PROVIDER MAP:
    Interface             →  Concrete implementations (in newsrag/providers/)
    ─────────────────────────────────────────────────────────────────────
    INewsSource           →  FakerNewsSource, RssNewsSource
    IStoryStore           →  SQLiteStoryStore
    IVectorIndex          →  SQLiteVectorIndex
    IEmbeddingProvider    →  OpenAIEmbeddingProvider
    ILLMProvider          →  OpenAILLMProvider
"""

from newsrag.interfaces.embedding_provider import IEmbeddingProvider
from newsrag.interfaces.llm_provider import ILLMProvider
from newsrag.interfaces.news_source import INewsSource
from newsrag.interfaces.story_store import IStoryStore
from newsrag.interfaces.vector_index import IVectorIndex

__all__ = [
    "IEmbeddingProvider",
    "ILLMProvider",
    "INewsSource",
    "IStoryStore",
    "IVectorIndex",
]
