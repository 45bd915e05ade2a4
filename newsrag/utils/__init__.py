"""Utility modules for newsrag.

- **errors** -- Domain exception hierarchy rooted at NewsRagError.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **concurrency** -- bounded-concurrency WorkerPool with per-item outcomes.
- **retry** -- tenacity-backed RetryPolicy for single retryable operations.
"""

# -- Domain exception hierarchy --------------------------------------------
from newsrag.utils.errors import (
    ClientInputError,
    ConfigurationError,
    EmbeddingError,
    InvalidQueryError,
    LLMError,
    NewsRagError,
    RecordNotFoundError,
    SourceFetchError,
    StorageError,
    UnknownPublicationError,
    WorkerPoolError,
)

# -- Structured logging setup ----------------------------------------------
from newsrag.utils.logging import configure_logging, get_logger

# -- Async concurrency helpers ---------------------------------------------
from newsrag.utils.concurrency import ItemOutcome, PoolReport, WorkerPool

# -- Retry ------------------------------------------------------------------
from newsrag.utils.retry import RetryPolicy

__all__ = [
    "ClientInputError",
    "ConfigurationError",
    "EmbeddingError",
    "InvalidQueryError",
    "ItemOutcome",
    "LLMError",
    "NewsRagError",
    "PoolReport",
    "RecordNotFoundError",
    "RetryPolicy",
    "SourceFetchError",
    "StorageError",
    "UnknownPublicationError",
    "WorkerPool",
    "WorkerPoolError",
    "configure_logging",
    "get_logger",
]
