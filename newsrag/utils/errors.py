"""Custom exception hierarchy for newsrag.

All application exceptions inherit from :class:`NewsRagError`, which
carries an optional ``provider_name`` so error handlers can identify which
external collaborator (e.g. "openai", "sqlite_story_store", "rss") caused
the failure.

The hierarchy is organized by pipeline concern:

    NewsRagError  (base -- catch-all for any newsrag error)
    +-- ConfigurationError       (startup / missing config)
    +-- SourceFetchError         (content source listing or fetch failed)
    +-- StorageError             (story store query failed)
    |   +-- RecordNotFoundError  (story or chunk row does not exist)
    +-- EmbeddingError           (embedding provider failure / no vector)
    +-- LLMError                 (generation provider failure / bad stream)
    +-- WorkerPoolError          (one or more workers raised inside a pool)
    +-- ClientInputError         (caller supplied invalid input -> HTTP 4xx)
        +-- InvalidQueryError
        +-- UnknownPublicationError

Item-level scrape failures are retried and logged inside the scraper and
never surface here; everything else propagates to the invoking boundary.
"""

from __future__ import annotations


class NewsRagError(Exception):
    """Base exception for all newsrag errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets for log
    output, e.g. ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Startup / configuration
# ---------------------------------------------------------------------------

class ConfigurationError(NewsRagError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External collaborator errors
# ---------------------------------------------------------------------------

class SourceFetchError(NewsRagError):
    """Raised when a content source cannot list or fetch a story."""

    def __init__(
        self,
        message: str = "Content source fetch failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StorageError(NewsRagError):
    """Raised when a story store operation fails."""

    def __init__(
        self,
        message: str = "Story store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RecordNotFoundError(StorageError):
    """Raised when a story or chunk looked up by key does not exist."""

    def __init__(
        self,
        message: str = "Record not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(NewsRagError):
    """Raised when the embedding provider fails or returns no vector."""

    def __init__(
        self,
        message: str = "Embedding request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(NewsRagError):
    """Raised when a generation call fails or a stream increment is malformed."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration errors
# ---------------------------------------------------------------------------

class WorkerPoolError(NewsRagError):
    """Raised after a worker pool drains when one or more workers raised.

    The first raw exception is chained as ``__cause__``; all of them are
    available on :attr:`errors`.
    """

    def __init__(
        self,
        errors: list[BaseException],
        message: str | None = None,
    ) -> None:
        self._errors = list(errors)
        if message is None:
            first = self._errors[0] if self._errors else None
            message = f"{len(self._errors)} worker(s) failed"
            if first is not None:
                message += f"; first error: {type(first).__name__}: {first}"
        super().__init__(message=message)

    @property
    def errors(self) -> list[BaseException]:
        return list(self._errors)


# ---------------------------------------------------------------------------
# Client input errors (mapped to HTTP 400 at the API boundary)
# ---------------------------------------------------------------------------

class ClientInputError(NewsRagError):
    """Raised when the caller supplied input the pipeline cannot accept."""

    def __init__(self, message: str = "Invalid request") -> None:
        super().__init__(message=message)


class InvalidQueryError(ClientInputError):
    """Raised when a search query is too short to be meaningful."""


class UnknownPublicationError(ClientInputError):
    """Raised when a publication has no registered content source."""

    def __init__(self, publication: str) -> None:
        self.publication = publication
        super().__init__(message=f"invalid news story data source: {publication!r}")
