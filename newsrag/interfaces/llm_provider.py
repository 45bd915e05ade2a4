"""Abstract base class for LLM generation providers.

One generation capability with two result shapes: :meth:`complete`
returns the finished text, :meth:`stream` yields text deltas lazily as the
provider produces them.  Callers pick the shape they need.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator

from newsrag.models.search import ChatMessage, GenerationParams


# Concrete implementation: OpenAILLMProvider (newsrag/providers/llm/)
class ILLMProvider(ABC):
    """Contract for chat-style generation services used by the search service."""

    @abstractmethod
    async def complete(
        self,
        messages: list[ChatMessage],
        params: GenerationParams | None = None,
    ) -> str:
        """Generate a single completed answer for the conversation.

        Raises
        ------
        newsrag.utils.errors.LLMError
            If the API call fails.
        """

    @abstractmethod
    def stream(
        self,
        messages: list[ChatMessage],
        params: GenerationParams | None = None,
    ) -> AsyncIterator[str]:
        """Generate the answer as a stream of text deltas.

        Implementations are async generators: nothing is sent to the
        provider until the first delta is requested.

        Raises
        ------
        newsrag.utils.errors.LLMError
            If the API call fails or an increment is malformed; the stream
            ends at that point.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this LLM provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured (credentials present)."""
