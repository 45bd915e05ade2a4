"""OpenAI-compatible LLM provider adapter.

Wraps the ``openai`` async client to implement :class:`ILLMProvider`.
When a custom ``openai_base_url`` is configured the client points at that
URL instead of the default OpenAI endpoint.

Both result shapes go through ``chat.completions.create``; the streaming
shape passes ``stream=True`` and yields each chunk's content delta.
"""

from __future__ import annotations

from typing import Any, AsyncIterator

import openai
import structlog

from newsrag.config.settings import Settings
from newsrag.interfaces.llm_provider import ILLMProvider
from newsrag.models.search import ChatMessage, GenerationParams
from newsrag.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)


class OpenAILLMProvider(ILLMProvider):
    """LLM provider backed by an OpenAI-compatible chat completions API.

    Uses ``gpt-3.5-turbo`` by default; override with ``OPENAI_CHAT_MODEL``.
    """

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._timeout = settings.openai_timeout_seconds

        client_kwargs: dict = {
            "api_key": self._api_key,
            "timeout": openai.Timeout(self._timeout, connect=5.0),
        }
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._model = settings.openai_chat_model or "gpt-3.5-turbo"
        self._provider_label = (
            "openai-compatible" if settings.openai_base_url else "openai"
        )

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        messages: list[ChatMessage],
        params: GenerationParams | None = None,
    ) -> str:
        """Generate a full answer via the chat completions API."""
        try:
            response = await self._client.chat.completions.create(
                **self._request_kwargs(messages, params)
            )
        except openai.APITimeoutError as exc:
            raise LLMError(
                message=f"{self._provider_label} timed out after {self._timeout:g}s",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not response.choices:
            raise LLMError(
                message=f"{self._provider_label} returned no choices",
                provider_name=self.get_provider_name(),
            )
        content = response.choices[0].message.content
        if content is None:
            raise LLMError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_completion",
            model=self._model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    async def stream(
        self,
        messages: list[ChatMessage],
        params: GenerationParams | None = None,
    ) -> AsyncIterator[str]:
        """Yield the answer's text deltas in arrival order."""
        try:
            response = await self._client.chat.completions.create(
                **self._request_kwargs(messages, params),
                stream=True,
            )
            deltas = 0
            async for chunk in response:
                if not chunk.choices:
                    raise LLMError(
                        message=f"{self._provider_label} sent a stream chunk without choices",
                        provider_name=self.get_provider_name(),
                    )
                text = chunk.choices[0].delta.content
                if text:
                    deltas += 1
                    yield text
        except openai.APIError as exc:
            raise LLMError(
                message=f"{self._provider_label} streaming API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "openai_stream_completed",
            model=self._model,
            provider=self._provider_label,
            deltas=deltas,
        )

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured (doesn't verify it works)."""
        return bool(self._api_key)

    def get_provider_name(self) -> str:
        """Return 'openai' or 'openai-compatible' depending on configuration."""
        return self._provider_label

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _request_kwargs(
        self,
        messages: list[ChatMessage],
        params: GenerationParams | None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": [message.to_openai() for message in messages],
        }
        if params is not None:
            if params.temperature is not None:
                kwargs["temperature"] = params.temperature
            if params.max_tokens is not None:
                kwargs["max_tokens"] = params.max_tokens
            if params.stop:
                kwargs["stop"] = list(params.stop)
        return kwargs
