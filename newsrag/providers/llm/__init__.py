"""LLM provider adapters.

:class:`OpenAILLMProvider` implements ILLMProvider
(newsrag/interfaces/llm_provider.py) for OpenAI and OpenAI-compatible
endpoints.  It is created once per process in newsrag/pipeline/context.py.
"""

from newsrag.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["OpenAILLMProvider"]
