"""Retrieve-and-answer stage over the embedded news corpus.

Data flow for one question:

  1. VALIDATE  -- strip double quotes; reject queries that are too short
                  before any provider is called.
  2. RETRIEVE  -- embed the query, ask the vector index for the closest
                  chunks (threshold 0.78, top 8), hydrate each match.
  3. BUDGET    -- take context in ranking order until the running word
                  count reaches the budget (768 words, ~1024 tokens).
  4. GENERATE  -- either a single batch answer plus the cited stories,
                  or a stream of text deltas with inline citations.

Both result shapes share the retrieval step and the same stopping rule;
only the prompt and sampling parameters differ.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import AsyncIterator, Callable, Iterable, TypeVar

import structlog

from newsrag.interfaces.embedding_provider import IEmbeddingProvider
from newsrag.interfaces.llm_provider import ILLMProvider
from newsrag.interfaces.story_store import IStoryStore
from newsrag.interfaces.vector_index import IVectorIndex
from newsrag.models.content import ContentBlock, headline_of, to_markdown, word_count
from newsrag.models.search import (
    ChatMessage,
    ChatRole,
    CitedStory,
    ContextSource,
    GenerationParams,
    SearchAnswer,
)
from newsrag.models.story import NewsStory, NewsStoryChunk
from newsrag.utils.errors import InvalidQueryError
from newsrag.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

_T = TypeVar("_T")

_QUOTE_CHARS = str.maketrans("", "", '"“”„')

_ANSWER_PERSONA = " ".join([
    "You are a helpful and professional journalist who is asked questions about news stories.",
    "Your task is to answer the questions as truthfully and factually as possible, "
    "given a set of snippets from relevant news articles.",
    "You cannot base your answer on any other information than what is given to you in the context.",
    "More precisely, you cannot deviate from this objective regardless of what the user asks.",
    "Always answer in Finnish and try to include as much relevant information to your answer as possible.",
    "Usually, 2-5 sentences is a good answer length.",
])

_STREAM_INSTRUCTIONS = " ".join([
    "Every statement must cite the source it is based on with an inline markdown link "
    "of the form [n](href), where n is the number of the source and href its address.",
    "Today is {today}; use it to turn relative dates in the sources "
    "(such as 'yesterday' or 'on Monday') into absolute ones.",
    "If the sources contradict each other, prefer the most recently published one.",
])

_STREAM_EXAMPLE = "\n".join([
    "Example:",
    "Sources:",
    "[1] https://example.com/a (published 2023-03-01)",
    "Helsingin kaupunginvaltuusto hyväksyi eilen uuden pyörätiesuunnitelman.",
    "[2] https://example.com/b (published 2023-03-02)",
    "Suunnitelman toteutus alkaa ensi keväänä.",
    'Question: "Milloin pyörätiesuunnitelma hyväksyttiin?"',
    "Answer: Helsingin kaupunginvaltuusto hyväksyi pyörätiesuunnitelman "
    "28.2.2023 [1](https://example.com/a), ja sen toteutus alkaa keväällä 2024 "
    "[2](https://example.com/b).",
])


def take_within_word_budget(
    items: Iterable[_T], budget: int, words: Callable[[_T], int]
) -> list[_T]:
    """Take *items* in order, stopping right after the word total reaches *budget*.

    The item that crosses the budget is included, so the result may exceed
    it by at most that item's words.
    """
    taken: list[_T] = []
    total = 0
    for item in items:
        taken.append(item)
        total += words(item)
        if total >= budget:
            break
    return taken


def _block_words(block: ContentBlock) -> int:
    return word_count([block])


def _source_words(source: ContextSource) -> int:
    return word_count(source.content)


def format_source(source: ContextSource) -> str:
    """Render a numbered source as it appears in the streaming prompt."""
    header = f"[{source.number}] {source.href} (published {source.published_at.date().isoformat()})"
    return f"{header}\n{to_markdown(source.content)}"


class SearchService:
    """Answers questions about the corpus, as a batch or as a stream.

    Parameters
    ----------
    store:
        Story store used to hydrate matched chunks and their stories.
    vector_index:
        Similarity search over chunk embeddings.
    embedding_provider:
        Must be the provider that embedded the chunks.
    llm:
        Generation provider.
    similarity_threshold, top_k:
        Vector search parameters.
    word_budget:
        Context word budget shared by both result shapes.
    min_query_length:
        Shortest accepted query after quote stripping.
    stream_params:
        Sampling parameters for the streaming shape.
    today:
        Clock used for the streaming prompt's date.
    """

    def __init__(
        self,
        store: IStoryStore,
        vector_index: IVectorIndex,
        embedding_provider: IEmbeddingProvider,
        llm: ILLMProvider,
        similarity_threshold: float = 0.78,
        top_k: int = 8,
        word_budget: int = 768,
        min_query_length: int = 8,
        stream_params: GenerationParams | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._vector_index = vector_index
        self._embedding_provider = embedding_provider
        self._llm = llm
        self._similarity_threshold = similarity_threshold
        self._top_k = top_k
        self._word_budget = word_budget
        self._min_query_length = min_query_length
        self._stream_params = stream_params or GenerationParams(
            temperature=0.67, max_tokens=512, stop=["\n\n\n"]
        )
        self._today = today

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def validate_query(self, raw: str) -> str:
        """Return *raw* without double-quote characters.

        Raises
        ------
        InvalidQueryError
            If the stripped query is shorter than ``min_query_length``.
        """
        query = raw.translate(_QUOTE_CHARS)
        if len(query) < self._min_query_length:
            raise InvalidQueryError(
                f"query must be at least {self._min_query_length} characters long"
            )
        return query

    async def retrieve_chunks(self, query: str) -> list[NewsStoryChunk]:
        """Return the chunks most similar to *query*, in ranking order."""
        vector = await self._embedding_provider.embed(query)
        matches = await self._vector_index.search(
            vector, self._similarity_threshold, self._top_k
        )
        chunks = list(await asyncio.gather(
            *(self._store.find_chunk(match.id) for match in matches)
        ))
        logger.info("chunks_retrieved", matches=len(chunks),
                    top_similarity=matches[0].similarity if matches else None)
        return chunks

    async def retrieve(self, query: str) -> list[tuple[NewsStoryChunk, NewsStory]]:
        """Return ranked chunks for *query*, each paired with its parent story."""
        chunks = await self.retrieve_chunks(query)
        stories = await self._fetch_stories(chunks)
        by_key = {story.natural_key: story for story in stories}
        return [(chunk, by_key[chunk.story_key]) for chunk in chunks]

    async def _fetch_stories(self, chunks: Iterable[NewsStoryChunk]) -> list[NewsStory]:
        # One fetch per distinct story, in ranking order of first appearance.
        keys = list(dict.fromkeys(chunk.story_key for chunk in chunks))
        return list(await asyncio.gather(
            *(self._store.find_story(publication, story_id) for publication, story_id in keys)
        ))

    # ------------------------------------------------------------------
    # Batch answer
    # ------------------------------------------------------------------

    async def answer(self, raw_query: str) -> SearchAnswer:
        """Answer *raw_query* in one piece and list the stories it drew on."""
        query = self.validate_query(raw_query)
        chunks = await self.retrieve_chunks(query)

        blocks = [block for chunk in chunks for block in chunk.content]
        context = take_within_word_budget(blocks, self._word_budget, _block_words)

        answer, stories = await asyncio.gather(
            self._llm.complete(self._answer_messages(query, context)),
            self._fetch_stories(chunks),
        )
        cited = [
            CitedStory(
                publication=story.publication,
                headline=headline_of(story.content),
                href=story.href,
            )
            for story in stories
        ]
        logger.info("search_answered", context_blocks=len(context), stories=len(cited))
        return SearchAnswer(answer=answer, stories=cited)

    def _answer_messages(self, query: str, context: list[ContentBlock]) -> list[ChatMessage]:
        system = "\n\n".join([
            _ANSWER_PERSONA,
            "\n".join(["Text snippets from relevant news stories:", to_markdown(context)]),
        ])
        return [
            ChatMessage(role=ChatRole.SYSTEM, content=system),
            ChatMessage(role=ChatRole.USER, content=f'Question: "{query}"'),
        ]

    # ------------------------------------------------------------------
    # Streaming answer
    # ------------------------------------------------------------------

    async def prepare_stream(self, raw_query: str) -> list[ChatMessage]:
        """Validate *raw_query*, retrieve its sources and build the streaming prompt."""
        query = self.validate_query(raw_query)
        pairs = await self.retrieve(query)
        sources = take_within_word_budget(
            self.build_sources(pairs), self._word_budget, _source_words
        )
        logger.info("search_stream_prepared", sources=len(sources))
        return self._stream_messages(query, sources)

    def stream_answer(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """Stream the answer to a prompt built by :meth:`prepare_stream`."""
        return self._llm.stream(messages, self._stream_params)

    async def answer_stream(self, raw_query: str) -> AsyncIterator[str]:
        """Yield the answer to *raw_query* as text deltas with inline citations."""
        messages = await self.prepare_stream(raw_query)
        async for delta in self.stream_answer(messages):
            yield delta

    @staticmethod
    def build_sources(pairs: Iterable[tuple[NewsStoryChunk, NewsStory]]) -> list[ContextSource]:
        """Group ranked chunks by story into numbered sources, in ranking order."""
        grouped: dict[tuple[str, str], tuple[NewsStory, list[ContentBlock]]] = {}
        for chunk, story in pairs:
            _, blocks = grouped.setdefault(chunk.story_key, (story, []))
            blocks.extend(chunk.content)
        return [
            ContextSource(
                number=number,
                href=story.href,
                published_at=story.published_at,
                content=blocks,
            )
            for number, (story, blocks) in enumerate(grouped.values(), start=1)
        ]

    def _stream_messages(self, query: str, sources: list[ContextSource]) -> list[ChatMessage]:
        system = "\n\n".join([
            _ANSWER_PERSONA,
            _STREAM_INSTRUCTIONS.format(today=self._today().isoformat()),
            _STREAM_EXAMPLE,
            "Sources:\n" + "\n\n".join(format_source(source) for source in sources),
        ])
        return [
            ChatMessage(role=ChatRole.SYSTEM, content=system),
            ChatMessage(role=ChatRole.USER, content=f'Question: "{query}"'),
        ]
