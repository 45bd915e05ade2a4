"""Explicit per-process context holding every pipeline collaborator.

# ─── DEPENDENCY ASSEMBLY ──────────────────────────────────────────────
#
# build_context() is the single place where concrete providers are
# constructed and handed to the stage services:
#
#   Settings ──┬─> SQLiteStoryStore ──┬─> ScraperService
#              ├─> SQLiteVectorIndex  ├─> ChunkerService
#              ├─> OpenAIEmbedding... ├─> EmbedderService
#              ├─> OpenAILLMProvider  └─> SearchService
#              └─> publications (config.yaml) -> {name: INewsSource}
#
# The FastAPI app stores the context on ``app.state.context``; the CLI
# keeps it in a local variable.  Tests build a PipelineContext directly
# from fakes.  Nothing in the pipeline reads module-level globals.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from newsrag.config.loader import PublicationConfig, load_config, publication_configs
from newsrag.config.settings import Settings
from newsrag.interfaces.embedding_provider import IEmbeddingProvider
from newsrag.interfaces.llm_provider import ILLMProvider
from newsrag.interfaces.news_source import INewsSource
from newsrag.interfaces.story_store import IStoryStore
from newsrag.interfaces.vector_index import IVectorIndex
from newsrag.models.search import GenerationParams
from newsrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from newsrag.providers.llm.openai_provider import OpenAILLMProvider
from newsrag.providers.news.faker_news_source import FakerNewsSource
from newsrag.providers.news.rss_news_source import RssNewsSource
from newsrag.providers.store.sqlite_story_store import SQLiteStoryStore
from newsrag.providers.vector_index.sqlite_vector_index import SQLiteVectorIndex
from newsrag.services.chunker import ChunkerService
from newsrag.services.embedder import EmbedderService
from newsrag.services.scraper import ScraperService
from newsrag.services.search_service import SearchService
from newsrag.utils.errors import ConfigurationError, UnknownPublicationError
from newsrag.utils.logging import get_logger
from newsrag.utils.retry import RetryPolicy

_logger: structlog.BoundLogger = get_logger(__name__)


@dataclass
class PipelineContext:
    """Everything one process needs to run any pipeline stage."""

    settings: Settings
    store: IStoryStore
    vector_index: IVectorIndex
    embedding_provider: IEmbeddingProvider
    llm: ILLMProvider
    sources: dict[str, INewsSource]
    scraper: ScraperService
    chunker: ChunkerService
    embedder: EmbedderService
    search: SearchService
    http_client: httpx.AsyncClient | None = None

    @property
    def publications(self) -> list[str]:
        return sorted(self.sources)

    def require_publication(self, publication: str) -> INewsSource:
        """Return the source of *publication* or raise :class:`UnknownPublicationError`."""
        source = self.sources.get(publication)
        if source is None:
            raise UnknownPublicationError(publication)
        return source

    async def startup(self) -> None:
        await self.store.initialize()

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()


def build_sources(
    publications: dict[str, PublicationConfig],
    http_client: httpx.AsyncClient,
) -> dict[str, INewsSource]:
    """Instantiate one content source per configured publication."""
    sources: dict[str, INewsSource] = {}
    for name, entry in publications.items():
        if entry.type == "faker":
            sources[name] = FakerNewsSource(publication=name)
        elif entry.type == "rss":
            sources[name] = RssNewsSource(
                publication=name,
                feed_url=entry.feed_url or "",
                http_client=http_client,
            )
        else:
            raise ConfigurationError(f"unsupported source type {entry.type!r} for {name!r}")
    return sources


def build_services(
    settings: Settings,
    store: IStoryStore,
    vector_index: IVectorIndex,
    embedding_provider: IEmbeddingProvider,
    llm: ILLMProvider,
    sources: dict[str, INewsSource],
) -> tuple[ScraperService, ChunkerService, EmbedderService, SearchService]:
    """Construct the four stage services from their collaborators and *settings*."""
    scraper = ScraperService(
        store=store,
        sources=sources,
        retry_policy=RetryPolicy(
            max_attempts=settings.scrape_max_attempts,
            delay_seconds=settings.scrape_retry_delay_seconds,
        ),
        concurrency=settings.scrape_concurrency,
        thin_story_max_blocks=settings.thin_story_max_blocks,
    )
    chunker = ChunkerService(store=store, concurrency=settings.chunk_concurrency)
    embedder = EmbedderService(
        store=store,
        embedding_provider=embedding_provider,
        concurrency=settings.embed_concurrency,
    )
    search = SearchService(
        store=store,
        vector_index=vector_index,
        embedding_provider=embedding_provider,
        llm=llm,
        similarity_threshold=settings.search_similarity_threshold,
        top_k=settings.search_top_k,
        word_budget=settings.context_word_budget,
        min_query_length=settings.min_query_length,
        stream_params=GenerationParams(
            temperature=settings.stream_temperature,
            max_tokens=settings.stream_max_tokens,
            stop=["\n\n\n"],
        ),
    )
    return scraper, chunker, embedder, search


def build_context(
    settings: Settings | None = None,
    config: dict[str, Any] | None = None,
) -> PipelineContext:
    """Construct every provider and service for one process."""
    settings = settings or Settings()
    if config is None:
        config = load_config(settings.config_path)

    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers={"User-Agent": "Mozilla/5.0 (compatible; newsrag/0.1)"},
        follow_redirects=True,
    )
    store = SQLiteStoryStore(settings.database_path)
    vector_index = SQLiteVectorIndex(settings.database_path)
    embedding_provider = OpenAIEmbeddingProvider(settings)
    llm = OpenAILLMProvider(settings)
    sources = build_sources(publication_configs(config), http_client)

    scraper, chunker, embedder, search = build_services(
        settings, store, vector_index, embedding_provider, llm, sources
    )

    if not embedding_provider.is_available():
        _logger.warning("openai_api_key_missing", hint="set OPENAI_API_KEY to embed and search")

    _logger.info(
        "pipeline_context_built",
        database=settings.database_path,
        publications=sorted(sources),
        chat_model=settings.openai_chat_model,
        embedding_model=settings.openai_embedding_model,
    )
    return PipelineContext(
        settings=settings,
        store=store,
        vector_index=vector_index,
        embedding_provider=embedding_provider,
        llm=llm,
        sources=sources,
        scraper=scraper,
        chunker=chunker,
        embedder=embedder,
        search=search,
        http_client=http_client,
    )
