"""FastAPI routes for the newsrag pipeline.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                 Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/data/scrape         PUT     Scrape latest stories of a publication
# /api/data/chunk          PUT     Chunk stored stories at a version
# /api/data/embeddings     PUT     Embed chunks at a version
# /api/search              GET     Batch answer + cited stories
# /api/search/stream       GET     Streamed answer (text/plain)
# /api/health              GET     Health check
#
# Each stage endpoint checks the publication against the registry before
# any pipeline work, so unknown publications fail fast with a 400.  The
# pipeline context is read from app.state (built in main.py's lifespan).
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, AsyncIterator

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import StreamingResponse

from newsrag import __version__
from newsrag.api.schemas import (
    ChunkRequest,
    EmbedRequest,
    HealthResponse,
    OkResponse,
    ScrapeRequest,
    SearchResponse,
    StageReport,
)
from newsrag.pipeline.context import PipelineContext
from newsrag.utils.errors import LLMError
from newsrag.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")


def _get_context(request: Request) -> PipelineContext:
    """Return the pipeline context from application state."""
    return request.app.state.context


ContextDep = Annotated[PipelineContext, Depends(_get_context)]


# ---------------------------------------------------------------------------
# Data stages
# ---------------------------------------------------------------------------


@router.put("/data/scrape", response_model=OkResponse, summary="Scrape latest stories")
async def scrape(body: ScrapeRequest, context: ContextDep) -> OkResponse:
    context.require_publication(body.publication)
    report = await context.scraper.scrape(body.publication, body.limit)
    return OkResponse(report=StageReport.from_pool_report(report))


@router.put("/data/chunk", response_model=OkResponse, summary="Chunk stored stories")
async def chunk(body: ChunkRequest, context: ContextDep) -> OkResponse:
    context.require_publication(body.publication)
    report = await context.chunker.chunk(body.publication, body.version, body.words_per_chunk)
    return OkResponse(report=StageReport.from_pool_report(report))


@router.put("/data/embeddings", response_model=OkResponse, summary="Embed stored chunks")
async def embed(body: EmbedRequest, context: ContextDep) -> OkResponse:
    context.require_publication(body.publication)
    report = await context.embedder.embed(body.publication, body.version)
    return OkResponse(report=StageReport.from_pool_report(report))


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


@router.get("/search", response_model=SearchResponse, summary="Answer a question")
async def search(
    context: ContextDep,
    query: Annotated[str, Query(description="Question about the news.")],
) -> SearchResponse:
    result = await context.search.answer(query)
    return SearchResponse.from_model(result)


@router.get("/search/stream", summary="Answer a question as a text stream")
async def search_stream(
    context: ContextDep,
    query: Annotated[str, Query(description="Question about the news.")],
) -> StreamingResponse:
    # Validation and retrieval run before the response starts, so their
    # errors still become JSON error responses.
    messages = await context.search.prepare_stream(query)

    async def _body() -> AsyncIterator[str]:
        try:
            async for delta in context.search.stream_answer(messages):
                yield delta
        except LLMError as exc:
            # Headers are already sent; re-raising aborts the chunked body.
            _logger.error("search_stream_failed", error=str(exc))
            raise

    return StreamingResponse(_body(), media_type="text/plain; charset=utf-8")


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Application health check")
async def health(context: ContextDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        publications=context.publications,
        providers={
            context.embedding_provider.get_provider_name(): context.embedding_provider.is_available(),
            context.llm.get_provider_name(): context.llm.is_available(),
        },
    )
