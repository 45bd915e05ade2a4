"""Pydantic request/response schemas for the newsrag HTTP API.

Request schemas end with "Request", response schemas with "Response".
Malformed request bodies are rejected by FastAPI with a 422 before any
route code runs.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from newsrag.models.search import CitedStory, SearchAnswer
from newsrag.utils.concurrency import ItemOutcome, PoolReport


class ScrapeRequest(BaseModel):
    """Scrape the latest stories of one publication."""

    publication: str = Field(..., min_length=1)
    limit: int = Field(..., ge=1, le=1000, description="How many latest items to list.")


class ChunkRequest(BaseModel):
    """Chunk stored stories at a chunking version."""

    publication: str = Field(..., min_length=1)
    version: int = Field(..., ge=0)
    words_per_chunk: int = Field(..., ge=1)


class EmbedRequest(BaseModel):
    """Embed the chunks of one publication at a chunking version."""

    publication: str = Field(..., min_length=1)
    version: int = Field(..., ge=0)


class StageReport(BaseModel):
    """Per-outcome item counts of one stage run."""

    total: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0

    @classmethod
    def from_pool_report(cls, report: PoolReport) -> "StageReport":
        return cls(
            total=report.total,
            succeeded=report.count(ItemOutcome.SUCCEEDED),
            skipped=report.count(ItemOutcome.SKIPPED),
            failed=report.count(ItemOutcome.FAILED),
        )


class OkResponse(BaseModel):
    """Acknowledgement returned by the data stage endpoints."""

    ok: bool = True
    report: StageReport | None = None


class CitedStoryResponse(BaseModel):
    publication: str
    headline: str
    href: str

    @classmethod
    def from_model(cls, story: CitedStory) -> "CitedStoryResponse":
        return cls(publication=story.publication, headline=story.headline, href=story.href)


class SearchResponse(BaseModel):
    """Batch answer plus the stories it drew on."""

    answer: str
    stories: list[CitedStoryResponse] = Field(default_factory=list)

    @classmethod
    def from_model(cls, result: SearchAnswer) -> "SearchResponse":
        return cls(
            answer=result.answer,
            stories=[CitedStoryResponse.from_model(story) for story in result.stories],
        )


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    publications: list[str]
    providers: dict[str, bool] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    ok: bool = False
    error: str
    detail: str | None = None
