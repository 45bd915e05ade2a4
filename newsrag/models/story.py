"""Story and chunk domain models.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph - no imports from upper layers).
#
#   StoryDraft      - a story as a content source delivers it (no storage id)
#   NewsStory       - a persisted story; natural key (publication, story_id)
#   ChunkDraft      - a chunk about to be inserted by the chunker
#   NewsStoryChunk  - a persisted chunk; embedding is None until embedded
#   LatestItem      - lightweight identifier returned by a source listing
#   VectorMatch     - one ranked hit from the vector index
#
# All models are frozen.  The only mutation in the pipeline is a chunk's
# embedding going from None to a vector, and that happens in the store,
# never on the Python object.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from newsrag.models.content import ContentBlock


class StoryDraft(BaseModel):
    """A story fetched from a content source, before it is stored."""

    model_config = ConfigDict(frozen=True)

    publication: str = Field(description="Source identifier; part of the natural key.")
    story_id: str = Field(description="Source-assigned identifier; part of the natural key.")
    href: str = Field(description="Canonical URL of the story.")
    content: list[ContentBlock] = Field(default_factory=list, description="Blocks in reading order.")
    published_at: datetime
    updated_at: datetime | None = None

    @property
    def natural_key(self) -> tuple[str, str]:
        return (self.publication, self.story_id)


class NewsStory(StoryDraft):
    """A story as stored in the story store."""

    id: str = Field(description="Storage-assigned surrogate key.")


class ChunkDraft(BaseModel):
    """A contiguous, word-budgeted slice of a story's content."""

    model_config = ConfigDict(frozen=True)

    publication: str
    story_id: str
    version: int = Field(description="Chunking scheme/run that produced this chunk.")
    index: int = Field(ge=0, description="Zero-based position within the story for this version.")
    content: list[ContentBlock] = Field(default_factory=list)
    embedding: list[float] | None = None

    @property
    def story_key(self) -> tuple[str, str]:
        return (self.publication, self.story_id)


class NewsStoryChunk(ChunkDraft):
    """A chunk as stored in the story store."""

    id: str = Field(description="Storage-assigned surrogate key.")

    @property
    def has_embedding(self) -> bool:
        return self.embedding is not None


class LatestItem(BaseModel):
    """Identifier of a recent item as listed by a content source."""

    model_config = ConfigDict(frozen=True)

    id: str


class VectorMatch(BaseModel):
    """A chunk id ranked by similarity to a query vector."""

    model_config = ConfigDict(frozen=True)

    id: str
    similarity: float
