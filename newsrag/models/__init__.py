"""newsrag domain models - re-exports all public model classes.

    - content.py - content blocks and the helpers shared by every stage
    - story.py   - stories, chunks, source listings, vector matches
    - search.py  - generation messages/params and search results
"""

from __future__ import annotations

from newsrag.models.content import (
    BlockKind,
    ContentBlock,
    headline_of,
    render_block,
    to_markdown,
    word_count,
)
from newsrag.models.search import (
    ChatMessage,
    ChatRole,
    CitedStory,
    ContextSource,
    GenerationParams,
    SearchAnswer,
)
from newsrag.models.story import (
    ChunkDraft,
    LatestItem,
    NewsStory,
    NewsStoryChunk,
    StoryDraft,
    VectorMatch,
)

__all__ = [
    "BlockKind",
    "ChatMessage",
    "ChatRole",
    "ChunkDraft",
    "CitedStory",
    "ContentBlock",
    "ContextSource",
    "GenerationParams",
    "LatestItem",
    "NewsStory",
    "NewsStoryChunk",
    "SearchAnswer",
    "StoryDraft",
    "VectorMatch",
    "headline_of",
    "render_block",
    "to_markdown",
    "word_count",
]
