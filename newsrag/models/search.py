"""Retrieval and generation models for the search/answer stage."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from newsrag.models.content import ContentBlock


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One message of a generation conversation."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole
    content: str

    def to_openai(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class GenerationParams(BaseModel):
    """Sampling parameters; ``None`` leaves the provider default in place."""

    model_config = ConfigDict(frozen=True)

    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, ge=1)
    stop: list[str] | None = None


class ContextSource(BaseModel):
    """A numbered source handed to the streaming prompt.

    One source per distinct story, carrying the blocks of that story's
    retrieved chunks in ranking order.
    """

    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1)
    href: str
    published_at: datetime
    content: list[ContentBlock] = Field(default_factory=list)


class CitedStory(BaseModel):
    """A story cited alongside a batch answer."""

    model_config = ConfigDict(frozen=True)

    publication: str
    headline: str
    href: str


class SearchAnswer(BaseModel):
    """Result of a batch search: the generated answer and its stories."""

    model_config = ConfigDict(frozen=True)

    answer: str
    stories: list[CitedStory] = Field(default_factory=list)
