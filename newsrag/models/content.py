"""Content blocks -- the ordered building blocks of every story and chunk.

A story's body is a sequence of :class:`ContentBlock` objects in reading
order.  The same sequence type is reused for chunks, so every helper here
(word counting, markdown rendering, headline lookup) works on both.

Blocks are stored and exchanged as ``{"type": "...", "text": "..."}``;
in Python the discriminator is exposed as ``kind`` to avoid shadowing the
``type`` builtin.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, NoReturn

from pydantic import BaseModel, ConfigDict, Field


class BlockKind(str, Enum):
    """Closed set of content block kinds."""

    HEADLINE = "headline"
    HEADING = "heading"
    TEXT = "text"


class ContentBlock(BaseModel):
    """A single block of story content."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: BlockKind = Field(alias="type", description="Block kind (serialized as 'type').")
    text: str = Field(description="Raw block text.")

    def to_json(self) -> dict[str, str]:
        return self.model_dump(mode="json", by_alias=True)


def _assert_never(value: NoReturn) -> NoReturn:
    # Reaching this means a BlockKind member has no rendering rule.
    raise ValueError(f"unhandled content block kind: {value!r}")


def word_count(blocks: Iterable[ContentBlock]) -> int:
    """Return the number of words in *blocks*.

    Each block's text is split on a single literal space, with no
    whitespace or punctuation normalisation: ``"a  b"`` counts as three
    words and an empty block counts as one.
    """
    return sum(len(block.text.split(" ")) for block in blocks)


def render_block(block: ContentBlock) -> str:
    """Render one block as a markdown line."""
    kind = block.kind
    match kind:
        case BlockKind.HEADLINE:
            return f"# {block.text}"
        case BlockKind.HEADING:
            return f"## {block.text}"
        case BlockKind.TEXT:
            return block.text
        case _:
            _assert_never(kind)


def to_markdown(blocks: Iterable[ContentBlock]) -> str:
    """Render *blocks* as markdown, separated by blank lines."""
    return "\n\n".join(render_block(block) for block in blocks)


def headline_of(blocks: Iterable[ContentBlock]) -> str:
    """Return the text of the first headline block, or ``""`` if there is none."""
    for block in blocks:
        if block.kind is BlockKind.HEADLINE:
            return block.text
    return ""
