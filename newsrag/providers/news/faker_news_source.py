"""Synthetic news source backed by Faker.

Generates random stories on demand so the whole pipeline can be exercised
without touching a real publication.  Every listing returns fresh UUIDs,
so repeated scrapes keep growing the corpus.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import structlog
from faker import Faker

from newsrag.config.loader import FAKER_PUBLICATION
from newsrag.interfaces.news_source import INewsSource
from newsrag.models.content import BlockKind, ContentBlock
from newsrag.models.story import LatestItem, StoryDraft

logger = structlog.get_logger(logger_name=__name__)

_MIN_BLOCKS = 4
_MAX_BLOCKS = 11


class FakerNewsSource(INewsSource):
    """Content source producing lorem-ipsum stories of 4-11 text blocks.

    Parameters
    ----------
    seed:
        Optional seed for reproducible output (tests).
    publication:
        Publication name stamped on generated stories.
    """

    def __init__(self, seed: int | None = None, publication: str = FAKER_PUBLICATION) -> None:
        self._fake = Faker()
        if seed is not None:
            self._fake.seed_instance(seed)
        self._publication = publication

    async def list_latest(self, n: int) -> list[LatestItem]:
        return [LatestItem(id=str(uuid.uuid4())) for _ in range(max(n, 0))]

    async def get_story(self, item_id: str) -> StoryDraft:
        block_count = self._fake.random_int(min=_MIN_BLOCKS, max=_MAX_BLOCKS)
        content = [
            ContentBlock(kind=BlockKind.TEXT, text=self._fake.paragraph(nb_sentences=2))
            for _ in range(block_count)
        ]
        now = datetime.now(tz=timezone.utc)
        logger.debug("faker_story_generated", story_id=item_id, blocks=block_count)
        return StoryDraft(
            publication=self._publication,
            story_id=item_id,
            href=f"https://example.com/{item_id}",
            content=content,
            published_at=now,
            updated_at=now,
        )

    def get_provider_name(self) -> str:
        return "faker"
