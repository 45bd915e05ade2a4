"""Abstract base class for news content sources.

A content source knows one publication: it can list the identifiers of
its most recent items and fetch the full content of a single item.  The
scraper is agnostic to whether the source is synthetic or real.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from newsrag.models.story import LatestItem, StoryDraft


# Concrete implementations: FakerNewsSource, RssNewsSource
# Located in: newsrag/providers/news/
class INewsSource(ABC):
    """Contract for services that deliver news stories for one publication."""

    @abstractmethod
    async def list_latest(self, n: int) -> list[LatestItem]:
        """Return identifiers of the *n* most recent items.

        Only lightweight identifiers are returned; fetching full content
        is a separate, per-item call to :meth:`get_story`.

        Raises
        ------
        newsrag.utils.errors.SourceFetchError
            If the listing cannot be retrieved.
        """

    @abstractmethod
    async def get_story(self, item_id: str) -> StoryDraft:
        """Fetch the full content of the item identified by *item_id*.

        Raises
        ------
        newsrag.utils.errors.SourceFetchError
            If the item cannot be fetched or parsed.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"faker"`` or ``"rss"``."""
