"""RSS-backed news source using httpx, ElementTree, and BeautifulSoup.

Lists the latest items of an RSS 2.0 feed and extracts each article's
content blocks from its HTML page:

    <h1>       → headline
    <h2>, <h3> → heading
    <p>        → text

Item identifiers are the article URLs themselves, so the natural key of
a scraped story is ``(publication, article_url)``.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import datetime, timezone

import httpx
import structlog
from bs4 import BeautifulSoup, Tag

from newsrag.interfaces.news_source import INewsSource
from newsrag.models.content import BlockKind, ContentBlock
from newsrag.models.story import LatestItem, StoryDraft
from newsrag.utils.errors import SourceFetchError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 10.0
_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; newsrag/0.1)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

_TAG_KINDS: dict[str, BlockKind] = {
    "h1": BlockKind.HEADLINE,
    "h2": BlockKind.HEADING,
    "h3": BlockKind.HEADING,
    "p": BlockKind.TEXT,
}


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _meta_content(soup: BeautifulSoup, prop: str) -> str | None:
    tag = soup.find("meta", attrs={"property": prop})
    if isinstance(tag, Tag):
        content = tag.get("content")
        if isinstance(content, str):
            return content
    return None


def extract_blocks(html: str) -> list[ContentBlock]:
    """Map the article markup in *html* to content blocks in document order."""
    soup = BeautifulSoup(html, "html.parser")
    root = soup.find("article") or soup.body or soup
    blocks: list[ContentBlock] = []
    for element in root.find_all(list(_TAG_KINDS)):
        text = " ".join(element.get_text(" ", strip=True).split())
        if text:
            blocks.append(ContentBlock(kind=_TAG_KINDS[element.name], text=text))
    return blocks


class RssNewsSource(INewsSource):
    """Content source reading one publication's RSS feed.

    Parameters
    ----------
    publication:
        Publication name stamped on fetched stories.
    feed_url:
        URL of the RSS 2.0 feed.
    http_client:
        Shared ``httpx.AsyncClient``; a private one is created when omitted.
    """

    def __init__(
        self,
        publication: str,
        feed_url: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._publication = publication
        self._feed_url = feed_url
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(_DEFAULT_TIMEOUT),
            headers=_DEFAULT_HEADERS,
            follow_redirects=True,
        )

    async def list_latest(self, n: int) -> list[LatestItem]:
        response = await self._get(self._feed_url)
        try:
            root = ET.fromstring(response.content)
        except ET.ParseError as exc:
            raise SourceFetchError(
                message=f"Malformed feed at {self._feed_url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        items: list[LatestItem] = []
        for item in root.iter("item"):
            link = (item.findtext("link") or item.findtext("guid") or "").strip()
            if link:
                items.append(LatestItem(id=link))
            if len(items) >= n:
                break

        logger.info("rss_feed_listed", publication=self._publication, items=len(items))
        return items

    async def get_story(self, item_id: str) -> StoryDraft:
        response = await self._get(item_id)
        html = response.text
        soup = BeautifulSoup(html, "html.parser")

        canonical = soup.find("link", attrs={"rel": "canonical"})
        href = item_id
        if isinstance(canonical, Tag) and isinstance(canonical.get("href"), str):
            href = canonical["href"]

        published_at = _parse_timestamp(_meta_content(soup, "article:published_time"))
        updated_at = _parse_timestamp(_meta_content(soup, "article:modified_time"))

        return StoryDraft(
            publication=self._publication,
            story_id=item_id,
            href=href,
            content=extract_blocks(html),
            published_at=published_at or datetime.now(tz=timezone.utc),
            updated_at=updated_at,
        )

    def get_provider_name(self) -> str:
        return "rss"

    async def _get(self, url: str) -> httpx.Response:
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise SourceFetchError(
                message=f"Timeout fetching {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise SourceFetchError(
                message=f"HTTP {exc.response.status_code} for {url}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceFetchError(
                message=f"HTTP error fetching {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return response
