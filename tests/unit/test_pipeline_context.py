"""Unit tests for PipelineContext assembly."""

from __future__ import annotations

import pytest

from newsrag.config.settings import Settings
from newsrag.pipeline.context import build_context
from newsrag.providers.news.faker_news_source import FakerNewsSource
from newsrag.providers.news.rss_news_source import RssNewsSource
from newsrag.providers.store.sqlite_story_store import SQLiteStoryStore
from newsrag.utils.errors import UnknownPublicationError


@pytest.fixture
async def context(tmp_path):
    settings = Settings(
        _env_file=None,
        openai_api_key="sk-test",
        database_path=str(tmp_path / "ctx.db"),
        scrape_concurrency=3,
    )
    config = {
        "publications": {
            "yle": {"type": "rss", "feed_url": "https://feeds.example/yle.rss"},
        },
    }
    ctx = build_context(settings, config)
    yield ctx
    await ctx.aclose()


class TestBuildContext:
    async def test_registry_from_config(self, context) -> None:
        assert context.publications == ["faker", "yle"]
        assert isinstance(context.sources["faker"], FakerNewsSource)
        assert isinstance(context.sources["yle"], RssNewsSource)

    async def test_store_and_services_share_settings(self, context, tmp_path) -> None:
        assert isinstance(context.store, SQLiteStoryStore)
        assert context.store.db_path == tmp_path / "ctx.db"
        assert context.scraper._pool.concurrency == 3

    async def test_require_publication(self, context) -> None:
        assert context.require_publication("yle") is context.sources["yle"]
        with pytest.raises(UnknownPublicationError) as exc_info:
            context.require_publication("hs")
        assert exc_info.value.publication == "hs"

    async def test_faker_end_to_end_scrape_and_chunk(self, context) -> None:
        await context.startup()

        report = await context.scraper.scrape("faker", 3)
        await context.chunker.chunk("faker", version=1, words_per_chunk=30)

        stored = await context.store.list_story_ids("faker")
        assert report.total == 3
        assert len(stored) == 3
        for story_id in stored:
            story = await context.store.find_story("faker", story_id)
            chunks = await context.store.list_chunks("faker", story_id, 1)
            assert [b for c in chunks for b in c.content] == story.content
