"""Unit tests for the pipeline CLI."""

from __future__ import annotations

import asyncio

import pytest

from newsrag.cli.stages import main
from newsrag.models.story import ChunkDraft, VectorMatch
from tests.conftest import (
    FakeLLMProvider,
    FakeNewsSource,
    FakeVectorIndex,
    InMemoryStoryStore,
    make_context,
    make_draft,
    text_block,
)


@pytest.fixture
def cli_store() -> InMemoryStoryStore:
    return InMemoryStoryStore()


class TestCli:
    def test_scrape_chunk_embed(self, settings, cli_store, capsys) -> None:
        source = FakeNewsSource([make_draft("a"), make_draft("b")])

        def ctx():
            return make_context(settings, cli_store, sources={"test": source})

        assert main(["scrape", "--publication", "test", "--limit", "5"], context=ctx()) == 0
        assert main(["chunk", "--publication", "test", "--version", "1",
                     "--words-per-chunk", "15"], context=ctx()) == 0
        assert main(["embed", "--publication", "test", "--version", "1"], context=ctx()) == 0

        assert len(cli_store.stories) == 2
        assert cli_store.chunks and all(c.embedding for c in cli_store.chunks.values())
        out = capsys.readouterr().out
        assert "Scrape complete" in out and "Embedding complete" in out

    def test_unknown_publication_reports_error(self, settings, cli_store, capsys) -> None:
        code = main(["scrape", "--publication", "nope"], context=make_context(settings, cli_store))

        assert code == 1
        assert "invalid news story data source" in capsys.readouterr().err

    def test_ask_prints_answer_and_stories(self, settings, cli_store, capsys) -> None:
        async def seed() -> str:
            await cli_store.upsert_story(make_draft("a", headline="Otsikko A"))
            return await cli_store.insert_chunk(ChunkDraft(
                publication="test", story_id="a", version=1, index=0,
                content=[text_block("alpha")],
            ))

        chunk_id = asyncio.run(seed())
        context = make_context(
            settings, cli_store,
            llm=FakeLLMProvider(answer="Vastaus."),
            vector_index=FakeVectorIndex([VectorMatch(id=chunk_id, similarity=0.9)]),
        )

        assert main(["ask", "Mitä tapahtui eilen?"], context=context) == 0

        out = capsys.readouterr().out
        assert "Vastaus." in out
        assert "Otsikko A" in out

    def test_ask_stream(self, settings, cli_store, capsys) -> None:
        context = make_context(settings, cli_store, llm=FakeLLMProvider(deltas=["Va", "staus"]))

        assert main(["ask", "--stream", "Mitä tapahtui eilen?"], context=context) == 0

        assert "Vastaus" in capsys.readouterr().out

    def test_short_query_is_an_error(self, settings, cli_store, capsys) -> None:
        code = main(["ask", "lyhyt"], context=make_context(settings, cli_store))
        assert code == 1
        assert "at least 8 characters" in capsys.readouterr().err

    def test_no_command_prints_help(self, capsys) -> None:
        assert main([]) == 1

    def test_ask_stream_failure_exits_nonzero(self, settings, cli_store, capsys) -> None:
        llm = FakeLLMProvider(deltas=["Va", "staus"], fail_after=1)
        context = make_context(settings, cli_store, llm=llm)

        assert main(["ask", "--stream", "Mitä tapahtui eilen?"], context=context) == 1

        captured = capsys.readouterr()
        assert "Va" in captured.out
        assert "malformed stream increment" in captured.err
