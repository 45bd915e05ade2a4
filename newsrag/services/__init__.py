"""Pipeline stage services.

    ScraperService  -- source -> stories
    ChunkerService  -- stories -> chunks (per version)
    EmbedderService -- chunks -> embeddings
    SearchService   -- question -> answer (batch or streamed)
"""

from newsrag.services.chunker import ChunkerService, split_into_chunks
from newsrag.services.embedder import EmbedderService
from newsrag.services.scraper import ScraperService
from newsrag.services.search_service import SearchService, take_within_word_budget

__all__ = [
    "ChunkerService",
    "EmbedderService",
    "ScraperService",
    "SearchService",
    "split_into_chunks",
    "take_within_word_budget",
]
