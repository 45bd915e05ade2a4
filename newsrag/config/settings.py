"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# Values are read from (highest priority first):
#
#   1. Environment variables - e.g. OPENAI_API_KEY=sk-abc123
#   2. .env file in the working directory
#   3. The defaults below
#
# Field ``openai_api_key`` maps to env var ``OPENAI_API_KEY``.
#
# Pipeline tunables (concurrency caps, retry policy, retrieval budget)
# live here too, so the constants the pipeline was designed around are
# defaults rather than hard-coded values.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """newsrag application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Model provider ===
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (empty = api.openai.com)
    openai_chat_model: str = "gpt-3.5-turbo"
    openai_embedding_model: str = "text-embedding-ada-002"
    openai_timeout_seconds: float = 60.0

    # === Storage ===
    database_path: str = "data/newsrag.db"
    config_path: str = "config/config.yaml"

    # === Scrape stage ===
    scrape_concurrency: int = Field(default=8, ge=1)
    scrape_max_attempts: int = Field(default=3, ge=1)
    scrape_retry_delay_seconds: float = Field(default=0.5, ge=0.0)
    # Stories with this many content blocks or fewer are discarded as too thin.
    thin_story_max_blocks: int = Field(default=3, ge=0)
    http_timeout_seconds: float = 10.0

    # === Chunk / embed stages ===
    chunk_concurrency: int = Field(default=8, ge=1)
    embed_concurrency: int = Field(default=64, ge=1)

    # === Retrieval / answer ===
    search_top_k: int = Field(default=8, ge=1)
    search_similarity_threshold: float = 0.78
    # ~1024 tokens of context at ~0.75 words per token.
    context_word_budget: int = Field(default=768, ge=1)
    min_query_length: int = Field(default=8, ge=1)
    stream_temperature: float = 0.67
    stream_max_tokens: int = Field(default=512, ge=1)

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
