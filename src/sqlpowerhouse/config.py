"""Configuration management for SQL Powerhouse.

Settings are read from `SQLPOWERHOUSE_*` environment variables and an
optional `.env` file.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

StrategyName = Literal["retrieval", "schema", "pattern"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SQLPOWERHOUSE_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite:///./sqlpowerhouse.db"
    database_schema: str = "public"
    echo_sql: bool = False
    environment: Literal["development", "production"] = "development"

    # Synthesis
    strategy: StrategyName = "retrieval"
    sql_dialect: str = "PostgreSQL"

    # Embeddings (must match the model used by the sync jobs)
    embedding_provider: Literal["fastembed", "openai"] = "fastembed"
    embedding_model: str | None = None
    embedding_dimensions: int | None = None

    # Generation
    generation_provider: Literal["openai", "gemini"] = "gemini"
    generation_model: str | None = None
    generation_api_key: str | None = None

    # Context store
    context_store: Literal["pgvector", "pinecone"] = "pgvector"
    context_store_url: str | None = None
    pinecone_api_key: str | None = None
    table_index_name: str = "table-summaries"
    query_index_name: str = "query-intents"
    table_top_k: int = Field(default=5, ge=1)
    query_top_k: int = Field(default=3, ge=0)
    allow_empty_context: bool = False

    # Enrichment jobs
    table_metadata_path: str | None = None

    # Logging
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _default_context_store_url(self) -> Settings:
        if self.context_store_url is None:
            self.context_store_url = self.database_url
        return self

    @property
    def is_production(self) -> bool:
        """Whether error details are hidden from HTTP clients."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loaded on first use."""
    return Settings()
