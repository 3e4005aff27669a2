"""Wiring: builds the configured pipeline from Settings.

Every long-lived handle (connection pool, embedding model, store client,
model client) is created here once, on first use, and injected into the
components that need it.
"""

from __future__ import annotations

import logging

from sqlpowerhouse.config import Settings, StrategyName, get_settings
from sqlpowerhouse.context.retriever import ContextRetriever
from sqlpowerhouse.context.store import ContextStore, PgVectorContextStore, PineconeContextStore
from sqlpowerhouse.core.connection import DatabaseConnection
from sqlpowerhouse.embeddings import EmbeddingProvider, get_provider
from sqlpowerhouse.generation import GenerationClient, get_client
from sqlpowerhouse.generator import SQLGenerator
from sqlpowerhouse.jobs.query_log_sync import QueryLogSync
from sqlpowerhouse.jobs.schema_sync import SchemaSync, load_table_metadata
from sqlpowerhouse.query.patterns import PatternSynthesizer
from sqlpowerhouse.query.prompt import SchemaPromptComposer, TaggedPromptComposer
from sqlpowerhouse.query.synthesizer import RetrievalSynthesizer, SchemaSynthesizer, Synthesizer
from sqlpowerhouse.query.validator import SQLValidator
from sqlpowerhouse.schema.inspector import SchemaInspector

logger = logging.getLogger(__name__)


class Services:
    """Lazily-built collaborators shared by the API, CLI and sync jobs.

    Only what a code path touches gets constructed, so the pattern strategy
    never loads an embedding model or a model client.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the container.

        Args:
            settings: Settings to build from. Defaults to get_settings().
        """
        self.settings = settings or get_settings()
        self._connection: DatabaseConnection | None = None
        self._store_connection: DatabaseConnection | None = None
        self._provider: EmbeddingProvider | None = None
        self._store: ContextStore | None = None
        self._client: GenerationClient | None = None

    @property
    def connection(self) -> DatabaseConnection:
        """Pooled handle on the target database."""
        if self._connection is None:
            self._connection = DatabaseConnection(
                self.settings.database_url, echo=self.settings.echo_sql
            )
        return self._connection

    @property
    def inspector(self) -> SchemaInspector:
        return SchemaInspector(self.connection, schema=self.settings.database_schema)

    @property
    def validator(self) -> SQLValidator:
        return SQLValidator(self.connection)

    @property
    def embedding_provider(self) -> EmbeddingProvider:
        """Embedding provider shared by retrieval and the sync jobs."""
        if self._provider is None:
            kwargs: dict[str, object] = {}
            if self.settings.embedding_model:
                kwargs["model"] = self.settings.embedding_model
            if self.settings.embedding_dimensions and self.settings.embedding_provider == "openai":
                kwargs["dimensions"] = self.settings.embedding_dimensions
            self._provider = get_provider(self.settings.embedding_provider, **kwargs)
            logger.info(
                f"Embedding provider: {self._provider.model_name} ({self._provider.dimensions}d)"
            )
        return self._provider

    @property
    def context_store(self) -> ContextStore:
        """Vector store holding the table and query-intent indexes."""
        if self._store is None:
            if self.settings.context_store == "pinecone":
                self._store = PineconeContextStore(api_key=self.settings.pinecone_api_key)
            else:
                url = self.settings.context_store_url or self.settings.database_url
                if url == self.settings.database_url:
                    engine = self.connection.engine
                else:
                    self._store_connection = DatabaseConnection(url, echo=self.settings.echo_sql)
                    engine = self._store_connection.engine
                self._store = PgVectorContextStore(
                    engine,
                    model_name=self.embedding_provider.model_name,
                    dimensions=self.embedding_provider.dimensions,
                )
        return self._store

    @property
    def generation_client(self) -> GenerationClient:
        """Language-model client."""
        if self._client is None:
            kwargs: dict[str, object] = {}
            if self.settings.generation_model:
                kwargs["model"] = self.settings.generation_model
            if self.settings.generation_api_key:
                kwargs["api_key"] = self.settings.generation_api_key
            self._client = get_client(self.settings.generation_provider, **kwargs)
        return self._client

    def build_retriever(self) -> ContextRetriever:
        return ContextRetriever(
            self.embedding_provider,
            self.context_store,
            table_index=self.settings.table_index_name,
            query_index=self.settings.query_index_name,
            table_top_k=self.settings.table_top_k,
            query_top_k=self.settings.query_top_k,
        )

    def build_synthesizer(self, strategy: StrategyName | None = None) -> Synthesizer:
        """Build the synthesis strategy.

        Args:
            strategy: Overrides the configured strategy

        Raises:
            ValueError: If the strategy name is unknown
        """
        strategy = strategy or self.settings.strategy
        if strategy == "pattern":
            return PatternSynthesizer()
        if strategy == "schema":
            return SchemaSynthesizer(
                self.generation_client,
                SchemaPromptComposer(dialect=self.settings.sql_dialect),
            )
        if strategy == "retrieval":
            retriever = self.build_retriever()
            retriever.check_compatibility()
            return RetrievalSynthesizer(
                retriever,
                self.generation_client,
                TaggedPromptComposer(dialect=self.settings.sql_dialect),
                allow_empty_context=self.settings.allow_empty_context,
            )
        raise ValueError(
            f"Unknown strategy: {strategy}. Available: 'retrieval', 'schema', 'pattern'"
        )

    def build_generator(self, strategy: StrategyName | None = None) -> SQLGenerator:
        """Build the orchestrator for the configured (or given) strategy."""
        synthesizer = self.build_synthesizer(strategy)
        logger.info(f"SQL generator ready with '{synthesizer.name}' strategy")
        return SQLGenerator(synthesizer, self.validator, self.inspector)

    def build_schema_sync(self) -> SchemaSync:
        """Build the table-summary enrichment job."""
        return SchemaSync(
            self.connection,
            self.inspector,
            self.generation_client,
            self.embedding_provider,
            self._prepared_store(),
            index_name=self.settings.table_index_name,
            table_metadata=load_table_metadata(self.settings.table_metadata_path),
        )

    def build_query_log_sync(self) -> QueryLogSync:
        """Build the query-intent enrichment job."""
        return QueryLogSync(
            self.connection,
            self.generation_client,
            self.embedding_provider,
            self._prepared_store(),
            index_name=self.settings.query_index_name,
        )

    def _prepared_store(self) -> ContextStore:
        store = self.context_store
        if isinstance(store, PgVectorContextStore):
            store.ensure_tables()
        return store

    def close(self) -> None:
        """Dispose of every connection pool this container opened."""
        if self._store_connection is not None:
            self._store_connection.close()
            self._store_connection = None
        if self._connection is not None:
            self._connection.close()
            self._connection = None


def build_generator(settings: Settings | None = None) -> SQLGenerator:
    """Build a ready-to-use generator from settings.

    The generator's connection pool lives as long as the process; use
    `Services` directly when it needs to be disposed.
    """
    return Services(settings).build_generator()
