"""Table-summary enrichment job.

For every table in the live schema:
1. Collect a few real queries against it from pg_stat_statements
2. Sample distinct values of its curated categorical columns
3. Ask the model for an objective summary
4. Embed the summary and upsert it into the table index

The retriever reads what this job writes, so it must use the same
embedding provider.
"""

from __future__ import annotations

import json
import logging
import re
import time
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sqlpowerhouse.core.types import (
    ContextEntry,
    ContextMetadata,
    SyncResult,
    TableSchema,
    TableStandard,
)
from sqlpowerhouse.exceptions import ContextUnavailable, SqlPowerhouseError

if TYPE_CHECKING:
    from sqlpowerhouse.context.store import ContextStore
    from sqlpowerhouse.core.connection import DatabaseConnection
    from sqlpowerhouse.embeddings.provider import EmbeddingProvider
    from sqlpowerhouse.generation.client import GenerationClient
    from sqlpowerhouse.schema.inspector import SchemaInspector

logger = logging.getLogger(__name__)

SAMPLE_QUERIES_LIMIT = 3
SAMPLE_VALUES_LIMIT = 10

SAMPLE_QUERIES_SQL = f"""
SELECT query
FROM pg_stat_statements
WHERE query ILIKE 'SELECT%'
    AND (query ~* :from_pattern OR query ~* :join_pattern)
ORDER BY calls DESC
LIMIT {SAMPLE_QUERIES_LIMIT}
"""


def sample_query_patterns(table_name: str) -> dict[str, str]:
    """PostgreSQL regexes matching `FROM <table>` and `JOIN <table>`, quoted or not."""
    name = re.escape(table_name)
    return {
        "from_pattern": rf'\mfrom\s+"?{name}"?\M',
        "join_pattern": rf'\mjoin\s+"?{name}"?\M',
    }


SUMMARY_PROMPT = """You are a data analyst that can help summarize SQL tables.
Summarize the table below using all the provided context to understand its structure, common uses, and key data values.

===Table Schema
{schema}

===Sample Queries
{sample_queries}

===Sample Categorized Column Data
{sample_data}

===Response Guideline
- You shall write the summary based only on the provided information.
- Note that the sampled queries and data are only a small sample and do not represent all possible uses or values.
- Use the 'Sample Categorized Column Data' to understand the specific values and categories contained within key columns.
- Do not use any subjective adjectives to describe the table (e.g., 'important', 'comprehensive').
- Do not mention the sampled queries or data directly in your summary. Only talk objectively about the type of data the table contains and its potential utilities.
- Please include potential use cases, such as the kinds of questions that can be answered or the analysis that can be done with this table.
"""

_STANDARDS_ADAPTER = TypeAdapter(dict[str, TableStandard])


def load_table_metadata(path: str | Path | None) -> dict[str, TableStandard]:
    """Load curated per-table metadata (tier, domain, categorical columns).

    The file maps table names to objects, e.g.::

        {"orders": {"tier": "GOLD", "domain": "SALES", "categoricalColumns": ["status"]}}

    Returns:
        Mapping of table name to TableStandard; empty when no path is given

    Raises:
        ValueError: If the file is not valid JSON or has invalid entries
    """
    if path is None:
        return {}

    content = Path(path).read_text(encoding="utf-8")
    try:
        return _STANDARDS_ADAPTER.validate_python(json.loads(content))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Invalid table metadata file {path}: {e}") from e


class SchemaSync:
    """Builds and refreshes the table-summary index."""

    def __init__(
        self,
        connection: DatabaseConnection,
        inspector: SchemaInspector,
        client: GenerationClient,
        provider: EmbeddingProvider,
        store: ContextStore,
        index_name: str,
        table_metadata: dict[str, TableStandard] | None = None,
    ) -> None:
        """Initialize the job.

        Args:
            connection: Target database
            inspector: Live schema source
            client: Model used for summaries
            provider: Embedding provider shared with the retriever
            store: Context store holding the table index
            index_name: Table-summary index name
            table_metadata: Curated tier/domain/categorical columns per table
        """
        self._connection = connection
        self._inspector = inspector
        self._client = client
        self._provider = provider
        self._store = store
        self._index_name = index_name
        self._table_metadata = table_metadata or {}

    def find_sample_queries(self, table: TableSchema) -> list[str]:
        """Most-called SELECTs that read the table (PostgreSQL only)."""
        if not self._connection.is_postgresql:
            return []

        params = sample_query_patterns(table.name)
        try:
            with self._connection.connect() as conn:
                rows = conn.execute(text(SAMPLE_QUERIES_SQL), params).fetchall()
        except SQLAlchemyError as e:
            logger.warning(f"Could not read pg_stat_statements for {table.name}: {e}")
            return []
        return [row[0] for row in rows]

    def sample_column_values(self, table: TableSchema, columns: list[str]) -> str:
        """Distinct values of the given columns, formatted for the prompt."""
        known = [c for c in columns if c in table.column_names]
        if not known:
            return ""

        lines = ["Sample column values:"]
        try:
            with self._connection.connect() as conn:
                quote = conn.dialect.identifier_preparer.quote
                for column in known:
                    rows = conn.execute(
                        text(
                            f"SELECT DISTINCT {quote(column)} FROM {quote(table.name)} "
                            f"LIMIT {SAMPLE_VALUES_LIMIT}"
                        )
                    ).fetchall()
                    values = ", ".join(str(row[0]) for row in rows)
                    lines.append(f"- {column}: [{values}]")
        except SQLAlchemyError as e:
            logger.error(f"Failed to get sample data for {table.name}: {e}")
            return ""
        return "\n".join(lines)

    def summarize(self, table: TableSchema, sample_queries: list[str], sample_data: str) -> str:
        """Ask the model for an objective summary of the table."""
        prompt = SUMMARY_PROMPT.format(
            schema=table.describe(),
            sample_queries="\n\n".join(sample_queries),
            sample_data=sample_data,
        )
        return self._client.generate(prompt).strip()

    def build_entry(self, table: TableSchema) -> ContextEntry:
        """Summarize and embed one table into an index entry."""
        standard = self._table_metadata.get(table.name, TableStandard())

        sample_queries = self.find_sample_queries(table)
        if not sample_queries:
            logger.warning(f"No sample queries found for table: {table.name}")
        sample_data = self.sample_column_values(table, standard.categorical_columns)

        summary = self.summarize(table, sample_queries, sample_data)
        metadata = ContextMetadata(
            name=table.name,
            summary=summary,
            table_schema=table.describe(),
            tier=standard.tier,
            domain=standard.domain,
        )
        try:
            vector = self._provider.embed(summary)
        except Exception as e:
            raise ContextUnavailable(f"Failed to embed summary of {table.name}: {e}") from e
        return ContextEntry(id=table.name, vector=vector, metadata=metadata)

    def run(self) -> SyncResult:
        """Summarize, embed and upsert every table.

        A table whose summary or embedding fails is logged and skipped.

        Raises:
            DatabaseUnavailable: If the schema cannot be read
            ContextUnavailable: If the store rejects the upsert
        """
        logger.info("Starting database schema sync job")
        start_time = time.perf_counter()
        result = SyncResult(job="schema", index_name=self._index_name)

        tables = self._inspector.fetch_schema()
        logger.info(f"Database schema inspection completed: {len(tables)} tables")

        entries = []
        for table in tables:
            logger.info(f"Processing table: {table.name}")
            result.processed += 1
            try:
                entries.append(self.build_entry(table))
            except SqlPowerhouseError as e:
                logger.error(f"Skipping table {table.name}: {e.message}")
                result.failed += 1
                result.errors.append(f"{table.name}: {e.message}")

        result.upserted = self._store.upsert(self._index_name, entries)
        result.duration_seconds = time.perf_counter() - start_time
        logger.info(
            f"Schema sync completed: {result.upserted}/{result.processed} tables "
            f"in {result.duration_seconds:.1f}s"
        )
        return result
