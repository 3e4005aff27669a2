"""Query-intent enrichment job.

Turns the most frequently run SELECTs from pg_stat_statements into
example queries for the prompt: literals are sanitized, each query is
summarized in one sentence, the summary is embedded and the pair is
upserted into the query-intent index keyed by md5(query).
"""

from __future__ import annotations

import hashlib
import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sqlpowerhouse.core.types import ContextEntry, ContextMetadata, SyncResult
from sqlpowerhouse.exceptions import ContextUnavailable, DatabaseUnavailable

if TYPE_CHECKING:
    from sqlpowerhouse.context.store import ContextStore
    from sqlpowerhouse.core.connection import DatabaseConnection
    from sqlpowerhouse.embeddings.provider import EmbeddingProvider
    from sqlpowerhouse.generation.client import GenerationClient

logger = logging.getLogger(__name__)

QUERY_LOG_LIMIT = 100

RECENT_QUERIES_SQL = f"""
SELECT query, SUM(calls) AS total_calls
FROM pg_stat_statements
WHERE query LIKE 'SELECT%'
GROUP BY queryid, query
ORDER BY total_calls DESC
LIMIT {QUERY_LOG_LIMIT}
"""

SUMMARY_PROMPT = """You are an expert data analyst. Analyze the following SQL query and describe its business purpose in one clear sentence. Focus on what the query achieves, not just a literal description.

SQL Query:
```sql
{query}
```

Example: For 'SELECT "product_name", SUM("amount") FROM "transactions" GROUP BY "product_name"', a good summary is "Calculates the total sales revenue for each product."

Your Summary:
"""

# Applied in order; string literals before numbers
SANITIZE_RULES = [
    (re.compile(r"WHERE\s+\S+\s*=\s*'.*?'"), "WHERE column = 'value'"),
    (re.compile(r"AND\s+\S+\s*=\s*'.*?'"), "AND column = 'value'"),
    (re.compile(r"WHERE\s+\S+\s*=\s*\d+"), "WHERE column = 123"),
    (re.compile(r"AND\s+\S+\s*=\s*\d+"), "AND column = 123"),
]


def sanitize_query(query: str) -> str:
    """Replace literal equality predicates with placeholders."""
    for pattern, replacement in SANITIZE_RULES:
        query = pattern.sub(replacement, query)
    return query


def sanitize_queries(queries: list[str]) -> list[str]:
    """Sanitize every query, preserving order."""
    return [sanitize_query(q) for q in queries]


def query_id(query: str) -> str:
    """Stable entry id for a sanitized query."""
    return hashlib.md5(query.encode("utf-8")).hexdigest()


class QueryLogSync:
    """Builds and refreshes the query-intent index."""

    def __init__(
        self,
        connection: DatabaseConnection,
        client: GenerationClient,
        provider: EmbeddingProvider,
        store: ContextStore,
        index_name: str,
        concurrency: int = 10,
        batch_size: int = 50,
    ) -> None:
        """Initialize the job.

        Args:
            connection: Database with the pg_stat_statements extension
            client: Model used for summaries
            provider: Embedding provider shared with the retriever
            store: Context store holding the query-intent index
            index_name: Query-intent index name
            concurrency: Maximum in-flight summarize/embed calls
            batch_size: Entries per upsert call
        """
        self._connection = connection
        self._client = client
        self._provider = provider
        self._store = store
        self._index_name = index_name
        self._concurrency = concurrency
        self._batch_size = batch_size

    def fetch_queries(self) -> list[str]:
        """Most-called SELECT statements.

        Raises:
            DatabaseUnavailable: If pg_stat_statements cannot be read
        """
        if not self._connection.is_postgresql:
            raise DatabaseUnavailable(
                "Query log sync requires PostgreSQL with the pg_stat_statements extension",
                {"dialect": self._connection.dialect},
            )

        try:
            with self._connection.connect() as conn:
                rows = conn.execute(text(RECENT_QUERIES_SQL)).fetchall()
        except SQLAlchemyError as e:
            raise DatabaseUnavailable(f"Could not read pg_stat_statements: {e}") from e
        return [row[0] for row in rows]

    def summarize(self, query: str) -> str:
        """One-sentence business purpose of a query."""
        return self._client.generate(SUMMARY_PROMPT.format(query=query)).strip()

    def build_entry(self, query: str) -> ContextEntry:
        """Summarize and embed one sanitized query."""
        summary = self.summarize(query)
        return ContextEntry(
            id=query_id(query),
            vector=self._provider.embed(summary),
            metadata=ContextMetadata(summary=summary, query=query),
        )

    def _try_build_entry(self, query: str) -> ContextEntry | str:
        """Build an entry, or return the failure message."""
        try:
            return self.build_entry(query)
        except Exception as e:
            logger.error(f"Summarizing/embedding failed for query {query[:100]}: {e}")
            return str(e)

    def run(self, queries: list[str] | None = None) -> SyncResult:
        """Sanitize, summarize, embed and upsert the query log.

        Args:
            queries: Raw queries to process. Defaults to fetch_queries().

        Raises:
            DatabaseUnavailable: If the query log cannot be read
        """
        logger.info("Starting query log sync job")
        start_time = time.perf_counter()
        result = SyncResult(job="queries", index_name=self._index_name)

        raw_queries = self.fetch_queries() if queries is None else queries
        if not raw_queries:
            logger.warning("No queries found in the query log; skipping sync")
            return result

        sanitized = sanitize_queries(raw_queries)
        logger.info(
            f"Summarizing {len(sanitized)} queries with concurrency = {self._concurrency}"
        )

        with ThreadPoolExecutor(max_workers=self._concurrency, thread_name_prefix="query-sync") as pool:
            outcomes = list(pool.map(self._try_build_entry, sanitized))

        entries = []
        for query, outcome in zip(sanitized, outcomes, strict=True):
            result.processed += 1
            if isinstance(outcome, ContextEntry):
                entries.append(outcome)
            else:
                result.failed += 1
                result.errors.append(f"{query_id(query)}: {outcome}")

        for i in range(0, len(entries), self._batch_size):
            batch = entries[i : i + self._batch_size]
            try:
                result.upserted += self._store.upsert(self._index_name, batch)
            except ContextUnavailable as e:
                logger.error(f"Upsert batch failed at index {i}: {e.message}")
                result.failed += len(batch)
                result.errors.append(f"batch {i}: {e.message}")

        result.duration_seconds = time.perf_counter() - start_time
        logger.info(
            f"Query log sync completed: {result.upserted}/{result.processed} queries "
            f"in {result.duration_seconds:.1f}s"
        )
        return result
