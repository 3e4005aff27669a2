"""Context retrieval for prompt grounding."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from sqlpowerhouse.core.types import RetrievedContext
from sqlpowerhouse.exceptions import ContextUnavailable

if TYPE_CHECKING:
    from sqlpowerhouse.context.store import ContextStore
    from sqlpowerhouse.embeddings.provider import EmbeddingProvider

logger = logging.getLogger(__name__)


class ContextRetriever:
    """Finds the tables and past query intents most similar to a question.

    The question is embedded once, then the table-summary and query-intent
    indexes are searched concurrently and joined before returning.
    """

    def __init__(
        self,
        provider: EmbeddingProvider,
        store: ContextStore,
        table_index: str,
        query_index: str,
        table_top_k: int = 5,
        query_top_k: int = 3,
    ) -> None:
        """Initialize the retriever.

        Args:
            provider: Embedding provider, same model as the sync jobs
            store: Context store holding both indexes
            table_index: Name of the table-summary index
            query_index: Name of the query-intent index
            table_top_k: Number of tables to retrieve
            query_top_k: Number of example queries to retrieve
        """
        self._provider = provider
        self._store = store
        self._table_index = table_index
        self._query_index = query_index
        self._table_top_k = table_top_k
        self._query_top_k = query_top_k

    def check_compatibility(self) -> None:
        """Verify both indexes were embedded with this retriever's model.

        Raises:
            ContextUnavailable: On a model or dimension mismatch
        """
        for index_name in (self._table_index, self._query_index):
            info = self._store.index_info(index_name)
            if info.count == 0:
                logger.warning(f"Context index '{index_name}' is empty; run the sync jobs")
                continue
            self._provider.ensure_compatible(info.model, info.dimensions)

    def retrieve(self, question: str) -> RetrievedContext:
        """Retrieve relevant table schemas and example queries.

        An empty result is returned as-is; whether that is acceptable is the
        caller's decision.

        Raises:
            ContextUnavailable: If embedding or either index lookup fails
        """
        try:
            vector = self._provider.embed(question)
        except ContextUnavailable:
            raise
        except Exception as e:
            raise ContextUnavailable(f"Failed to embed question: {e}") from e

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="context") as pool:
            tables_future = pool.submit(
                self._store.query, self._table_index, vector, self._table_top_k
            )
            queries_future = pool.submit(
                self._store.query, self._query_index, vector, self._query_top_k
            )
            try:
                table_matches = tables_future.result()
                query_matches = queries_future.result()
            except ContextUnavailable:
                raise
            except Exception as e:
                raise ContextUnavailable(f"Context store lookup failed: {e}") from e

        context = RetrievedContext(
            relevant_tables=[m.metadata for m in table_matches],
            relevant_example_queries=[m.metadata for m in query_matches],
        )
        logger.info(
            f"Retrieved {len(context.relevant_tables)} tables "
            f"{context.table_names} and {len(context.relevant_example_queries)} example queries"
        )
        return context
