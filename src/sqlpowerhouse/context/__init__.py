"""Retrieval-augmented context for SQL generation.

Example:
    >>> from sqlpowerhouse.context import ContextRetriever, PgVectorContextStore
    >>> retriever = ContextRetriever(provider, store, "table-summaries", "query-intents")
    >>> context = retriever.retrieve("total revenue by month")
    >>> context.table_names
    ['orders', 'order_items']
"""

from sqlpowerhouse.context.retriever import ContextRetriever
from sqlpowerhouse.context.store import (
    ContextStore,
    IndexInfo,
    PgVectorContextStore,
    PineconeContextStore,
)

__all__ = [
    "ContextRetriever",
    "ContextStore",
    "IndexInfo",
    "PgVectorContextStore",
    "PineconeContextStore",
]
