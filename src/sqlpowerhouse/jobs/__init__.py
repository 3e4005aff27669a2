"""Enrichment jobs that populate the context store indexes."""

from sqlpowerhouse.jobs.query_log_sync import QueryLogSync, sanitize_queries
from sqlpowerhouse.jobs.schema_sync import SchemaSync, load_table_metadata

__all__ = [
    "QueryLogSync",
    "SchemaSync",
    "load_table_metadata",
    "sanitize_queries",
]
