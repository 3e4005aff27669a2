"""Core components for SQL Powerhouse."""

from sqlpowerhouse.core.connection import DatabaseConnection
from sqlpowerhouse.core.types import (
    ColumnInfo,
    ContextEntry,
    ContextMetadata,
    RetrievedContext,
    SyncResult,
    TableSchema,
    TableStandard,
    Tier,
)

__all__ = [
    "DatabaseConnection",
    "ColumnInfo",
    "TableSchema",
    "Tier",
    "ContextMetadata",
    "ContextEntry",
    "RetrievedContext",
    "TableStandard",
    "SyncResult",
]
