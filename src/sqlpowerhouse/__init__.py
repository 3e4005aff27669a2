"""SQL Powerhouse - natural-language questions to validated, read-only SQL.

A question is grounded in context (similar tables and past queries from a
vector store, or the live schema), turned into a candidate statement by a
language model or keyword templates, and returned only after it passes a
write-keyword screen and a live EXPLAIN.

Example:
    from sqlpowerhouse import Settings, build_generator

    generator = build_generator(Settings(strategy="pattern"))
    sql = generator.generate("Show active users")
    # SELECT * FROM users WHERE status = 'active' LIMIT 100
"""

from sqlpowerhouse.config import Settings, get_settings
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
from sqlpowerhouse.exceptions import (
    ContextUnavailable,
    DatabaseUnavailable,
    ForbiddenOperation,
    GenerationUnavailable,
    InvalidQuestion,
    MalformedResponse,
    NoQueryProduced,
    SqlPowerhouseError,
    ValidationFailed,
)
from sqlpowerhouse.generator import SQLGenerator
from sqlpowerhouse.query import SQLValidator, ValidationResult
from sqlpowerhouse.service import Services, build_generator

__version__ = "0.1.0"

__all__ = [
    # Main entry points
    "SQLGenerator",
    "Services",
    "build_generator",
    "Settings",
    "get_settings",
    "SQLValidator",
    "ValidationResult",
    # Types
    "ColumnInfo",
    "TableSchema",
    "Tier",
    "ContextMetadata",
    "ContextEntry",
    "RetrievedContext",
    "TableStandard",
    "SyncResult",
    # Exceptions
    "SqlPowerhouseError",
    "InvalidQuestion",
    "DatabaseUnavailable",
    "ContextUnavailable",
    "GenerationUnavailable",
    "MalformedResponse",
    "NoQueryProduced",
    "ForbiddenOperation",
    "ValidationFailed",
]
