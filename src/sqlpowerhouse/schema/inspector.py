"""Live schema inspection.

Reads the database catalog on every call; nothing is cached here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import inspect, text

from sqlpowerhouse.core.types import ColumnInfo, TableSchema

if TYPE_CHECKING:
    from sqlalchemy import Connection

    from sqlpowerhouse.core.connection import DatabaseConnection

logger = logging.getLogger(__name__)

CATALOG_QUERY = """
SELECT
    t.table_name,
    c.column_name,
    c.data_type,
    c.is_nullable
FROM information_schema.tables t
JOIN information_schema.columns c
    ON t.table_name = c.table_name
    AND t.table_schema = c.table_schema
WHERE t.table_schema = :schema
    AND t.table_type = 'BASE TABLE'
ORDER BY t.table_name, c.ordinal_position
"""


class SchemaInspector:
    """Produces a table -> columns snapshot of the live database.

    PostgreSQL is read through information_schema. Other dialects (SQLite in
    tests and local demos) go through SQLAlchemy's inspector, which reports
    columns in declaration order as well.
    """

    def __init__(self, connection: DatabaseConnection, schema: str = "public") -> None:
        """Initialize the inspector.

        Args:
            connection: Pooled database handle
            schema: Catalog schema to read (PostgreSQL only)
        """
        self._connection = connection
        self._schema = schema

    def fetch_schema(self) -> list[TableSchema]:
        """Fetch every base table with its columns.

        Returns:
            Tables ordered by name, columns in ordinal position

        Raises:
            DatabaseUnavailable: If no connection can be acquired
        """
        with self._connection.connect() as conn:
            if conn.dialect.name == "postgresql":
                tables = self._fetch_from_catalog(conn)
            else:
                tables = self._fetch_from_inspector(conn)

        logger.debug(f"Fetched schema for {len(tables)} tables: {[t.name for t in tables]}")
        return tables

    def _fetch_from_catalog(self, conn: Connection) -> list[TableSchema]:
        """Group information_schema rows into one entry per table."""
        rows = conn.execute(text(CATALOG_QUERY), {"schema": self._schema}).fetchall()

        grouped: dict[str, list[ColumnInfo]] = {}
        for table_name, column_name, data_type, is_nullable in rows:
            grouped.setdefault(table_name, []).append(
                ColumnInfo(
                    name=column_name,
                    data_type=data_type,
                    nullable=is_nullable == "YES",
                )
            )

        return [TableSchema(name=name, columns=tuple(cols)) for name, cols in grouped.items()]

    def _fetch_from_inspector(self, conn: Connection) -> list[TableSchema]:
        """Read tables through SQLAlchemy reflection."""
        inspector = inspect(conn)
        tables = []
        for table_name in sorted(inspector.get_table_names()):
            columns = tuple(
                ColumnInfo(
                    name=col["name"],
                    data_type=str(col["type"]).lower(),
                    nullable=bool(col.get("nullable", True)),
                )
                for col in inspector.get_columns(table_name)
            )
            tables.append(TableSchema(name=table_name, columns=columns))
        return tables
