"""SQL validator for generated queries.

The single safety gate between synthesis and the caller:
1. Forbidden-keyword screen (write and DDL statements)
2. Single-statement check
3. Statement type check (SELECT only)
4. Live EXPLAIN against the target database (plans, never executes)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import sqlparse
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from sqlpowerhouse.exceptions import ForbiddenOperation, ValidationFailed

if TYPE_CHECKING:
    from sqlpowerhouse.core.connection import DatabaseConnection

logger = logging.getLogger(__name__)

FORBIDDEN_KEYWORDS = (
    "insert",
    "update",
    "delete",
    "drop",
    "create",
    "alter",
    "truncate",
    "grant",
    "revoke",
)

# A keyword counts only as a standalone word: any character that cannot be part
# of an identifier is a boundary, so comment markers and quotes count too.
# Identifiers such as `updates` or `created_at` pass.
_WORD_CHAR = r"[a-z0-9_]"
_FORBIDDEN_PATTERNS = {
    keyword: re.compile(rf"(?<!{_WORD_CHAR}){keyword}(?!{_WORD_CHAR})")
    for keyword in FORBIDDEN_KEYWORDS
}

# sqlparse reports UNKNOWN for statements it cannot classify, e.g. "(SELECT ...)"
READ_STATEMENT_TYPES = frozenset({"SELECT", "UNKNOWN"})


@dataclass
class ValidationResult:
    """Result of query validation."""

    valid: bool
    """Whether the query passed every stage."""

    sql: str = ""
    """The candidate with surrounding whitespace and trailing semicolon removed."""

    error: str | None = None
    """Reason for rejection; database diagnostics are kept verbatim."""

    forbidden_keyword: str | None = None
    """Keyword or statement type (lower-cased) that marked the candidate as a write."""


class SQLValidator:
    """Validates candidate SQL before it is returned to a caller.

    Runs unconditionally on every candidate, whichever strategy produced it.
    """

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize the validator.

        Args:
            connection: Pooled handle on the database used for EXPLAIN
        """
        self._connection = connection

    def validate(self, sql: str) -> ValidationResult:
        """Validate an SQL statement.

        Args:
            sql: Candidate SQL

        Returns:
            ValidationResult with validation status and details

        Raises:
            DatabaseUnavailable: If no connection can be acquired for EXPLAIN
        """
        cleaned = self._clean_sql(sql)
        if not cleaned:
            return ValidationResult(valid=False, error="Empty query")

        keyword = self.find_forbidden_keyword(cleaned)
        if keyword:
            logger.warning(
                f"Rejected candidate SQL with forbidden keyword '{keyword}': {cleaned[:100]}"
            )
            return ValidationResult(
                valid=False,
                sql=cleaned,
                error=f"Query contains a forbidden write-operation keyword: '{keyword}'",
                forbidden_keyword=keyword,
            )

        statements = [s for s in sqlparse.split(cleaned) if s.strip().rstrip(";").strip()]
        if len(statements) > 1:
            return ValidationResult(
                valid=False,
                sql=cleaned,
                error=f"Only a single statement is allowed. Got: {len(statements)}",
            )

        statement_type = sqlparse.parse(cleaned)[0].get_type()
        if statement_type not in READ_STATEMENT_TYPES:
            logger.warning(f"Rejected candidate SQL of type {statement_type}: {cleaned[:100]}")
            return ValidationResult(
                valid=False,
                sql=cleaned,
                error=f"Only read-only SELECT statements are allowed. Got: {statement_type}",
                forbidden_keyword=statement_type.lower(),
            )

        error = self._explain(cleaned)
        if error is not None:
            logger.error(f"SQL validation failed: {error} (sql: {cleaned[:100]})")
            return ValidationResult(valid=False, sql=cleaned, error=error)

        logger.info("SQL validation passed")
        return ValidationResult(valid=True, sql=cleaned)

    def check(self, sql: str) -> str:
        """Validate and return the accepted SQL, raising on rejection.

        Raises:
            ForbiddenOperation: If a write/DDL keyword or statement type was found
            ValidationFailed: For any other rejection
            DatabaseUnavailable: If no connection can be acquired
        """
        result = self.validate(sql)
        if result.valid:
            return result.sql
        if result.forbidden_keyword:
            raise ForbiddenOperation(result.forbidden_keyword)
        raise ValidationFailed(result.error or "Unknown validation error")

    @staticmethod
    def find_forbidden_keyword(sql: str) -> str | None:
        """Return the first forbidden keyword used as a standalone word.

        Literals and comments are scanned too, so `'please update later'`
        is rejected along with real write statements.
        """
        lowered = sql.lower()
        for keyword, pattern in _FORBIDDEN_PATTERNS.items():
            if pattern.search(lowered):
                return keyword
        return None

    def _clean_sql(self, sql: str) -> str:
        """Trim whitespace and trailing semicolons."""
        return sql.strip().rstrip(";").strip()

    def _explain(self, sql: str) -> str | None:
        """Ask the database to plan the statement.

        Returns:
            None on success, otherwise the database's error message
        """
        with self._connection.connect() as conn:
            try:
                if conn.dialect.name == "postgresql":
                    conn.execute(text("SET TRANSACTION READ ONLY"))
                # no_parameters keeps the driver from interpreting % and : in the SQL
                conn.execution_options(no_parameters=True).exec_driver_sql(f"EXPLAIN {sql}")
            except DBAPIError as e:
                return str(e.orig).strip()
            except SQLAlchemyError as e:
                return str(e)
            finally:
                conn.rollback()
        return None
