"""Custom exceptions for SQL Powerhouse.

Every stage of the generation pipeline fails closed by raising one of these:
- Messages say what went wrong and, where possible, what to check
- `context` carries the structured details for JSON error payloads
"""

from __future__ import annotations

from typing import Any


class SqlPowerhouseError(Exception):
    """Base exception for all SQL Powerhouse errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class InvalidQuestion(SqlPowerhouseError):
    """The question is missing or blank."""

    def __init__(self, message: str = "Question is required.") -> None:
        super().__init__(message)


class DatabaseUnavailable(SqlPowerhouseError):
    """A database connection could not be acquired."""

    pass


class ContextUnavailable(SqlPowerhouseError):
    """The embedding service or the context store failed."""

    pass


class GenerationUnavailable(SqlPowerhouseError):
    """The language model call failed (transport, auth, quota)."""

    pass


class MalformedResponse(SqlPowerhouseError):
    """Model output did not follow the response format contract."""

    def __init__(self, message: str, raw_response: str | None = None) -> None:
        preview = (raw_response or "")[:200]
        super().__init__(message, {"response_preview": preview} if preview else None)
        self.raw_response = raw_response


class NoQueryProduced(SqlPowerhouseError):
    """No query could be produced; carries the explanation verbatim."""

    def __init__(self, explanation: str) -> None:
        super().__init__(
            f"No query produced: {explanation}",
            {"explanation": explanation},
        )
        self.explanation = explanation


class ForbiddenOperation(SqlPowerhouseError):
    """Candidate SQL contains a write or DDL keyword."""

    def __init__(self, keyword: str) -> None:
        message = (
            f"Query contains a forbidden write-operation keyword: '{keyword}'. "
            "Only read-only statements are allowed."
        )
        super().__init__(message, {"keyword": keyword})
        self.keyword = keyword


class ValidationFailed(SqlPowerhouseError):
    """The database rejected the statement during EXPLAIN."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Generated SQL is invalid: {reason}", {"reason": reason})
        self.reason = reason
