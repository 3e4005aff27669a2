"""Tests for the SQL generation orchestrator."""

import logging

import pytest

from sqlpowerhouse.context.retriever import ContextRetriever
from sqlpowerhouse.core.connection import DatabaseConnection
from sqlpowerhouse.exceptions import (
    ForbiddenOperation,
    InvalidQuestion,
    NoQueryProduced,
    ValidationFailed,
)
from sqlpowerhouse.generator import SQLGenerator
from sqlpowerhouse.query.patterns import PatternSynthesizer
from sqlpowerhouse.query.synthesizer import RetrievalSynthesizer, Synthesizer
from sqlpowerhouse.query.validator import SQLValidator
from sqlpowerhouse.schema.inspector import SchemaInspector


class RecordingSynthesizer(Synthesizer):
    """Returns fixed SQL and records every call."""

    name = "recording"

    def __init__(self, sql: str, requires_schema: bool = False) -> None:
        self.sql = sql
        self.requires_schema = requires_schema
        self.calls: list[tuple[str, object]] = []

    def synthesize(self, question, schema=None):
        self.calls.append((question, schema))
        return self.sql


@pytest.fixture
def pattern_generator(connection: DatabaseConnection) -> SQLGenerator:
    return SQLGenerator(
        PatternSynthesizer(), SQLValidator(connection), SchemaInspector(connection)
    )


class TestPatternGeneration:
    """End-to-end generation with the pattern strategy over SQLite."""

    def test_count_all_products(self, pattern_generator: SQLGenerator) -> None:
        assert pattern_generator.generate("Count all products") == (
            "SELECT COUNT(*) as total FROM products"
        )

    def test_show_active_users(self, pattern_generator: SQLGenerator) -> None:
        sql = pattern_generator.generate("Show active users")
        assert "FROM users" in sql
        assert "status = 'active'" in sql
        assert "LIMIT 100" in sql

    def test_total_revenue(self, pattern_generator: SQLGenerator) -> None:
        sql = pattern_generator.generate("Total revenue")
        assert "SUM(total_amount)" in sql
        assert "FROM orders" in sql
        assert "status = 'completed'" in sql

    def test_question_is_trimmed(self, pattern_generator: SQLGenerator) -> None:
        assert pattern_generator.generate("  Count all products \n") == (
            "SELECT COUNT(*) as total FROM products"
        )

    def test_idempotent(self, pattern_generator: SQLGenerator) -> None:
        assert pattern_generator.generate("Orders by user") == pattern_generator.generate(
            "Orders by user"
        )

    def test_unknown_question(self, pattern_generator: SQLGenerator) -> None:
        with pytest.raises(NoQueryProduced):
            pattern_generator.generate("What's the weather like?")

    def test_dialect_specific_template_rejected_by_explain(
        self, pattern_generator: SQLGenerator
    ) -> None:
        """SQLite has no NOW(), so the recent-orders template fails validation."""
        with pytest.raises(ValidationFailed):
            pattern_generator.generate("recent orders")


class TestOrchestration:
    """Tests for stage sequencing."""

    def test_empty_question_touches_nothing(self, connection: DatabaseConnection) -> None:
        synthesizer = RecordingSynthesizer("SELECT 1", requires_schema=True)
        generator = SQLGenerator(
            synthesizer, SQLValidator(connection), SchemaInspector(connection)
        )
        for question in (None, "", "   "):
            with pytest.raises(InvalidQuestion):
                generator.generate(question)
        assert synthesizer.calls == []

    def test_schema_fetched_only_when_required(self, connection: DatabaseConnection) -> None:
        synthesizer = RecordingSynthesizer("SELECT 1")
        SQLGenerator(synthesizer, SQLValidator(connection), SchemaInspector(connection)).generate(
            "q"
        )
        assert synthesizer.calls == [("q", None)]

    def test_schema_passed_to_schema_aware_strategy(self, connection: DatabaseConnection) -> None:
        synthesizer = RecordingSynthesizer("SELECT 1", requires_schema=True)
        SQLGenerator(synthesizer, SQLValidator(connection), SchemaInspector(connection)).generate(
            "q"
        )
        schema = synthesizer.calls[0][1]
        assert [t.name for t in schema] == ["order_items", "orders", "products", "users"]

    def test_schema_strategy_requires_inspector(self, connection: DatabaseConnection) -> None:
        with pytest.raises(ValueError):
            SQLGenerator(PatternSynthesizer(), SQLValidator(connection))

    def test_write_candidate_never_returned(self, connection: DatabaseConnection) -> None:
        generator = SQLGenerator(
            RecordingSynthesizer("DELETE FROM users"), SQLValidator(connection)
        )
        with pytest.raises(ForbiddenOperation):
            generator.generate("remove everyone")

    def test_failure_logged_with_duration(
        self, connection: DatabaseConnection, caplog: pytest.LogCaptureFixture
    ) -> None:
        generator = SQLGenerator(
            RecordingSynthesizer("SELECT * FROM nowhere"), SQLValidator(connection)
        )
        with caplog.at_level(logging.INFO, logger="sqlpowerhouse.generator"):
            with pytest.raises(ValidationFailed):
                generator.generate("q")
        assert any("failed after" in r.message and "ms" in r.message for r in caplog.records)

    def test_success_logged_with_duration(
        self, connection: DatabaseConnection, caplog: pytest.LogCaptureFixture
    ) -> None:
        generator = SQLGenerator(RecordingSynthesizer("SELECT 1"), SQLValidator(connection))
        with caplog.at_level(logging.INFO, logger="sqlpowerhouse.generator"):
            generator.generate("q")
        assert any("completed in" in r.message for r in caplog.records)


class TestRetrievalGeneration:
    """End-to-end generation with retrieval and a fake model."""

    def test_model_query_validated(
        self, connection, fake_provider, populated_store, fake_client
    ) -> None:
        fake_client.response = (
            '<@query@>SELECT SUM("total_amount") FROM "orders" '
            "WHERE \"status\" = 'completed';</@query@>"
        )
        retriever = ContextRetriever(
            fake_provider, populated_store, "table-summaries", "query-intents"
        )
        generator = SQLGenerator(
            RetrievalSynthesizer(retriever, fake_client), SQLValidator(connection)
        )
        assert generator.generate("Total revenue") == (
            'SELECT SUM("total_amount") FROM "orders" WHERE "status" = \'completed\''
        )

    def test_model_write_statement_rejected(
        self, connection, fake_provider, populated_store, fake_client
    ) -> None:
        fake_client.response = '<@query@>DROP TABLE "users"</@query@>'
        retriever = ContextRetriever(
            fake_provider, populated_store, "table-summaries", "query-intents"
        )
        generator = SQLGenerator(
            RetrievalSynthesizer(retriever, fake_client), SQLValidator(connection)
        )
        with pytest.raises(ForbiddenOperation):
            generator.generate("drop users")
