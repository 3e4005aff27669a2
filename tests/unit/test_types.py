"""Tests for core types."""

import pytest
from pydantic import ValidationError

from sqlpowerhouse.core.types import (
    ColumnInfo,
    ContextMetadata,
    RetrievedContext,
    SyncResult,
    TableSchema,
    TableStandard,
    Tier,
)


class TestTier:
    """Tests for Tier enum."""

    def test_ranking(self) -> None:
        """Tiers rank from best to worst."""
        assert [t.rank for t in Tier] == [0, 1, 2, 3]
        assert Tier.GOLD.rank < Tier.IRON.rank

    def test_values(self) -> None:
        assert Tier.values() == ["GOLD", "SILVER", "BRONZE", "IRON"]

    def test_string_value(self) -> None:
        assert Tier.SILVER == "SILVER"


class TestTableSchema:
    """Tests for TableSchema."""

    def test_describe(self) -> None:
        table = TableSchema(
            name="users",
            columns=(
                ColumnInfo(name="id", data_type="integer", nullable=False),
                ColumnInfo(name="email", data_type="character varying"),
            ),
        )
        assert table.describe() == "id integer, email character varying"
        assert table.column_names == ["id", "email"]

    def test_frozen(self) -> None:
        table = TableSchema(name="users")
        with pytest.raises(ValidationError):
            table.name = "other"  # type: ignore[misc]


class TestContextMetadata:
    """Tests for store payload metadata."""

    def test_payload_uses_store_names(self) -> None:
        metadata = ContextMetadata(
            name="orders", summary="s", table_schema="id integer", tier=Tier.GOLD, domain="SALES"
        )
        assert metadata.to_payload() == {
            "name": "orders",
            "summary": "s",
            "schema": "id integer",
            "tier": "GOLD",
            "domain": "SALES",
        }

    def test_alias_input(self) -> None:
        metadata = ContextMetadata.model_validate({"schema": "id integer", "summaryText": "x"})
        assert metadata.table_schema == "id integer"
        assert metadata.summary_text == "x"

    def test_tier_normalized(self) -> None:
        assert ContextMetadata(tier=" bronze ").tier is Tier.BRONZE  # type: ignore[arg-type]

    def test_query_entry_is_not_table(self) -> None:
        assert ContextMetadata(summary="s", query="SELECT 1").is_table is False


class TestRetrievedContext:
    """Tests for RetrievedContext."""

    def test_empty(self) -> None:
        context = RetrievedContext(
            relevant_example_queries=[ContextMetadata(summary="s", query="SELECT 1")]
        )
        assert context.is_empty is True

    def test_table_names_in_order(self) -> None:
        context = RetrievedContext(
            relevant_tables=[ContextMetadata(name="orders"), ContextMetadata(name="users")]
        )
        assert context.table_names == ["orders", "users"]


class TestTableStandard:
    """Tests for curated table metadata."""

    def test_defaults(self) -> None:
        standard = TableStandard()
        assert standard.tier is Tier.IRON
        assert standard.domain == "IRON"
        assert standard.categorical_columns == []

    def test_camel_case_key(self) -> None:
        standard = TableStandard.model_validate({"categoricalColumns": ["status"], "tier": "gold"})
        assert standard.categorical_columns == ["status"]
        assert standard.tier is Tier.GOLD


class TestSyncResult:
    """Tests for SyncResult."""

    def test_success(self) -> None:
        result = SyncResult(job="schema", index_name="table-summaries", processed=3, upserted=3)
        assert result.success is True

    def test_failure(self) -> None:
        result = SyncResult(job="queries", index_name="query-intents", processed=3, failed=1)
        assert result.success is False
