"""Core types for SQL Powerhouse.

All types are JSON-serializable so they can be embedded in prompts and
returned from the API unchanged.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Tier(StrEnum):
    """Quality ranking of a table, highest first."""

    GOLD = "GOLD"
    SILVER = "SILVER"
    BRONZE = "BRONZE"
    IRON = "IRON"

    @property
    def rank(self) -> int:
        """Position in the ranking (0 = best)."""
        return list(Tier).index(self)

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid tier values."""
        return [t.value for t in cls]


class ColumnInfo(BaseModel):
    """A single column as reported by the database catalog."""

    model_config = ConfigDict(frozen=True)

    name: str
    data_type: str
    nullable: bool = True


class TableSchema(BaseModel):
    """Live snapshot of one table, columns in catalog order."""

    model_config = ConfigDict(frozen=True)

    name: str
    columns: tuple[ColumnInfo, ...] = ()

    @property
    def column_names(self) -> list[str]:
        """Column names in catalog order."""
        return [c.name for c in self.columns]

    def describe(self) -> str:
        """Compact `name type` listing as stored in the table index."""
        return ", ".join(f"{c.name} {c.data_type}" for c in self.columns)


class ContextMetadata(BaseModel):
    """Metadata payload of a context store entry.

    Table-summary entries carry name/summary/schema/tier/domain, query-intent
    entries carry summary/query. Unknown keys are dropped; known keys are
    type-checked when a match is read from the store.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str | None = None
    summary: str | None = None
    table_schema: str | None = Field(default=None, alias="schema")
    tier: Tier | None = None
    domain: str | None = None
    query: str | None = None
    summary_text: str | None = Field(default=None, alias="summaryText")

    @field_validator("tier", mode="before")
    @classmethod
    def _normalize_tier(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def is_table(self) -> bool:
        """Whether this entry describes a table."""
        return self.name is not None and self.table_schema is not None

    def to_payload(self) -> dict[str, Any]:
        """Serialize with the store's field names, omitting empty fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ContextEntry(BaseModel):
    """An embedded entry as written to, or read from, a context index."""

    id: str
    vector: list[float] = Field(default_factory=list)
    metadata: ContextMetadata = Field(default_factory=ContextMetadata)
    score: float | None = None


class RetrievedContext(BaseModel):
    """Per-request retrieval result, discarded after prompt composition."""

    relevant_tables: list[ContextMetadata] = Field(default_factory=list)
    relevant_example_queries: list[ContextMetadata] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when no table context was found."""
        return not self.relevant_tables

    @property
    def table_names(self) -> list[str]:
        """Names of the retrieved tables, in similarity order."""
        return [t.name for t in self.relevant_tables if t.name]


class TableStandard(BaseModel):
    """Curated metadata for one table, read from the table-metadata file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tier: Tier = Tier.IRON
    domain: str = Tier.IRON.value
    categorical_columns: list[str] = Field(default_factory=list, alias="categoricalColumns")

    @field_validator("tier", mode="before")
    @classmethod
    def _normalize_tier(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class SyncResult(BaseModel):
    """Outcome of one enrichment job run."""

    job: str
    index_name: str
    processed: int = 0
    upserted: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        """True when every item made it into the index."""
        return self.failed == 0
