"""Prompt composition for SQL generation.

Each composer is paired with one parser grammar in `query.parser`:
`TaggedPromptComposer` with `parse_tagged`, `SchemaPromptComposer` with
`parse_fenced`. The tag markers are imported from the parser so both sides
of the contract change together.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from sqlpowerhouse.core.types import Tier
from sqlpowerhouse.query.parser import EXPLANATION_TAG, QUERY_TAG, close_tag, open_tag

if TYPE_CHECKING:
    from sqlpowerhouse.core.types import ContextMetadata, TableSchema


def _tier_order() -> str:
    return " > ".join(t.value.title() for t in Tier)


TABLE_SELECTION_RULES = [
    "Use the 'tier' as a strong indicator of table quality. "
    f"The priority is: {_tier_order()}.",
    f"Avoid '{Tier.IRON.value.title()}' tier tables if a better alternative exists.",
]

TAGGED_GENERATION_RULES = [
    f"Your response must start with {open_tag(QUERY_TAG)} or {open_tag(EXPLANATION_TAG)}.",
    f"Respond only with a valid SQL query inside the {open_tag(QUERY_TAG)} section, "
    f"closed with {close_tag(QUERY_TAG)}.",
    "CRITICAL RULE: Wrap all table and column names in double quotes (\").",
    "Write exactly one read-only statement.",
    "If the context is insufficient, explain what is missing in the "
    f"{open_tag(EXPLANATION_TAG)} section, closed with {close_tag(EXPLANATION_TAG)}.",
]


def _numbered(rules: list[str]) -> str:
    return "\n".join(f"{i}. {rule}" for i, rule in enumerate(rules, start=1))


class TaggedPromptComposer:
    """Builds the retrieval-grounded prompt with the tagged output contract."""

    def __init__(self, dialect: str = "PostgreSQL") -> None:
        """Initialize the composer.

        Args:
            dialect: Target SQL dialect named in the prompt
        """
        self._dialect = dialect

    def compose(
        self,
        question: str,
        relevant_tables: list[ContextMetadata],
        relevant_example_queries: list[ContextMetadata],
    ) -> str:
        """Compose the generation prompt.

        The output is a pure function of the inputs.
        """
        tables_json = json.dumps([t.to_payload() for t in relevant_tables], indent=2)
        examples_json = json.dumps([q.to_payload() for q in relevant_example_queries], indent=2)

        return f"""You are an expert SQL writer. Your task is to write a single, correct SQL query to answer the user's question by analyzing the provided context.
First, select the most appropriate table(s) from the 'Table Schemas' list. Then, generate the query.

===Rules for Table Selection
{_numbered(TABLE_SELECTION_RULES)}

===Rules for SQL Generation
{_numbered(TAGGED_GENERATION_RULES)}

===SQL Dialect
{self._dialect}

===Table Schemas
{tables_json}

===Example Queries (for inspiration)
{examples_json}

===Question
{question}
"""


class SchemaPromptComposer:
    """Builds a prompt from the full live schema, answered with bare SQL."""

    def __init__(self, dialect: str = "PostgreSQL", row_limit: int = 100) -> None:
        """Initialize the composer.

        Args:
            dialect: Target SQL dialect
            row_limit: LIMIT the model is told to add
        """
        self._dialect = dialect
        self._row_limit = row_limit

    def describe_tables(self, tables: list[TableSchema]) -> str:
        """Render tables as `Table:` / `Columns:` blocks."""
        blocks = []
        for table in tables:
            columns = ", ".join(
                f"{c.name} ({c.data_type}{', nullable' if c.nullable else ''})"
                for c in table.columns
            )
            blocks.append(f"Table: {table.name}\nColumns: {columns}")
        return "\n\n".join(blocks)

    def compose(self, question: str, tables: list[TableSchema]) -> str:
        """Compose the generation prompt."""
        rules = [
            "Return ONLY the SQL query, no explanations or markdown",
            f"Use {self._dialect} syntax",
            "Only use SELECT statements (no INSERT, UPDATE, DELETE, DROP, etc.)",
            f"Add LIMIT {self._row_limit} to prevent returning too many rows",
            "Use proper JOINs when needed",
            "The query must be valid and executable",
        ]
        return f"""You are a {self._dialect} expert. Generate a SQL query to answer the user's question.

DATABASE SCHEMA:
{self.describe_tables(tables)}

RULES:
{_numbered(rules)}

USER QUESTION:
{question}

SQL QUERY:"""
