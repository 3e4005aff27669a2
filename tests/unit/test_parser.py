"""Tests for model response parsing."""

import pytest

from sqlpowerhouse.exceptions import MalformedResponse, NoQueryProduced
from sqlpowerhouse.query.parser import (
    ExplanationSection,
    QuerySection,
    parse_fenced,
    parse_tagged,
    read_tagged,
    strip_code_fences,
)


class TestReadTagged:
    """Tests for the tagged response grammar."""

    def test_query_section(self) -> None:
        """The canonical closing tag is accepted."""
        section = read_tagged("<@query@>SELECT 1</@query@>")
        assert section == QuerySection(sql="SELECT 1")

    def test_alternate_closing_tag(self) -> None:
        """The `<@/query@>` spelling is accepted too."""
        section = read_tagged("<@query@> SELECT 1 <@/query@>")
        assert section == QuerySection(sql="SELECT 1")

    def test_multiline_query_is_trimmed(self) -> None:
        raw = '<@query@>\nSELECT "name"\nFROM "users"\n</@query@>'
        assert read_tagged(raw) == QuerySection(sql='SELECT "name"\nFROM "users"')

    def test_fences_inside_query_stripped(self) -> None:
        raw = "<@query@>\n```sql\nSELECT 1\n```\n</@query@>"
        assert read_tagged(raw) == QuerySection(sql="SELECT 1")

    def test_explanation_section(self) -> None:
        section = read_tagged("<@explanation@>missing table X</@explanation@>")
        assert section == ExplanationSection(text="missing table X")

    def test_unterminated_explanation(self) -> None:
        """An explanation runs to the end of the text when not closed."""
        section = read_tagged("<@explanation@>  no sales data available  ")
        assert section == ExplanationSection(text="no sales data available")

    def test_blank_query_falls_back_to_explanation(self) -> None:
        raw = "<@query@>  </@query@><@explanation@>cannot answer</@explanation@>"
        assert read_tagged(raw) == ExplanationSection(text="cannot answer")

    def test_query_wins_over_explanation(self) -> None:
        raw = "<@explanation@>partial</@explanation@><@query@>SELECT 1</@query@>"
        assert read_tagged(raw) == QuerySection(sql="SELECT 1")

    def test_no_tags_is_malformed(self) -> None:
        with pytest.raises(MalformedResponse) as exc_info:
            read_tagged("SELECT 1")
        assert exc_info.value.raw_response == "SELECT 1"

    def test_unclosed_query_is_malformed(self) -> None:
        with pytest.raises(MalformedResponse):
            read_tagged("<@query@>SELECT 1")


class TestParseTagged:
    """Tests for parse_tagged."""

    def test_round_trip(self) -> None:
        """Wrapping a statement in query tags and parsing returns it unchanged."""
        sql = 'SELECT "status", COUNT(*) FROM "orders" GROUP BY "status"'
        assert parse_tagged(f"<@query@>{sql}</@query@>") == sql

    def test_explanation_raises_no_query_produced(self) -> None:
        """The explanation text is carried verbatim."""
        with pytest.raises(NoQueryProduced) as exc_info:
            parse_tagged("<@explanation@>missing table X</@explanation@>")
        assert exc_info.value.explanation == "missing table X"
        assert "missing table X" in exc_info.value.message


class TestParseFenced:
    """Tests for the fenced/bare response grammar."""

    def test_fenced_sql(self) -> None:
        assert parse_fenced("```sql\nSELECT * FROM users LIMIT 100\n```") == (
            "SELECT * FROM users LIMIT 100"
        )

    def test_bare_sql(self) -> None:
        assert parse_fenced("SELECT 1") == "SELECT 1"

    def test_prose_and_comments_dropped(self) -> None:
        raw = (
            "Here is the query you asked for:\n"
            "```sql\n"
            "-- count users\n"
            "SELECT COUNT(*) FROM users\n"
            "```\n"
            "This query counts all users."
        )
        assert parse_fenced(raw) == "SELECT COUNT(*) FROM users"

    def test_with_statement_accepted(self) -> None:
        raw = "WITH t AS (SELECT 1 AS x)\nSELECT x FROM t"
        assert parse_fenced(raw) == raw

    def test_pure_prose_is_malformed(self) -> None:
        """Prose without a statement is not SQL."""
        with pytest.raises(MalformedResponse):
            parse_fenced("I'm sorry, I cannot answer that question.")

    def test_empty_response_is_malformed(self) -> None:
        with pytest.raises(MalformedResponse):
            parse_fenced("```sql\n```")


class TestStripCodeFences:
    """Tests for strip_code_fences."""

    def test_no_fences(self) -> None:
        assert strip_code_fences("  SELECT 1  ") == "SELECT 1"

    def test_plain_fence(self) -> None:
        assert strip_code_fences("```\nSELECT 1\n```") == "SELECT 1"
