"""Model response parsing.

Two output grammars, one per prompt variant:

Tagged (retrieval prompt)::

    <@query@> SQL </@query@>          -> QuerySection
    <@explanation@> text [close tag]  -> ExplanationSection

Closing tags are accepted as both ``</@query@>`` and ``<@/query@>``.

Fenced (schema prompt)::

    ```sql
    SQL
    ```

Parsing is purely textual. Whether the SQL is any good is the validator's job.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from sqlpowerhouse.exceptions import MalformedResponse, NoQueryProduced

logger = logging.getLogger(__name__)

QUERY_TAG = "query"
EXPLANATION_TAG = "explanation"


def open_tag(name: str) -> str:
    """Opening marker, e.g. ``<@query@>``."""
    return f"<@{name}@>"


def close_tag(name: str) -> str:
    """Canonical closing marker, e.g. ``</@query@>``."""
    return f"</@{name}@>"


def _close_pattern(name: str) -> str:
    return rf"(?:</@{name}@>|<@/{name}@>)"


_QUERY_RE = re.compile(rf"<@{QUERY_TAG}@>(.*?){_close_pattern(QUERY_TAG)}", re.DOTALL)
_EXPLANATION_RE = re.compile(
    rf"<@{EXPLANATION_TAG}@>(.*?)(?:{_close_pattern(EXPLANATION_TAG)}|\Z)", re.DOTALL
)
_OPENING_FENCE_RE = re.compile(r"^```[a-zA-Z]*[ \t]*\n?")
_CLOSING_FENCE_RE = re.compile(r"\n?```\s*$")
_PROSE_PREFIXES = ("here", "this query")
_STATEMENT_OPENERS = ("select", "with", "(")


@dataclass(frozen=True)
class QuerySection:
    """The model produced a query."""

    sql: str


@dataclass(frozen=True)
class ExplanationSection:
    """The model explained why it could not produce a query."""

    text: str


TaggedResponse = QuerySection | ExplanationSection


def strip_code_fences(text: str) -> str:
    """Remove one leading and one trailing markdown fence, if present."""
    stripped = text.strip()
    stripped = _OPENING_FENCE_RE.sub("", stripped, count=1)
    stripped = _CLOSING_FENCE_RE.sub("", stripped, count=1)
    return stripped.strip()


def read_tagged(raw: str) -> TaggedResponse:
    """Read a tagged response into one of its two variants.

    A query section wins over an explanation section; a blank query section
    counts as absent.

    Raises:
        MalformedResponse: If neither a query nor an explanation is present
    """
    query_match = _QUERY_RE.search(raw)
    if query_match:
        sql = strip_code_fences(query_match.group(1))
        if sql:
            return QuerySection(sql=sql)

    explanation_match = _EXPLANATION_RE.search(raw)
    if explanation_match:
        explanation = explanation_match.group(1).strip()
        if explanation:
            return ExplanationSection(text=explanation)

    raise MalformedResponse(
        "Invalid response format from model: expected a "
        f"{open_tag(QUERY_TAG)} or {open_tag(EXPLANATION_TAG)} section.",
        raw,
    )


def parse_tagged(raw: str) -> str:
    """Extract the SQL from a tagged response.

    Raises:
        NoQueryProduced: If the model answered with an explanation
        MalformedResponse: If the response matches neither variant
    """
    section = read_tagged(raw)
    if isinstance(section, ExplanationSection):
        logger.info(f"Model explained instead of answering: {section.text[:200]}")
        raise NoQueryProduced(section.text)

    logger.debug(f"Extracted tagged query ({len(section.sql)} chars)")
    return section.sql


def parse_fenced(raw: str) -> str:
    """Extract the SQL from a bare or fenced-code response.

    Fences are stripped, then blank lines, ``--`` comments and lines of
    conversational prose are dropped.

    Raises:
        MalformedResponse: If nothing statement-like remains
    """
    has_fence = "```" in raw
    body = strip_code_fences(raw)

    lines = []
    for line in body.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith(("--", "```")):
            continue
        if trimmed.lower().startswith(_PROSE_PREFIXES):
            continue
        lines.append(line)

    sql = "\n".join(lines).strip()
    if not sql:
        raise MalformedResponse("Model response contained no SQL.", raw)

    if not has_fence and not sql.lower().startswith(_STATEMENT_OPENERS):
        raise MalformedResponse("Model response is prose, not a SQL statement.", raw)

    logger.debug(f"Extracted fenced query ({len(sql)} chars)")
    return sql
