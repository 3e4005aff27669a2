"""Query synthesis, parsing and validation for SQLPowerhouse."""

from sqlpowerhouse.query.parser import (
    ExplanationSection,
    QuerySection,
    parse_fenced,
    parse_tagged,
    read_tagged,
)
from sqlpowerhouse.query.patterns import PatternSynthesizer, QueryTemplate
from sqlpowerhouse.query.prompt import SchemaPromptComposer, TaggedPromptComposer
from sqlpowerhouse.query.synthesizer import (
    RetrievalSynthesizer,
    SchemaSynthesizer,
    Synthesizer,
)
from sqlpowerhouse.query.validator import SQLValidator, ValidationResult

__all__ = [
    "ExplanationSection",
    "PatternSynthesizer",
    "QuerySection",
    "QueryTemplate",
    "RetrievalSynthesizer",
    "SQLValidator",
    "SchemaPromptComposer",
    "SchemaSynthesizer",
    "Synthesizer",
    "TaggedPromptComposer",
    "ValidationResult",
    "parse_fenced",
    "parse_tagged",
    "read_tagged",
]
