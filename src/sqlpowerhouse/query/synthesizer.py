"""Synthesis strategies: question (+ schema) -> candidate SQL.

Candidates are unvalidated; the orchestrator always runs them through
`SQLValidator` before anything is returned.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from sqlpowerhouse.exceptions import ContextUnavailable
from sqlpowerhouse.query.parser import parse_fenced, parse_tagged
from sqlpowerhouse.query.prompt import SchemaPromptComposer, TaggedPromptComposer

if TYPE_CHECKING:
    from sqlpowerhouse.context.retriever import ContextRetriever
    from sqlpowerhouse.core.types import TableSchema
    from sqlpowerhouse.generation.client import GenerationClient

logger = logging.getLogger(__name__)


class Synthesizer(ABC):
    """Interface shared by every generation strategy."""

    name: str = "base"

    requires_schema: bool = False
    """Whether `synthesize` needs the live schema snapshot."""

    @abstractmethod
    def synthesize(self, question: str, schema: list[TableSchema] | None = None) -> str:
        """Produce one candidate SQL statement for the question.

        Args:
            question: Non-empty natural-language question
            schema: Live schema, provided when `requires_schema` is True

        Returns:
            Candidate SQL text
        """
        ...


class RetrievalSynthesizer(Synthesizer):
    """Vector-retrieved context -> tagged prompt -> model -> tagged parser."""

    name = "retrieval"

    def __init__(
        self,
        retriever: ContextRetriever,
        client: GenerationClient,
        composer: TaggedPromptComposer | None = None,
        allow_empty_context: bool = False,
    ) -> None:
        """Initialize the strategy.

        Args:
            retriever: Context retriever over the two indexes
            client: Language-model client
            composer: Prompt composer (defaults to PostgreSQL dialect)
            allow_empty_context: Prompt the model even when no table matched
        """
        self._retriever = retriever
        self._client = client
        self._composer = composer or TaggedPromptComposer()
        self._allow_empty_context = allow_empty_context

    def synthesize(self, question: str, schema: list[TableSchema] | None = None) -> str:
        """Retrieve, prompt, generate and parse.

        Raises:
            ContextUnavailable: On retrieval failure or, unless allowed, empty context
            GenerationUnavailable: If the model call fails
            NoQueryProduced: If the model answered with an explanation
            MalformedResponse: If the model ignored the format contract
        """
        context = self._retriever.retrieve(question)
        if context.is_empty and not self._allow_empty_context:
            raise ContextUnavailable(
                "No relevant tables were found for this question. "
                "Check that the schema sync job has populated the table index."
            )

        prompt = self._composer.compose(
            question, context.relevant_tables, context.relevant_example_queries
        )
        logger.debug(f"Invoking {self._client.model_name} with {len(prompt)}-char prompt")
        raw = self._client.generate(prompt)
        logger.debug(f"Received {len(raw)}-char response")
        return parse_tagged(raw)


class SchemaSynthesizer(Synthesizer):
    """Full live schema -> plain prompt -> model -> fenced parser."""

    name = "schema"
    requires_schema = True

    def __init__(self, client: GenerationClient, composer: SchemaPromptComposer | None = None) -> None:
        """Initialize the strategy.

        Args:
            client: Language-model client
            composer: Prompt composer (defaults to PostgreSQL dialect)
        """
        self._client = client
        self._composer = composer or SchemaPromptComposer()

    def synthesize(self, question: str, schema: list[TableSchema] | None = None) -> str:
        """Prompt with the whole schema and parse the bare SQL reply.

        Raises:
            ContextUnavailable: If the database has no tables to describe
            GenerationUnavailable: If the model call fails
            MalformedResponse: If no statement could be extracted
        """
        if not schema:
            raise ContextUnavailable("The database has no tables to generate SQL against.")

        prompt = self._composer.compose(question, schema)
        logger.debug(f"Invoking {self._client.model_name} with {len(prompt)}-char prompt")
        raw = self._client.generate(prompt)
        return parse_fenced(raw)
