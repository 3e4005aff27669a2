"""SQL generation orchestrator.

`SQLGenerator.generate` is the one public entry point of the pipeline:

    question -> [schema] -> synthesize -> validate -> SQL

Each stage either hands its output to the next or raises; nothing is
retried and nothing unvalidated is ever returned.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, cast

from sqlpowerhouse.exceptions import InvalidQuestion

if TYPE_CHECKING:
    from sqlpowerhouse.query.synthesizer import Synthesizer
    from sqlpowerhouse.query.validator import SQLValidator
    from sqlpowerhouse.schema.inspector import SchemaInspector

logger = logging.getLogger(__name__)


class SQLGenerator:
    """Turns natural-language questions into validated, read-only SQL.

    Holds no per-request state, so one instance serves concurrent requests.

    Example:
        >>> generator = build_generator(get_settings())
        >>> generator.generate("How many active users are there?")
        "SELECT COUNT(*) as total FROM users WHERE status = 'active'"
    """

    def __init__(
        self,
        synthesizer: Synthesizer,
        validator: SQLValidator,
        inspector: SchemaInspector | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            synthesizer: Strategy producing candidate SQL
            validator: Safety gate every candidate passes through
            inspector: Live schema source, required by schema-aware strategies
        """
        if synthesizer.requires_schema and inspector is None:
            raise ValueError(f"Strategy '{synthesizer.name}' requires a schema inspector")
        self._synthesizer = synthesizer
        self._validator = validator
        self._inspector = inspector

    @property
    def strategy(self) -> str:
        """Name of the configured synthesis strategy."""
        return self._synthesizer.name

    def generate(self, question: str | None) -> str:
        """Generate validated SQL for a question.

        Args:
            question: Natural-language question

        Returns:
            SQL that passed the keyword screen and the database's EXPLAIN

        Raises:
            InvalidQuestion: If the question is missing or blank
            DatabaseUnavailable: If the schema or EXPLAIN connection fails
            ContextUnavailable: If context retrieval fails
            GenerationUnavailable: If the model call fails
            NoQueryProduced: If no query could be produced
            MalformedResponse: If the model ignored the output format
            ForbiddenOperation: If the candidate contains a write keyword
            ValidationFailed: If the database rejects the candidate
        """
        if question is None or not question.strip():
            raise InvalidQuestion()

        question = question.strip()
        logger.info(f"Generating SQL ({self.strategy}) for: {question[:100]}")
        start_time = time.perf_counter()

        try:
            schema = None
            if self._synthesizer.requires_schema:
                schema = cast("SchemaInspector", self._inspector).fetch_schema()
                logger.debug(f"Schema snapshot has {len(schema)} tables")

            candidate = self._synthesizer.synthesize(question, schema)
            logger.debug(f"Candidate SQL: {candidate[:200]}")

            sql = self._validator.check(candidate)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"SQL generation failed after {duration_ms:.1f}ms "
                f"({type(e).__name__}): {e}"
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f"SQL generation completed in {duration_ms:.1f}ms")
        return sql
