"""OpenAI embeddings for the context indexes."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from sqlpowerhouse.embeddings.provider import EmbeddingProvider
from sqlpowerhouse.exceptions import ContextUnavailable

if TYPE_CHECKING:
    from openai import OpenAI

logger = logging.getLogger(__name__)


class OpenAIProvider(EmbeddingProvider):
    """Embeds through the OpenAI API.

    text-embedding-3-small is truncated to 384 dimensions by default, the same
    size as the local model, so switching providers needs a re-embed but
    never a new index.
    """

    DEFAULT_MODEL = "text-embedding-3-small"
    DEFAULT_DIMENSIONS = 384

    # Inputs per request accepted by the embeddings endpoint
    MAX_BATCH = 2048

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        dimensions: int = DEFAULT_DIMENSIONS,
        api_key: str | None = None,
    ) -> None:
        """Create the API client.

        Args:
            model: Embedding model name
            dimensions: Vector size requested from the API
            api_key: API key, falls back to OPENAI_API_KEY

        Raises:
            ImportError: If openai is not installed
            ValueError: If no API key is available
        """
        try:
            from openai import OpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for OpenAI embeddings. "
                "Install it with: pip install sqlpowerhouse[openai]"
            ) from e

        api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        self._client: OpenAI = OpenAI(api_key=api_key)
        self._model = model
        self._dimensions = dimensions

    def embed(self, text: str) -> list[float]:
        """Embed one question or summary."""
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed texts in as few requests as possible, preserving input order.

        Raises:
            ContextUnavailable: If the API call fails
        """
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.MAX_BATCH):
            vectors.extend(self._request(texts[start : start + self.MAX_BATCH]))
        return vectors

    def _request(self, texts: list[str]) -> list[list[float]]:
        # The endpoint rejects empty strings
        inputs = [t if t.strip() else " " for t in texts]
        try:
            response = self._client.embeddings.create(
                model=self._model,
                input=inputs,
                dimensions=self._dimensions,
            )
        except Exception as e:
            logger.error(f"OpenAI embedding request failed ({type(e).__name__}): {e}")
            raise ContextUnavailable(
                f"OpenAI failed to embed {len(texts)} text(s) with {self._model}: {e}",
                {"model": self._model},
            ) from e
        return [item.embedding for item in sorted(response.data, key=lambda x: x.index)]

    @property
    def dimensions(self) -> int:
        """Vector dimensions."""
        return self._dimensions

    @property
    def model_name(self) -> str:
        """Model identifier recorded by the context indexes."""
        return self._model
