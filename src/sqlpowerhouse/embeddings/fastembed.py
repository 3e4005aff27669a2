"""Local FastEmbed provider for the context indexes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlpowerhouse.embeddings.provider import EmbeddingProvider
from sqlpowerhouse.exceptions import ContextUnavailable

if TYPE_CHECKING:
    from fastembed import TextEmbedding

logger = logging.getLogger(__name__)


class FastEmbedProvider(EmbeddingProvider):
    """Embeds questions, table summaries and query intents locally (ONNX).

    BAAI/bge-small-en-v1.5 (384 dimensions) is what the sync jobs write unless
    configured otherwise. Any model fastembed supports can be named; its
    vector size is read from fastembed's model registry.
    """

    DEFAULT_MODEL = "BAAI/bge-small-en-v1.5"

    def __init__(self, model: str = DEFAULT_MODEL) -> None:
        """Load the model.

        Args:
            model: fastembed model name

        Raises:
            ImportError: If fastembed is not installed
            ValueError: If fastembed does not know the model
        """
        try:
            from fastembed import TextEmbedding
        except ImportError as e:
            raise ImportError(
                "fastembed is required for local embeddings. "
                "Install it with: pip install sqlpowerhouse[fastembed]"
            ) from e

        dimensions = {
            entry["model"]: entry["dim"] for entry in TextEmbedding.list_supported_models()
        }
        if model not in dimensions:
            raise ValueError(f"Unsupported fastembed model: {model}")

        logger.info(f"Loading fastembed model {model}")
        self._model_name = model
        self._dimensions: int = dimensions[model]
        self._model: TextEmbedding = TextEmbedding(model_name=model)

    def embed(self, text: str) -> list[float]:
        """Embed one question or summary."""
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts in one pass, preserving input order.

        Raises:
            ContextUnavailable: If the model fails or returns vectors of the wrong size
        """
        if not texts:
            return []
        try:
            # fastembed yields numpy arrays lazily
            vectors = [emb.tolist() for emb in self._model.embed(texts)]
        except Exception as e:
            raise ContextUnavailable(
                f"fastembed failed to embed {len(texts)} text(s) with {self._model_name}: {e}",
                {"model": self._model_name},
            ) from e
        return self._checked(vectors, len(texts))

    def _checked(self, vectors: list[list[float]], expected: int) -> list[list[float]]:
        if len(vectors) != expected or any(len(v) != self._dimensions for v in vectors):
            raise ContextUnavailable(
                f"fastembed returned unexpected vectors for {self._model_name}",
                {"model": self._model_name, "dimensions": self._dimensions},
            )
        return vectors

    @property
    def dimensions(self) -> int:
        """Vector dimensions."""
        return self._dimensions

    @property
    def model_name(self) -> str:
        """Model identifier recorded by the context indexes."""
        return self._model_name
