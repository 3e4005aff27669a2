"""Embedding provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from sqlpowerhouse.exceptions import ContextUnavailable


@dataclass
class EmbeddingResult:
    """Result of embedding operation."""

    text: str
    embedding: list[float]
    model: str
    dimensions: int


class EmbeddingProvider(ABC):
    """Interface for embedding providers.

    The same provider (same model) must be used by the enrichment jobs that
    write the context indexes and by the retriever that queries them.
    Vectors from different models are not comparable and nothing downstream
    can detect the mismatch.
    """

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: Text to embed.

        Returns:
            Vector embedding as list of floats.
        """
        ...

    @abstractmethod
    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed multiple texts efficiently.

        Args:
            texts: List of texts to embed.

        Returns:
            List of vector embeddings.
        """
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Vector dimensions."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier recorded alongside stored vectors."""
        ...

    def embed_with_metadata(self, text: str) -> EmbeddingResult:
        """Embed text and return with metadata."""
        return EmbeddingResult(
            text=text,
            embedding=self.embed(text),
            model=self.model_name,
            dimensions=self.dimensions,
        )

    def ensure_compatible(self, model_name: str | None, dimensions: int | None = None) -> None:
        """Check that vectors written by `model_name` can be queried with this provider.

        Args:
            model_name: Model recorded by the index, None if the index does not track it
            dimensions: Vector size of the index, None if unknown

        Raises:
            ContextUnavailable: If the index was built with another model or size
        """
        if model_name is not None and model_name != self.model_name:
            raise ContextUnavailable(
                f"Context index was embedded with '{model_name}' but the retriever "
                f"uses '{self.model_name}'. Re-run the sync jobs or pin the same model.",
                {"index_model": model_name, "provider_model": self.model_name},
            )
        if dimensions is not None and dimensions != self.dimensions:
            raise ContextUnavailable(
                f"Context index has {dimensions}-dimensional vectors but "
                f"'{self.model_name}' produces {self.dimensions}.",
                {"index_dimensions": dimensions, "provider_dimensions": self.dimensions},
            )
