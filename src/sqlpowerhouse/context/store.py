"""Vector context store clients.

The store holds two named indexes: table summaries and historical query
intents. The enrichment jobs write them; the retriever only reads. Raw
metadata is validated into `ContextMetadata` here, at the boundary.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sqlpowerhouse.core.types import ContextEntry, ContextMetadata
from sqlpowerhouse.exceptions import ContextUnavailable

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


@dataclass
class IndexInfo:
    """What an index knows about the vectors it stores."""

    name: str
    model: str | None = None
    dimensions: int | None = None
    count: int | None = None


def to_entry(entry_id: str, metadata: Any, score: float | None = None) -> ContextEntry:
    """Validate a raw match into a ContextEntry.

    Raises:
        ContextUnavailable: If the metadata payload is malformed
    """
    try:
        if isinstance(metadata, str):
            metadata = json.loads(metadata)
        parsed = ContextMetadata.model_validate(metadata or {})
    except ValidationError as e:
        raise ContextUnavailable(
            f"Context entry '{entry_id}' has malformed metadata: {e.error_count()} error(s)",
            {"entry_id": entry_id, "fields": [".".join(map(str, err["loc"])) for err in e.errors()]},
        ) from e
    except json.JSONDecodeError as e:
        raise ContextUnavailable(
            f"Context entry '{entry_id}' has non-JSON metadata: {e}", {"entry_id": entry_id}
        ) from e
    return ContextEntry(id=entry_id, metadata=parsed, score=score)


class ContextStore(ABC):
    """Interface for vector context stores."""

    @abstractmethod
    def query(self, index_name: str, vector: list[float], top_k: int) -> list[ContextEntry]:
        """Return the `top_k` nearest entries, most similar first.

        Raises:
            ContextUnavailable: If the store cannot be queried
        """
        ...

    @abstractmethod
    def upsert(self, index_name: str, entries: list[ContextEntry]) -> int:
        """Insert or replace entries by id.

        Returns:
            Number of entries written
        """
        ...

    def index_info(self, index_name: str) -> IndexInfo:
        """Describe an index. Stores that track nothing return an empty IndexInfo."""
        return IndexInfo(name=index_name)


class PgVectorContextStore(ContextStore):
    """Context store backed by PostgreSQL + pgvector.

    All indexes share one table keyed by (index_name, id). Similarity is
    cosine distance through the HNSW index.
    """

    TABLE = "spw_context_entries"

    def __init__(self, engine: Engine, model_name: str | None = None, dimensions: int = 384) -> None:
        """Initialize the store.

        Args:
            engine: SQLAlchemy engine for the database holding the vectors
            model_name: Embedding model recorded on upsert
            dimensions: Vector size of the embedding column
        """
        self._engine = engine
        self._model_name = model_name
        self._dimensions = dimensions

    def ensure_tables(self) -> None:
        """Create the pgvector extension, table and indexes if missing."""
        with self._engine.begin() as conn:
            conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            conn.execute(
                text(f"""
                CREATE TABLE IF NOT EXISTS {self.TABLE} (
                    index_name VARCHAR(255) NOT NULL,
                    id VARCHAR(255) NOT NULL,
                    embedding vector({self._dimensions}) NOT NULL,
                    model VARCHAR(100),
                    metadata JSONB NOT NULL DEFAULT '{{}}'::jsonb,
                    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                    PRIMARY KEY (index_name, id)
                )
            """)
            )
            conn.execute(
                text(f"""
                CREATE INDEX IF NOT EXISTS ix_{self.TABLE}_embedding
                ON {self.TABLE} USING hnsw (embedding vector_cosine_ops)
            """)
            )

    def query(self, index_name: str, vector: list[float], top_k: int) -> list[ContextEntry]:
        """Nearest-neighbour lookup by cosine distance."""
        embedding_str = "[" + ",".join(str(x) for x in vector) + "]"
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(
                    text(f"""
                    SELECT id, metadata, 1 - (embedding <=> CAST(:embedding AS vector)) AS score
                    FROM {self.TABLE}
                    WHERE index_name = :index_name
                    ORDER BY embedding <=> CAST(:embedding AS vector)
                    LIMIT :top_k
                """),
                    {"embedding": embedding_str, "index_name": index_name, "top_k": top_k},
                ).fetchall()
        except SQLAlchemyError as e:
            raise ContextUnavailable(
                f"pgvector query on '{index_name}' failed: {e}", {"index": index_name}
            ) from e

        return [to_entry(row[0], row[1], float(row[2])) for row in rows]

    def upsert(self, index_name: str, entries: list[ContextEntry]) -> int:
        """Insert or replace entries."""
        if not entries:
            return 0

        params = [
            {
                "index_name": index_name,
                "id": entry.id,
                "embedding": "[" + ",".join(str(x) for x in entry.vector) + "]",
                "model": self._model_name,
                "metadata": json.dumps(entry.metadata.to_payload()),
            }
            for entry in entries
        ]
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text(f"""
                INSERT INTO {self.TABLE} (index_name, id, embedding, model, metadata)
                VALUES (:index_name, :id, CAST(:embedding AS vector), :model, CAST(:metadata AS jsonb))
                ON CONFLICT (index_name, id) DO UPDATE SET
                    embedding = EXCLUDED.embedding,
                    model = EXCLUDED.model,
                    metadata = EXCLUDED.metadata,
                    updated_at = NOW()
            """),
                    params,
                )
        except SQLAlchemyError as e:
            raise ContextUnavailable(
                f"Upsert into index '{index_name}' failed: {e}", {"index": index_name}
            ) from e
        return len(entries)

    def index_info(self, index_name: str) -> IndexInfo:
        """Report the model and vector size recorded for an index."""
        try:
            with self._engine.connect() as conn:
                row = conn.execute(
                    text(f"""
                    SELECT MIN(model), MIN(vector_dims(embedding)), COUNT(*)
                    FROM {self.TABLE}
                    WHERE index_name = :index_name
                """),
                    {"index_name": index_name},
                ).fetchone()
        except SQLAlchemyError as e:
            raise ContextUnavailable(
                f"Could not describe index '{index_name}': {e}", {"index": index_name}
            ) from e

        if row is None or not row[2]:
            return IndexInfo(name=index_name, count=0)
        return IndexInfo(name=index_name, model=row[0], dimensions=row[1], count=row[2])


class PineconeContextStore(ContextStore):
    """Context store backed by Pinecone serverless indexes.

    Each logical index maps to a Pinecone index of the same name. Pinecone
    does not record the embedding model, so only the dimension is checked.
    """

    def __init__(self, api_key: str | None = None) -> None:
        """Initialize the Pinecone client.

        Args:
            api_key: Pinecone API key. Falls back to PINECONE_API_KEY env var.
        """
        try:
            from pinecone import Pinecone
        except ImportError as e:
            raise ImportError(
                "pinecone is required for the Pinecone context store. "
                "Install it with: pip install sqlpowerhouse[pinecone]"
            ) from e

        self._client = Pinecone(api_key=api_key) if api_key else Pinecone()
        self._indexes: dict[str, Any] = {}

    def _index(self, index_name: str) -> Any:
        if index_name not in self._indexes:
            self._indexes[index_name] = self._client.Index(index_name)
        return self._indexes[index_name]

    def query(self, index_name: str, vector: list[float], top_k: int) -> list[ContextEntry]:
        """Nearest-neighbour lookup with metadata."""
        try:
            response = self._index(index_name).query(
                vector=vector, top_k=top_k, include_metadata=True
            )
        except Exception as e:
            raise ContextUnavailable(
                f"Pinecone query on '{index_name}' failed: {e}", {"index": index_name}
            ) from e

        return [to_entry(m.id, m.metadata, m.score) for m in response.matches]

    def upsert(self, index_name: str, entries: list[ContextEntry]) -> int:
        """Upsert vectors with their metadata payloads."""
        if not entries:
            return 0
        vectors = [
            {"id": e.id, "values": e.vector, "metadata": e.metadata.to_payload()}
            for e in entries
        ]
        try:
            self._index(index_name).upsert(vectors=vectors)
        except Exception as e:
            raise ContextUnavailable(
                f"Pinecone upsert into '{index_name}' failed: {e}", {"index": index_name}
            ) from e
        return len(entries)

    def index_info(self, index_name: str) -> IndexInfo:
        """Report the index dimension and vector count."""
        try:
            stats = self._index(index_name).describe_index_stats()
        except Exception as e:
            raise ContextUnavailable(
                f"Could not describe Pinecone index '{index_name}': {e}", {"index": index_name}
            ) from e
        return IndexInfo(
            name=index_name,
            dimensions=stats.dimension,
            count=stats.total_vector_count,
        )
