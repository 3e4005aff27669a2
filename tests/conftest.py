"""Shared test fixtures for SQL Powerhouse."""

import hashlib
import math
import os
from collections.abc import Generator
from pathlib import Path

import pytest
from sqlalchemy import create_engine, text

from sqlpowerhouse.context.store import ContextStore, IndexInfo
from sqlpowerhouse.core.connection import DatabaseConnection
from sqlpowerhouse.core.types import ContextEntry, ContextMetadata
from sqlpowerhouse.embeddings.provider import EmbeddingProvider
from sqlpowerhouse.generation.client import GenerationClient

DEMO_SCHEMA = [
    """
    CREATE TABLE users (
        id INTEGER PRIMARY KEY,
        name VARCHAR(255) NOT NULL,
        email VARCHAR(255) NOT NULL UNIQUE,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        status VARCHAR(50) DEFAULT 'active'
    )
    """,
    """
    CREATE TABLE products (
        id INTEGER PRIMARY KEY,
        name VARCHAR(255) NOT NULL,
        description TEXT,
        price DECIMAL(10, 2) NOT NULL,
        category VARCHAR(100),
        stock_quantity INTEGER DEFAULT 0,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE orders (
        id INTEGER PRIMARY KEY,
        user_id INTEGER REFERENCES users(id),
        total_amount DECIMAL(10, 2) NOT NULL,
        status VARCHAR(50) DEFAULT 'pending',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE order_items (
        id INTEGER PRIMARY KEY,
        order_id INTEGER REFERENCES orders(id),
        product_id INTEGER REFERENCES products(id),
        quantity INTEGER NOT NULL,
        price DECIMAL(10, 2) NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
]

DEMO_DATA = [
    """
    INSERT INTO users (name, email, status) VALUES
        ('John Doe', 'john@example.com', 'active'),
        ('Jane Smith', 'jane@example.com', 'active'),
        ('Bob Johnson', 'bob@example.com', 'inactive'),
        ('Alice Williams', 'alice@example.com', 'active'),
        ('Charlie Brown', 'charlie@example.com', 'active')
    """,
    """
    INSERT INTO products (name, description, price, category, stock_quantity) VALUES
        ('Laptop', 'High-performance laptop', 1299.99, 'Electronics', 50),
        ('Mouse', 'Wireless mouse', 29.99, 'Electronics', 200),
        ('Desk Chair', 'Ergonomic office chair', 299.99, 'Furniture', 30),
        ('Notebook', 'Spiral notebook pack', 9.99, 'Stationery', 500)
    """,
    """
    INSERT INTO orders (user_id, total_amount, status) VALUES
        (1, 1329.98, 'completed'),
        (2, 29.99, 'pending'),
        (3, 9.99, 'cancelled')
    """,
    """
    INSERT INTO order_items (order_id, product_id, quantity, price) VALUES
        (1, 1, 1, 1299.99),
        (1, 2, 1, 29.99),
        (2, 2, 1, 29.99),
        (3, 4, 1, 9.99)
    """,
]


# === Fakes ===


class FakeEmbeddingProvider(EmbeddingProvider):
    """Deterministic bag-of-words embeddings (no model download)."""

    def __init__(self, model: str = "fake-embed", dimensions: int = 256) -> None:
        self._model = model
        self._dimensions = dimensions
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        vector = [0.0] * self._dimensions
        for word in text.lower().split():
            bucket = int(hashlib.md5(word.encode()).hexdigest(), 16) % self._dimensions
            vector[bucket] += 1.0
        norm = math.sqrt(sum(x * x for x in vector)) or 1.0
        return [x / norm for x in vector]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        return [self.embed(t) for t in texts]

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def model_name(self) -> str:
        return self._model


class FakeContextStore(ContextStore):
    """In-memory context store ranking entries by dot product."""

    def __init__(self, model: str | None = "fake-embed") -> None:
        self.indexes: dict[str, dict[str, ContextEntry]] = {}
        self.model = model
        self.queries: list[tuple[str, int]] = []

    def add(self, index_name: str, entry: ContextEntry) -> None:
        self.indexes.setdefault(index_name, {})[entry.id] = entry

    def query(self, index_name: str, vector: list[float], top_k: int) -> list[ContextEntry]:
        self.queries.append((index_name, top_k))
        entries = list(self.indexes.get(index_name, {}).values())
        scored = [
            entry.model_copy(update={"score": sum(a * b for a, b in zip(vector, entry.vector))})
            for entry in entries
        ]
        scored.sort(key=lambda e: e.score or 0.0, reverse=True)
        return scored[:top_k]

    def upsert(self, index_name: str, entries: list[ContextEntry]) -> int:
        for entry in entries:
            self.add(index_name, entry)
        return len(entries)

    def index_info(self, index_name: str) -> IndexInfo:
        entries = self.indexes.get(index_name, {})
        dimensions = len(next(iter(entries.values())).vector) if entries else None
        return IndexInfo(
            name=index_name,
            model=self.model if entries else None,
            dimensions=dimensions,
            count=len(entries),
        )


class FakeGenerationClient(GenerationClient):
    """Returns a canned response (or raises it) and records prompts."""

    def __init__(self, response: str | Exception = "") -> None:
        self.response = response
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    @property
    def model_name(self) -> str:
        return "fake-llm"


# === Database fixtures ===


def seed_demo_database(url: str) -> None:
    """Create and populate the demo commerce schema."""
    engine = create_engine(url)
    with engine.begin() as conn:
        for statement in DEMO_SCHEMA + DEMO_DATA:
            conn.execute(text(statement))
    engine.dispose()


@pytest.fixture
def demo_db_url(tmp_path: Path) -> str:
    """SQLite file database seeded with users, products, orders and order_items."""
    url = f"sqlite:///{tmp_path / 'demo.db'}"
    seed_demo_database(url)
    return url


@pytest.fixture
def empty_db_url(tmp_path: Path) -> str:
    """SQLite file database with no tables."""
    return f"sqlite:///{tmp_path / 'empty.db'}"


@pytest.fixture
def connection(demo_db_url: str) -> Generator[DatabaseConnection, None, None]:
    """Connection to the seeded demo database."""
    conn = DatabaseConnection(demo_db_url)
    yield conn
    conn.close()


# === Fake collaborators ===


@pytest.fixture
def fake_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def fake_store() -> FakeContextStore:
    return FakeContextStore()


@pytest.fixture
def fake_client() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture
def populated_store(
    fake_store: FakeContextStore, fake_provider: FakeEmbeddingProvider
) -> FakeContextStore:
    """Store with table summaries and query intents for the demo schema."""
    tables = [
        ("users", "Customer accounts with name, email and active status", "GOLD"),
        ("orders", "Customer orders with total amount and completion status", "GOLD"),
        ("products", "Product catalog with price, category and stock", "SILVER"),
        ("order_items", "Line items linking orders to products", "BRONZE"),
    ]
    for name, summary, tier in tables:
        fake_store.add(
            "table-summaries",
            ContextEntry(
                id=name,
                vector=fake_provider.embed(summary),
                metadata=ContextMetadata(
                    name=name,
                    summary=summary,
                    table_schema=f"id integer, {name}_field text",
                    tier=tier,
                    domain="SALES",
                ),
            ),
        )
    intents = [
        ("Calculates total revenue from completed orders", 'SELECT SUM("total_amount") FROM "orders"'),
        ("Lists active users", "SELECT * FROM \"users\" WHERE \"status\" = 'value'"),
    ]
    for summary, query in intents:
        fake_store.add(
            "query-intents",
            ContextEntry(
                id=hashlib.md5(query.encode()).hexdigest(),
                vector=fake_provider.embed(summary),
                metadata=ContextMetadata(summary=summary, query=query),
            ),
        )
    fake_provider.calls.clear()
    return fake_store


# === PostgreSQL ===


def _psycopg_available() -> bool:
    """Check if psycopg is installed."""
    try:
        import psycopg  # noqa: F401

        return True
    except ImportError:
        return False


def _postgresql_connectable(url: str) -> bool:
    """Check if we can connect to PostgreSQL."""
    if not _psycopg_available():
        return False
    try:
        conn = DatabaseConnection(url)
        result = conn.test_connection()
        conn.close()
        return result
    except Exception:
        return False


@pytest.fixture
def postgresql_url() -> str:
    """Get PostgreSQL URL from TEST_DATABASE_URL.

    Skips when the variable is unset or the server is unreachable.
    """
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL not set")

    if not _psycopg_available():
        pytest.skip("psycopg not installed")

    if not _postgresql_connectable(url):
        pytest.skip(f"Cannot connect to PostgreSQL at {url}")

    return url

