"""AI-free SQL synthesis by keyword templates.

A deterministic baseline over the demo commerce schema (users, products,
orders, order_items). It needs no model and no context store, which makes
it the strategy of choice for local demos and end-to-end tests.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlpowerhouse.exceptions import NoQueryProduced
from sqlpowerhouse.query.synthesizer import Synthesizer

if TYPE_CHECKING:
    from sqlpowerhouse.core.types import TableSchema

# (trigger word, predicate) pairs; first hit wins, so "inactive" precedes "active"
USER_STATUS_FILTERS = (
    ("inactive", "status = 'inactive'"),
    ("active", "status = 'active'"),
)
ORDER_STATUS_FILTERS = (
    ("completed", "status = 'completed'"),
    ("pending", "status = 'pending'"),
    ("cancelled", "status = 'cancelled'"),
)
PRODUCT_CATEGORY_FILTERS = (
    ("electronics", "category = 'Electronics'"),
    ("furniture", "category = 'Furniture'"),
    ("stationery", "category = 'Stationery'"),
)

DEFAULT_ROW_LIMIT = 100
DEFAULT_RECENT_DAYS = 30


def _where(question: str, filters: tuple[tuple[str, str], ...]) -> str:
    for word, predicate in filters:
        if word in question:
            return f" WHERE {predicate}"
    return ""


def _recent_days(question: str) -> int:
    match = re.search(r"(\d+)\s*days?", question)
    return int(match.group(1)) if match else DEFAULT_RECENT_DAYS


@dataclass(frozen=True)
class QueryTemplate:
    """A keyword-triggered SQL template."""

    name: str
    tables: tuple[str, ...]
    triggers: tuple[tuple[str, ...], ...]
    """Alternatives; a template matches when every word of one alternative occurs."""
    build: Callable[[str], str]

    def matches(self, question: str) -> bool:
        """Check the lower-cased question against the triggers."""
        return any(all(word in question for word in words) for words in self.triggers)


TEMPLATES: tuple[QueryTemplate, ...] = (
    QueryTemplate(
        name="count_users",
        tables=("users",),
        triggers=(("count", "users"),),
        build=lambda q: f"SELECT COUNT(*) as total FROM users{_where(q, USER_STATUS_FILTERS)}",
    ),
    QueryTemplate(
        name="count_products",
        tables=("products",),
        triggers=(("count", "products"),),
        build=lambda q: (
            f"SELECT COUNT(*) as total FROM products{_where(q, PRODUCT_CATEGORY_FILTERS)}"
        ),
    ),
    QueryTemplate(
        name="count_orders",
        tables=("orders",),
        triggers=(("count", "orders"),),
        build=lambda q: f"SELECT COUNT(*) as total FROM orders{_where(q, ORDER_STATUS_FILTERS)}",
    ),
    QueryTemplate(
        name="total_revenue",
        tables=("orders",),
        triggers=(("total revenue",), ("total sales",)),
        build=lambda q: (
            "SELECT SUM(total_amount) as total_revenue FROM orders WHERE status = 'completed'"
        ),
    ),
    QueryTemplate(
        name="orders_by_user",
        tables=("users", "orders"),
        triggers=(("orders by user",), ("user orders",)),
        build=lambda q: (
            "SELECT u.name, u.email, COUNT(o.id) as order_count, "
            "SUM(o.total_amount) as total_spent\n"
            "FROM users u\n"
            "LEFT JOIN orders o ON u.id = o.user_id\n"
            "GROUP BY u.id, u.name, u.email\n"
            "ORDER BY order_count DESC"
        ),
    ),
    QueryTemplate(
        name="top_products",
        tables=("products", "order_items"),
        triggers=(("top products",), ("popular products",)),
        build=lambda q: (
            "SELECT p.name, p.category, COUNT(oi.id) as times_ordered, "
            "SUM(oi.quantity) as total_quantity\n"
            "FROM products p\n"
            "JOIN order_items oi ON p.id = oi.product_id\n"
            "GROUP BY p.id, p.name, p.category\n"
            "ORDER BY times_ordered DESC\n"
            "LIMIT 10"
        ),
    ),
    QueryTemplate(
        name="recent_orders",
        tables=("orders",),
        triggers=(("recent orders",),),
        build=lambda q: (
            "SELECT * FROM orders\n"
            f"WHERE created_at >= NOW() - INTERVAL '{_recent_days(q)} days'\n"
            "ORDER BY created_at DESC\n"
            f"LIMIT {DEFAULT_ROW_LIMIT}"
        ),
    ),
    QueryTemplate(
        name="products_by_category",
        tables=("products",),
        triggers=(("product", "category"),),
        build=lambda q: (
            "SELECT category, COUNT(*) as product_count, AVG(price) as avg_price\n"
            "FROM products\n"
            "GROUP BY category\n"
            "ORDER BY product_count DESC"
        ),
    ),
    QueryTemplate(
        name="list_users",
        tables=("users",),
        triggers=(("users",),),
        build=lambda q: (
            f"SELECT * FROM users{_where(q, USER_STATUS_FILTERS)} LIMIT {DEFAULT_ROW_LIMIT}"
        ),
    ),
    QueryTemplate(
        name="list_products",
        tables=("products",),
        triggers=(("products",),),
        build=lambda q: (
            f"SELECT * FROM products{_where(q, PRODUCT_CATEGORY_FILTERS)} LIMIT {DEFAULT_ROW_LIMIT}"
        ),
    ),
    QueryTemplate(
        name="list_orders",
        tables=("orders",),
        triggers=(("orders",),),
        build=lambda q: (
            f"SELECT * FROM orders{_where(q, ORDER_STATUS_FILTERS)} LIMIT {DEFAULT_ROW_LIMIT}"
        ),
    ),
)

EXAMPLE_QUESTIONS = [
    "Show all users",
    "Count products",
    "Total revenue",
    "Top products",
    "Orders by user",
    "Recent orders",
]


class PatternSynthesizer(Synthesizer):
    """Matches the question against keyword templates.

    Only templates whose tables exist in the live schema are eligible. The
    same question over the same schema always yields the same SQL.
    """

    name = "pattern"
    requires_schema = True

    def __init__(self, templates: tuple[QueryTemplate, ...] = TEMPLATES) -> None:
        self._templates = templates

    def match(self, question: str, schema: list[TableSchema]) -> QueryTemplate | None:
        """Return the first eligible template for the question, if any."""
        lowered = question.lower()
        available = {table.name for table in schema}
        for template in self._templates:
            if template.matches(lowered) and set(template.tables) <= available:
                return template
        return None

    def synthesize(self, question: str, schema: list[TableSchema] | None = None) -> str:
        """Build SQL from the first matching template.

        Raises:
            NoQueryProduced: If no template matches, listing the available tables
        """
        schema = schema or []
        template = self.match(question, schema)
        if template is None:
            table_names = ", ".join(t.name for t in schema) or "none"
            examples = ", ".join(f'"{q}"' for q in EXAMPLE_QUESTIONS)
            raise NoQueryProduced(
                f"I couldn't understand your question. Available tables: {table_names}. "
                f"Try queries like: {examples}"
            )
        return template.build(question.lower())
