"""Live database schema inspection."""

from sqlpowerhouse.schema.inspector import SchemaInspector

__all__ = ["SchemaInspector"]
