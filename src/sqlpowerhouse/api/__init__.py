"""HTTP API for SQL Powerhouse."""

from sqlpowerhouse.api.app import create_app

__all__ = ["create_app"]
