"""Database layer for wealthtrack application."""

from wealthtrack.database.base import Database
from wealthtrack.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
