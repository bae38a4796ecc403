"""Database layer for pocketledger."""

from pocketledger.database.base import Database
from pocketledger.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
