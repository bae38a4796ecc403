"""Database factory functions for creating database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from pocketledger.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

DB_PATH_ENV = "POCKETLEDGER_DB_PATH"
DATABASE_URL_ENV = "POCKETLEDGER_DATABASE_URL"
ISOLATION_LEVEL_ENV = "POCKETLEDGER_ISOLATION_LEVEL"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks POCKETLEDGER_DB_PATH
            environment variable, then defaults to ~/.pocketledger/pocketledger.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get(DB_PATH_ENV)

    if database_path is None:
        # Default to ~/.pocketledger/pocketledger.db
        home = Path.home()
        db_dir = home / ".pocketledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "pocketledger.db")

    logger.debug("Using SQLite database at %s", database_path)
    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_database(database_url: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database instance from a SQLAlchemy URL.

    Args:
        database_url: SQLAlchemy URL. If None, checks POCKETLEDGER_DATABASE_URL and
            falls back to the SQLite file database.

    Returns:
        SQLAlchemyDatabase instance
    """
    if database_url is None:
        database_url = os.environ.get(DATABASE_URL_ENV)

    if database_url is None:
        return create_sqlite_database()

    isolation_level = os.environ.get(ISOLATION_LEVEL_ENV)
    logger.debug("Using database URL %s", database_url)
    return SQLAlchemyDatabase(database_url, isolation_level=isolation_level)
