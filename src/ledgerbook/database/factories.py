"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from ledgerbook.database.memory import InMemoryDatabase
from ledgerbook.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks LEDGERBOOK_DB_PATH
            environment variable, then defaults to ~/.ledgerbook/ledgerbook.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("LEDGERBOOK_DB_PATH")

    if database_path is None:
        # Default to ~/.ledgerbook/ledgerbook.db
        db_dir = Path.home() / ".ledgerbook"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "ledgerbook.db")

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_database(
    database_url: Optional[str] = None, database_path: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create a database from a SQLAlchemy URL, falling back to SQLite.

    Args:
        database_url: Any SQLAlchemy URL. If None, checks LEDGERBOOK_DB_URL.
        database_path: SQLite path used when no URL is configured
    """
    if database_url is None:
        database_url = os.environ.get("LEDGERBOOK_DB_URL")
    if database_url:
        return SQLAlchemyDatabase(database_url)
    return create_sqlite_database(database_path)


def create_memory_database() -> InMemoryDatabase:
    """Create an empty in-memory database."""
    return InMemoryDatabase()
