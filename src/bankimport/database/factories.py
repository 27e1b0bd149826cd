"""Database factory functions for creating database instances."""

from pathlib import Path

from bankimport.config import Settings
from bankimport.database.sqlalchemy_db import SQLAlchemyDatabase

SQLITE_PREFIX = "sqlite:///"


def create_database(settings: Settings) -> SQLAlchemyDatabase:
    """Create a database instance for the configured SQLAlchemy URL.

    For SQLite files the parent directory is created first, so the default
    ``~/.bankimport/bankimport.db`` works on a fresh machine.
    """
    if settings.database_url.startswith(SQLITE_PREFIX):
        parent = Path(settings.database_url[len(SQLITE_PREFIX):]).expanduser().parent
        parent.mkdir(parents=True, exist_ok=True)
    return SQLAlchemyDatabase(settings.database_url)
