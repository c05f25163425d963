"""Database factory functions for creating database instances."""

from pathlib import Path
from typing import Optional

from spendsync.config import get_settings
from spendsync.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks SPENDSYNC_DB_PATH
            environment variable, then defaults to ~/.spendsync/spendsync.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite (not yet connected)
    """
    if database_path is None:
        database_path = get_settings().database_path

    if database_path is None:
        db_dir = Path.home() / ".spendsync"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "spendsync.db")

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")
