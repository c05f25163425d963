"""Database layer for spendsync."""

from spendsync.database.base import Database
from spendsync.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
