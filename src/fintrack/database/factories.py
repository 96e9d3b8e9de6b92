"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from fintrack.database.sqlalchemy_db import SQLAlchemyDatabase

DEFAULT_USER_ID = "local"


def _resolve_user(user_id: Optional[str]) -> str:
    if user_id is None:
        user_id = os.environ.get("FINTRACK_USER")
    return user_id or DEFAULT_USER_ID


def create_sqlite_database(database_path: Optional[str] = None, user_id: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FINTRACK_DB_PATH
            environment variable, then defaults to ~/.fintrack/fintrack.db
        user_id: Owning user. If None, checks FINTRACK_USER, then defaults to "local"

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("FINTRACK_DB_PATH")

    if database_path is None:
        db_dir = Path.home() / ".fintrack"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "fintrack.db")

    database = SQLAlchemyDatabase(f"sqlite:///{database_path}", user_id=_resolve_user(user_id))
    database.database_path = database_path
    return database


def create_database(database_url: str, user_id: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database instance for any SQLAlchemy URL."""
    return SQLAlchemyDatabase(database_url, user_id=_resolve_user(user_id))
