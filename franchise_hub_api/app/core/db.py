"""
SQLite database integration and simple migration system.

The marketplace keeps its state as whole-collection JSON documents in a
single key-value table, so the schema is small.  This module provides
connections (``get_connection``/``get_cursor``) and applies versioned
migrations on application start (``init_db``).

Applied migration versions are stored in the ``migrations`` table and
new migrations are executed in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings


logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: key-value storage for serialized collections
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS storage (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """,
    ),
    # Migration 2: track the size of each stored document
    (
        2,
        """
        -- Size in characters of the serialized value.  Lets operators spot
        -- runaway collections without parsing the JSON.
        ALTER TABLE storage ADD COLUMN size INTEGER NOT NULL DEFAULT 0;
        """,
    ),
]


def is_memory_database() -> bool:
    return settings.database_url == MEMORY_DATABASE


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # franchise_hub_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection with dict-like rows."""
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor, commits and closes on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version and applies newer entries of ``MIGRATIONS``.
    Does nothing for the in-memory backend.
    """
    if is_memory_database():
        return
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
