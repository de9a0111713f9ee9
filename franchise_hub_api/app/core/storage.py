"""
Key-value storage backends.

The store persists each collection as one JSON string under one key, in
the manner of browser ``localStorage``.  Two interchangeable backends
implement the four operations the store needs:

* ``SQLiteStorage`` writes to the ``storage`` table created by
  ``core.db.init_db``.
* ``MemoryStorage`` keeps values in a dict and is used when
  ``DATABASE_URL`` is ``:memory:``.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol

from .db import get_cursor, is_memory_database


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> List[str]: ...


class MemoryStorage:
    """Dict-backed storage.  Contents are lost when the process exits."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._items)


class SQLiteStorage:
    """Storage backed by the ``storage`` table.

    Every call opens its own connection through ``get_cursor`` and
    commits before returning, so a successful ``set_item`` is durable.
    """

    def get_item(self, key: str) -> Optional[str]:
        with get_cursor() as cursor:
            row = cursor.execute(
                "SELECT value FROM storage WHERE key = ?", (key,)
            ).fetchone()
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        with get_cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO storage (key, value, size, updated_at)
                VALUES (?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    size = excluded.size,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (key, value, len(value)),
            )

    def remove_item(self, key: str) -> None:
        with get_cursor() as cursor:
            cursor.execute("DELETE FROM storage WHERE key = ?", (key,))

    def keys(self) -> List[str]:
        with get_cursor() as cursor:
            rows = cursor.execute("SELECT key FROM storage ORDER BY key").fetchall()
        return [row["key"] for row in rows]


def build_storage() -> KeyValueStorage:
    """Return the backend selected by ``settings.database_url``."""
    if is_memory_database():
        return MemoryStorage()
    return SQLiteStorage()
