"""
Local key-value persistence for advisor state.

Provides the storage used for widget layouts, content overrides, goals and
feature toggles, with key patterns like widgetConfig:{student_id},
override:{field}:{student_id}, goal:{student_id} and featureToggles.

Values are JSON-serializable Python objects. Every write is committed
synchronously; backend failures are raised as StorageError rather than
ignored.
"""

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..errors import CorruptValueError, StorageError


logger = logging.getLogger(__name__)


FEATURE_TOGGLES_KEY = "featureToggles"


def widget_config_key(student_id: str) -> str:
    return f"widgetConfig:{student_id}"


def override_key(field: str, student_id: str) -> str:
    return f"override:{field}:{student_id}"


def goal_key(student_id: str) -> str:
    return f"goal:{student_id}"


def _decode(key: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"Stored value for {key} is not valid JSON: {e}")
        raise CorruptValueError(f"Stored value for {key} is not valid JSON: {e}") from e


class KeyValueStore(ABC):
    """Abstract interface for key-value store implementations."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Get a value, or None if the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a value under a key, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if the key existed."""
        pass

    @abstractmethod
    def keys(self, prefix: Optional[str] = None) -> List[str]:
        """Get all keys, optionally only those starting with a prefix."""
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """
    In-memory store for tests and ephemeral sessions.

    Values are round-tripped through JSON on write so that callers observe the
    same copy semantics as the SQLite backend.
    """

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return _decode(key, raw)

    def set(self, key: str, value: Any) -> None:
        try:
            self._data[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not serializable: {e}") from e

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        all_keys = sorted(self._data.keys())
        if prefix is None:
            return all_keys
        return [key for key in all_keys if key.startswith(prefix)]


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed store; one row per key with a JSON value."""

    def __init__(self, db_path: Union[str, Path] = ".growth_advisor/state.sqlite3"):
        self.db_path = Path(db_path)
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_database(self):
        """Initialize SQLite database with the key-value table."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._connect() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,  -- JSON
                        updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                    )
                """)
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to initialize state database at {self.db_path}: {e}")
            raise StorageError(f"Failed to initialize state database: {e}") from e

    def get(self, key: str) -> Optional[Any]:
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as e:
            logger.error(f"Failed to read {key}: {e}")
            raise StorageError(f"Failed to read {key}: {e}") from e

        if row is None:
            return None
        return _decode(key, row[0])

    def set(self, key: str, value: Any) -> None:
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not serializable: {e}") from e

        try:
            with self._connect() as conn:
                conn.execute("""
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                """, (key, payload))
        except sqlite3.Error as e:
            logger.error(f"Failed to write {key}: {e}")
            raise StorageError(f"Failed to write {key}: {e}") from e

        logger.debug(f"Stored {key}")

    def delete(self, key: str) -> bool:
        try:
            with self._connect() as conn:
                cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"Failed to delete {key}: {e}")
            raise StorageError(f"Failed to delete {key}: {e}") from e

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        try:
            with self._connect() as conn:
                if prefix is None:
                    rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
                else:
                    rows = conn.execute(
                        "SELECT key FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
                        (len(prefix), prefix)
                    ).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to list keys: {e}")
            raise StorageError(f"Failed to list keys: {e}") from e

        return [row[0] for row in rows]


def create_kv_store(backend: str = "sqlite", path: Optional[Union[str, Path]] = None) -> KeyValueStore:
    """Create a key-value store for the configured backend."""
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "sqlite":
        return SQLiteKeyValueStore(path) if path else SQLiteKeyValueStore()
    raise ValueError(f"Unknown storage backend: {backend}. Supported: sqlite, memory")
