"""Durable key/value storage implementation using SQLite3.

Holds small string payloads under well-known keys: the serialized translation cache and
the preferred display language.
"""

from __future__ import annotations

import sqlite3
import time
from pathlib import Path
from typing import TYPE_CHECKING, Final, Self

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging


__all__: list[str] = [
    "LANGUAGE_PREFERENCE_KEY",
    "TRANSLATION_CACHE_KEY",
    "KeyValueStore",
    "KeyValueStoreError",
    "MemoryKeyValueStore",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

TRANSLATION_CACHE_KEY: Final[str] = "translation_cache"
LANGUAGE_PREFERENCE_KEY: Final[str] = "preferred-language"


class KeyValueStoreError(Exception):
    """Reading or writing the durable store failed."""


class KeyValueStore:
    """SQLite3-based key/value store.

    Attributes:
        db_path (Path): Path to the SQLite database file.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the store with the path to the database file.

        Args:
            db_path (str | Path): Path to the SQLite database file.

        Raises:
            KeyValueStoreError: If the database path is empty.
        """
        logger.debug("Initializing %s", self.__class__.__name__)

        if str(db_path).strip() == "":
            msg: str = "The database path is empty."
            raise KeyValueStoreError(msg)

        self.db_path: Path = Path(db_path)
        self._connection: sqlite3.Connection | None = None
        logger.debug("Database path set to: %s", self.db_path)

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        self.close()

    def open(self) -> None:
        """Open the connection and create the table if it does not exist.

        Raises:
            KeyValueStoreError: If the database cannot be opened.
        """
        if self._connection is not None:
            return
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
                isolation_level=None,  # Autocommit mode
            )
            self._connection.execute(
                """
                CREATE TABLE IF NOT EXISTS kv_store (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
        except (OSError, sqlite3.Error) as err:
            self._connection = None
            msg = f"Failed to open key/value store '{self.db_path}': {err}"
            raise KeyValueStoreError(msg) from err
        logger.debug("Database initialized successfully")

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self.open()
        if self._connection is None:
            msg = "Database connection is not initialized."
            raise KeyValueStoreError(msg)
        return self._connection

    def get(self, key: str) -> str | None:
        """Return the value stored under `key`, or None when absent.

        Raises:
            KeyValueStoreError: If the read fails.
        """
        try:
            row = self.connection.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as err:
            msg = f"Failed to read key '{key}': {err}"
            raise KeyValueStoreError(msg) from err
        return None if row is None else str(row[0])

    def set(self, key: str, value: str) -> None:
        """Insert or replace the value under `key`.

        Raises:
            KeyValueStoreError: If the write fails.
        """
        try:
            self.connection.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, time.time()),
            )
        except sqlite3.Error as err:
            msg = f"Failed to write key '{key}': {err}"
            raise KeyValueStoreError(msg) from err
        logger.debug("Stored %d characters under key: %s", len(value), key)

    def delete(self, key: str) -> None:
        """Remove `key` if present.

        Raises:
            KeyValueStoreError: If the delete fails.
        """
        try:
            self.connection.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as err:
            msg = f"Failed to delete key '{key}': {err}"
            raise KeyValueStoreError(msg) from err
        logger.debug("Deleted key: %s", key)

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.debug("Database connection closed")


class MemoryKeyValueStore:
    """In-process store with the same interface, used when no durable store is wanted."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def close(self) -> None:
        pass
