"""
Database manager - owns the SQLite connection used by all repositories.

One connection per manager, shared across threads and serialized by a
re-entrant lock. Every repository operation runs inside a single
transaction; write transactions start with ``BEGIN IMMEDIATE`` so a
check-then-write sequence cannot interleave with another writer.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from oneapi.errors import StorageError
from oneapi.runtime.entity_model import EntityModel
from oneapi.runtime.logging import get_storage_logger
from oneapi.runtime.schema import build_create_table, quote_identifier

MEMORY_DB = ":memory:"

logger = get_storage_logger()


class DatabaseManager:
    """
    Manages the SQLite connection and schema.

    Example:
        >>> db = DatabaseManager()  # in-memory
        >>> db.create_table(entity_model)
        >>> with db.transaction(write=True) as conn:
        ...     conn.execute(...)
    """

    def __init__(self, db_path: str | Path = MEMORY_DB):
        """
        Initialize the database manager.

        Args:
            db_path: Path to SQLite database file, or ``:memory:``
        """
        self.db_path = str(db_path)
        if self.db_path != MEMORY_DB:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._connection: sqlite3.Connection | None = None

    def _get_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            try:
                # isolation_level=None: transactions are opened explicitly
                conn = sqlite3.connect(
                    self.db_path, check_same_thread=False, isolation_level=None
                )
            except sqlite3.Error as e:
                raise StorageError(f"cannot open database {self.db_path}: {e}") from e
            conn.row_factory = sqlite3.Row
            self._connection = conn
            logger.debug(f"Opened SQLite database {self.db_path}")
        return self._connection

    @contextmanager
    def transaction(self, *, write: bool = False) -> Iterator[sqlite3.Connection]:
        """
        Run a block inside one transaction.

        Commits on success and rolls back on any exception. SQLite errors
        are re-raised as StorageError.

        Args:
            write: Take the write lock up front (``BEGIN IMMEDIATE``)

        Yields:
            SQLite connection
        """
        with self._lock:
            conn = self._get_connection()
            if conn.in_transaction:
                # Nested use from the same thread joins the outer transaction
                yield conn
                return
            try:
                conn.execute("BEGIN IMMEDIATE" if write else "BEGIN")
                yield conn
                conn.commit()
            except sqlite3.Error as e:
                if conn.in_transaction:
                    conn.rollback()
                raise StorageError(str(e)) from e
            except BaseException:
                if conn.in_transaction:
                    conn.rollback()
                raise

    def create_table(self, entity: EntityModel) -> None:
        """
        Create the table for an entity if it doesn't exist.

        Args:
            entity: Compiled entity model
        """
        sql = build_create_table(entity)
        with self.transaction(write=True) as conn:
            conn.execute(sql)
        logger.info(f"Schema ready for {entity.name}")

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists."""
        with self.transaction() as conn:
            cursor = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table_name,)
            )
            return cursor.fetchone() is not None

    def get_table_columns(self, table_name: str) -> list[str]:
        """Get column names for a table."""
        with self.transaction() as conn:
            cursor = conn.execute(f"PRAGMA table_info({quote_identifier(table_name)})")
            return [row[1] for row in cursor.fetchall()]

    def close(self) -> None:
        """Close the connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
