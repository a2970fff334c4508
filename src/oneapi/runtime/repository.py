"""
SQLite repository - generic CRUD engine for one entity.

The repository is the only component that issues entity SQL. It holds the
compiled EntityModel and a DatabaseManager handle and nothing else: no
record cache, no registry of other entities.
"""

from __future__ import annotations

import logging
import math
import sqlite3
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from oneapi.errors import NotFoundError, ValidationError
from oneapi.runtime.database import DatabaseManager
from oneapi.runtime.entity_model import EntityModel
from oneapi.runtime.logging import get_storage_logger, log_with_context
from oneapi.runtime.schema import quote_identifier
from oneapi.runtime.values import INT64_MAX, Record, from_storage, to_storage

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10

logger = get_storage_logger()

# Alias to keep `list` usable inside SQLiteRepository, which defines list()
_list = list


# =============================================================================
# Pagination
# =============================================================================


def normalize_pagination(page: int, page_size: int) -> tuple[int, int]:
    """
    Clamp pagination input.

    Non-positive pages become page 1; non-positive page sizes fall back to
    the default size of 10 (not to 1).
    """
    if page < 1:
        page = DEFAULT_PAGE
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    return page, page_size


@dataclass
class ListResult:
    """
    One page of records plus the table's total row count.

    ``page`` and ``page_size`` are the effective (clamped) values.
    """

    records: list[Record] = field(default_factory=_list)
    total: int = 0
    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)


# =============================================================================
# Repository
# =============================================================================


class SQLiteRepository:
    """
    SQLite repository for a single entity.

    Provides schema creation plus list, find_by_id, create, update and
    delete against the entity's table.
    """

    def __init__(self, db_manager: DatabaseManager, entity: EntityModel):
        """
        Initialize the repository.

        Args:
            db_manager: Database manager instance
            entity: Compiled entity model, owned by this repository
        """
        self.db = db_manager
        self.entity = entity
        self.table_name = entity.name
        self._table = quote_identifier(entity.name)

    # -------------------------------------------------------------------------
    # Row conversion
    # -------------------------------------------------------------------------

    def _row_to_record(self, row: sqlite3.Row) -> Record:
        return {key: from_storage(row[key], self.entity.field_kind(key)) for key in row.keys()}

    def _storage_values(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Declared fields only, converted for SQLite; unknown keys are dropped."""
        return {
            name: to_storage(value, self.entity.field_kind(name))
            for name, value in data.items()
            if self.entity.has_field(name)
        }

    def _fetch(self, conn: sqlite3.Connection, id: int) -> Record:
        cursor = conn.execute(f"SELECT * FROM {self._table} WHERE id = ?", (id,))
        row = cursor.fetchone()
        if row is None:
            raise NotFoundError(self.entity.name, id)
        return self._row_to_record(row)

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------

    def create_schema(self) -> None:
        """Create the entity table if absent; safe to call repeatedly."""
        self.db.create_table(self.entity)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def list(self, page: int = DEFAULT_PAGE, page_size: int = DEFAULT_PAGE_SIZE) -> ListResult:
        """
        List one page of records.

        Rows come back in the engine's natural order; no ORDER BY is applied.
        Pages starting past the 64-bit row offset range are empty.

        Args:
            page: Page number (1-indexed), clamped to 1
            page_size: Items per page, non-positive values mean 10

        Returns:
            ListResult with the page slice and the total row count
        """
        page, page_size = normalize_pagination(page, page_size)
        offset = (page - 1) * page_size

        limit = min(page_size, INT64_MAX)

        with self.db.transaction() as conn:
            total = conn.execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()[0]
            records: list[Record] = []
            if offset <= INT64_MAX:
                cursor = conn.execute(
                    f"SELECT * FROM {self._table} LIMIT ? OFFSET ?", (limit, offset)
                )
                records = [self._row_to_record(row) for row in cursor.fetchall()]

        return ListResult(records=records, total=total, page=page, page_size=page_size)

    def find_by_id(self, id: int) -> Record:
        """
        Read a record by id.

        Raises:
            NotFoundError: If no row has this id
        """
        with self.db.transaction() as conn:
            return self._fetch(conn, id)

    def create(self, data: Mapping[str, Any]) -> int:
        """
        Validate and insert a record.

        Args:
            data: Field values; keys that are not declared fields are
                reported by validation and never written

        Returns:
            Generated primary key

        Raises:
            ValidationError: With every violation; nothing is written
        """
        errors = self.entity.validate(data)
        if errors:
            raise ValidationError(self.entity.name, errors)

        values = self._storage_values(data)
        if values:
            columns = ", ".join(quote_identifier(name) for name in values)
            placeholders = ", ".join("?" * len(values))
            sql = f"INSERT INTO {self._table} ({columns}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {self._table} DEFAULT VALUES"

        with self.db.transaction(write=True) as conn:
            cursor = conn.execute(sql, _list(values.values()))
            new_id = cursor.lastrowid

        log_with_context(
            logger, logging.DEBUG, f"Created {self.entity.name} {new_id}",
            entity=self.entity.name, id=new_id,
        )
        return int(new_id)

    def update(self, id: int, patch: Mapping[str, Any]) -> None:
        """
        Partially update a record.

        The patch is overlaid on the stored record and the merged view is
        validated, so a patch may omit required fields the row already has.
        Only the patched columns are written. Existence check, validation
        and write share one immediate transaction.

        Raises:
            NotFoundError: If no row has this id
            ValidationError: If the merged view is invalid; nothing is written
        """
        with self.db.transaction(write=True) as conn:
            existing = self._fetch(conn, id)

            merged = {k: v for k, v in existing.items() if k != "id"}
            merged.update(patch)

            errors = self.entity.validate(merged)
            if errors:
                raise ValidationError(self.entity.name, errors)

            values = self._storage_values(patch)
            if values:
                set_clause = ", ".join(f"{quote_identifier(name)} = ?" for name in values)
                conn.execute(
                    f"UPDATE {self._table} SET {set_clause} WHERE id = ?",
                    [*values.values(), id],
                )

        log_with_context(
            logger, logging.DEBUG, f"Updated {self.entity.name} {id}",
            entity=self.entity.name, id=id, fields=_list(patch),
        )

    def delete(self, id: int) -> None:
        """
        Delete a record by id.

        Raises:
            NotFoundError: If no row has this id
        """
        with self.db.transaction(write=True) as conn:
            cursor = conn.execute(f"DELETE FROM {self._table} WHERE id = ?", (id,))
            if cursor.rowcount == 0:
                raise NotFoundError(self.entity.name, id)

        log_with_context(
            logger, logging.DEBUG, f"Deleted {self.entity.name} {id}",
            entity=self.entity.name, id=id,
        )

    def count(self) -> int:
        with self.db.transaction() as conn:
            return int(conn.execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()[0])
