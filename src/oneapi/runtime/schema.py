"""
Schema builder - derives SQLite DDL from an EntityModel.
"""

from __future__ import annotations

from oneapi.runtime.entity_model import EntityModel

PRIMARY_KEY_COLUMN = '"id" INTEGER PRIMARY KEY AUTOINCREMENT'


def quote_identifier(name: str) -> str:
    """Double-quote an SQL identifier, escaping embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


def build_column(entity: EntityModel, field_name: str) -> str | None:
    """
    Build a single column definition.

    Returns:
        Column definition, or None if the field has no storage type
    """
    sqlite_type = entity.storage_type(field_name)
    if not sqlite_type:
        return None
    parts = [quote_identifier(field_name), sqlite_type]
    field = entity.get_field(field_name)
    if field is not None and field.required:
        parts.append("NOT NULL")
    return " ".join(parts)


def build_columns(entity: EntityModel) -> list[str]:
    """Primary key column followed by one column per declared field."""
    columns = [PRIMARY_KEY_COLUMN]
    for field_name in entity.field_names:
        column = build_column(entity, field_name)
        if column is not None:
            columns.append(column)
    return columns


def build_create_table(entity: EntityModel) -> str:
    """
    Build the create-if-absent statement for an entity table.

    Re-running the statement against an existing table is a no-op.
    """
    columns = ", ".join(build_columns(entity))
    return f"CREATE TABLE IF NOT EXISTS {quote_identifier(entity.name)} ({columns})"
