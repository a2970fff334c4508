"""
OneAPI Runtime

Turns a Manifest into a running service (FastAPI + SQLite).

This module provides:
- Field compilation (validator chains and storage types per field)
- Entity models (compiled, immutable field tables)
- Schema derivation and the SQLite repository
- Resource formatting and the FastAPI application

Example usage:
    >>> from oneapi.specs import load_manifest
    >>> from oneapi.runtime import create_app, run_app
    >>>
    >>> manifest = load_manifest("manifest.yaml")
    >>> app = create_app(manifest)
    >>>
    >>> # Or run directly
    >>> run_app(manifest)
"""

from oneapi.runtime.database import DatabaseManager
from oneapi.runtime.entity_model import EntityModel
from oneapi.runtime.field_compiler import CompiledField, compile_field, storage_type_for
from oneapi.runtime.formatter import ResourceFormatter, error_document
from oneapi.runtime.repository import ListResult, SQLiteRepository
from oneapi.runtime.schema import build_create_table
from oneapi.runtime.server import OneAPIApp, ServerOptions, create_app, run_app

__all__ = [
    # Compilation
    "CompiledField",
    "EntityModel",
    "compile_field",
    "storage_type_for",
    # Storage
    "DatabaseManager",
    "ListResult",
    "SQLiteRepository",
    "build_create_table",
    # Formatting
    "ResourceFormatter",
    "error_document",
    # Server
    "OneAPIApp",
    "ServerOptions",
    "create_app",
    "run_app",
]
