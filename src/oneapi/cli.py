"""
OneAPI CLI.

Commands:
- serve: run the CRUD service for a manifest
- validate: load and compile a manifest, print a summary
- schema: print the SQLite DDL derived from a manifest
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path

import typer

from oneapi import __version__
from oneapi.errors import ManifestError, StorageError
from oneapi.runtime.entity_model import EntityModel
from oneapi.runtime.logging import setup_logging
from oneapi.runtime.schema import build_create_table
from oneapi.specs import Manifest, load_manifest

app = typer.Typer(
    help="OneAPI - serve a CRUD API from a declarative manifest.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"OneAPI {__version__}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
) -> None:
    """OneAPI CLI main callback for global options."""
    pass


def _load_or_exit(manifest_path: Path) -> Manifest:
    try:
        return load_manifest(manifest_path)
    except ManifestError as e:
        typer.echo(f"Failed to load manifest: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def serve(
    manifest: Path = typer.Argument(..., help="Path to the manifest YAML file"),
    host: str | None = typer.Option(None, "--host", envvar="ONEAPI_HOST", help="Bind address"),
    port: int | None = typer.Option(
        None, "--port", "-p", envvar="ONEAPI_PORT", help="Port (overrides the manifest)"
    ),
    db: str | None = typer.Option(
        None, "--db", envvar="ONEAPI_DB", help="SQLite database file (default: in-memory)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", envvar="ONEAPI_LOG_DIR", help="Write JSONL logs to this directory"
    ),
) -> None:
    """
    Serve the CRUD API described by MANIFEST.

    Examples:
        oneapi serve manifest.yaml
        oneapi serve manifest.yaml --port 8080 --db ./data/app.db
    """
    from oneapi.runtime.server import ServerOptions, run_app

    setup_logging(level=logging.DEBUG if debug else logging.INFO, log_dir=log_dir)
    mf = _load_or_exit(manifest)

    options = ServerOptions.from_manifest(mf, host=host, port=port, db_path=db)
    try:
        run_app(mf, options)
    except StorageError as e:
        typer.echo(f"Failed to initialize database: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def validate(
    manifest: Path = typer.Argument(..., help="Path to the manifest YAML file"),
) -> None:
    """Load and compile MANIFEST, then print its entities and fields."""
    mf = _load_or_exit(manifest)

    typer.echo(f"Manifest OK: {len(mf.entities)} entity(ies)")
    for entity_name, entity_def in mf.entities.items():
        model = EntityModel.from_definition(entity_name, entity_def)
        typer.echo(f"  • {entity_name}")
        for field in model.fields.values():
            flags = " required" if field.required else ""
            variants = f" [{', '.join(field.variants)}]" if field.variants else ""
            typer.echo(f"      {field.name}: {field.kind.value}{variants}{flags}")


@app.command()
def schema(
    manifest: Path = typer.Argument(..., help="Path to the manifest YAML file"),
) -> None:
    """Print the CREATE TABLE statement for every entity in MANIFEST."""
    mf = _load_or_exit(manifest)

    for entity_name, entity_def in mf.entities.items():
        model = EntityModel.from_definition(entity_name, entity_def)
        typer.echo(f"{build_create_table(model)};")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
