"""
Runtime server - builds and runs a FastAPI application from a Manifest.

This module provides the main entry point for running a OneAPI service.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from fastapi import FastAPI

from oneapi import __version__
from oneapi.runtime.database import MEMORY_DB, DatabaseManager
from oneapi.runtime.entity_model import EntityModel
from oneapi.runtime.exception_handlers import register_exception_handlers
from oneapi.runtime.logging import get_oneapi_logger
from oneapi.runtime.repository import SQLiteRepository
from oneapi.runtime.route_generator import generate_entity_routes
from oneapi.specs import Manifest

logger = get_oneapi_logger()


# =============================================================================
# Server Configuration
# =============================================================================


@dataclass(frozen=True)
class ServerOptions:
    """
    Options for OneAPIApp.

    Defaults apply where the manifest's ``prefix`` and ``server`` section
    are silent.
    """

    api_name: str = "OneAPI"
    host: str = "127.0.0.1"
    port: int = 9090
    path_prefix: str = "/api"
    health_check_path: str = "/_oneapi/health"
    api_docs_prefix: str = "/_oneapi/docs"
    api_docs_ui_path: str = "/api/docs"
    db_path: str = MEMORY_DB
    auth_token: str | None = field(default=None, repr=False)

    @classmethod
    def from_manifest(cls, manifest: Manifest, **overrides: Any) -> ServerOptions:
        """
        Build options from a manifest, then apply explicit overrides.

        Args:
            manifest: Loaded manifest
            **overrides: Field values taking precedence over the manifest
                (``None`` values are ignored)
        """
        options = cls()
        if manifest.prefix is not None:
            options = replace(options, path_prefix=manifest.prefix)
        if manifest.server is not None:
            server = manifest.server
            if server.port is not None:
                options = replace(options, port=server.port)
            if server.health_check is not None:
                options = replace(options, health_check_path=server.health_check)
            if server.api_docs_prefix is not None:
                options = replace(options, api_docs_prefix=server.api_docs_prefix.rstrip("/"))
            if server.api_docs_ui_path is not None:
                options = replace(options, api_docs_ui_path=server.api_docs_ui_path)
        if manifest.auth is not None and manifest.auth.bearer_token is not None:
            options = replace(options, auth_token=manifest.auth.bearer_token.token)

        explicit = {k: v for k, v in overrides.items() if v is not None}
        if explicit:
            options = replace(options, **explicit)
        return options


# =============================================================================
# Application Builder
# =============================================================================


class OneAPIApp:
    """
    OneAPI application.

    Compiles every manifest entity into an EntityModel, gives each one its
    own repository, materializes the schema and mounts the CRUD routes.
    """

    def __init__(
        self,
        manifest: Manifest,
        options: ServerOptions | None = None,
        db_manager: DatabaseManager | None = None,
    ):
        """
        Initialize the application.

        Args:
            manifest: Loaded manifest
            options: Server options (default: derived from the manifest)
            db_manager: Database manager (default: one for ``options.db_path``)
        """
        self.manifest = manifest
        self.options = options or ServerOptions.from_manifest(manifest)
        self.db = db_manager or DatabaseManager(self.options.db_path)
        self._repositories: dict[str, SQLiteRepository] = {}
        self._app: FastAPI | None = None

    def _build_repositories(self) -> None:
        for entity_name, entity_def in self.manifest.entities.items():
            model = EntityModel.from_definition(entity_name, entity_def)
            repository = SQLiteRepository(self.db, model)
            repository.create_schema()
            self._repositories[entity_name] = repository
            logger.info(f"Registered entity {entity_name} ({len(model.fields)} fields)")

    def build(self) -> FastAPI:
        """
        Build the FastAPI application.

        Returns:
            FastAPI application
        """
        if self._app is not None:
            return self._app

        self._build_repositories()

        options = self.options
        app = FastAPI(
            title=options.api_name,
            version=__version__,
            openapi_url=f"{options.api_docs_prefix}/openapi.json",
            docs_url=options.api_docs_ui_path,
            redoc_url=None,
        )
        register_exception_handlers(app)

        for entity_name, repository in self._repositories.items():
            router = generate_entity_routes(repository, auth_token=options.auth_token)
            app.include_router(router, prefix=f"{options.path_prefix}/{entity_name}")

        entity_names = list(self._repositories)

        @app.get(options.health_check_path, tags=["System"], include_in_schema=False)
        def health() -> dict[str, Any]:
            return {"status": "ok", "entities": entity_names}

        self._app = app
        return app

    def run(self) -> None:
        """Serve the application with uvicorn (blocks until shutdown)."""
        import uvicorn

        app = self.build()
        logger.info(
            f"Starting {self.options.api_name} on http://{self.options.host}:{self.options.port}"
        )
        try:
            uvicorn.run(app, host=self.options.host, port=self.options.port, log_config=None)
        finally:
            logger.info("Shutting down server...")
            self.db.close()


# =============================================================================
# Convenience Functions
# =============================================================================


def create_app(
    manifest: Manifest,
    options: ServerOptions | None = None,
    db_path: str | Path | None = None,
) -> FastAPI:
    """
    Create a FastAPI application from a manifest.

    Args:
        manifest: Loaded manifest
        options: Server options (default: derived from the manifest)
        db_path: SQLite database path overriding ``options.db_path``

    Returns:
        FastAPI application
    """
    if options is None:
        options = ServerOptions.from_manifest(manifest)
    if db_path is not None:
        options = replace(options, db_path=str(db_path))
    return OneAPIApp(manifest, options).build()


def run_app(manifest: Manifest, options: ServerOptions | None = None) -> None:
    """
    Run a OneAPI service.

    Example:
        >>> from oneapi.specs import load_manifest
        >>> run_app(load_manifest("manifest.yaml"))  # http://127.0.0.1:9090
    """
    OneAPIApp(manifest, options).run()
