"""
Route generator - FastAPI CRUD routes for one entity.

Each entity gets an APIRouter with list, get, create, update and delete
handlers speaking JSON:API style documents. Handlers are plain functions;
FastAPI runs them in its threadpool, and the repository does the rest.
"""

from __future__ import annotations

import secrets
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel, ConfigDict, Field

from oneapi.runtime.formatter import (
    ResourceFormatter,
    collection_document,
    resource_document,
)
from oneapi.runtime.repository import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, SQLiteRepository

# =============================================================================
# Request Bodies
# =============================================================================


class ResourceData(BaseModel):
    """``data`` member of a create/update request."""

    type: str | None = None
    id: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")


class ResourceRequest(BaseModel):
    """Create/update request body: ``{"data": {"attributes": {...}}}``."""

    data: ResourceData


# =============================================================================
# Auth
# =============================================================================


def bearer_token_dependency(token: str) -> Callable[[Request], None]:
    """
    Build a dependency that requires ``Authorization: Bearer <token>``.

    Raises:
        HTTPException: 401 when the header is missing or the token differs
    """
    expected = token.encode("utf-8")

    def require_bearer_token(request: Request) -> None:
        header = request.headers.get("authorization", "")
        scheme, _, credentials = header.partition(" ")
        if scheme.lower() != "bearer" or not secrets.compare_digest(
            credentials.strip().encode("utf-8"), expected
        ):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="missing or invalid bearer token",
                headers={"WWW-Authenticate": "Bearer"},
            )

    return require_bearer_token


# =============================================================================
# Route Generator
# =============================================================================


def generate_entity_routes(
    repository: SQLiteRepository,
    auth_token: str | None = None,
) -> APIRouter:
    """
    Generate CRUD routes for one entity.

    Paths are relative; mount the router under ``<prefix>/<entity>``.

    Args:
        repository: Repository of the entity
        auth_token: Bearer token required on every route, if any

    Returns:
        FastAPI router with CRUD routes
    """
    entity_name = repository.entity.name
    formatter = ResourceFormatter(entity_name)
    dependencies = [Depends(bearer_token_dependency(auth_token))] if auth_token else []

    router = APIRouter(tags=[entity_name], dependencies=dependencies)

    @router.get("", summary=f"List {entity_name}")
    def list_items(
        page: int = Query(DEFAULT_PAGE, alias="page[number]"),
        page_size: int = Query(DEFAULT_PAGE_SIZE, alias="page[size]"),
    ) -> dict[str, Any]:
        result = repository.list(page, page_size)
        return collection_document(formatter, result)

    @router.get("/{id}", summary=f"Get {entity_name}")
    def get_item(id: int) -> dict[str, Any]:
        return resource_document(formatter.format(repository.find_by_id(id)))

    @router.post("", summary=f"Create {entity_name}", status_code=status.HTTP_201_CREATED)
    def create_item(body: ResourceRequest) -> dict[str, Any]:
        new_id = repository.create(body.data.attributes)
        return resource_document(formatter.format(repository.find_by_id(new_id)))

    @router.patch("/{id}", summary=f"Update {entity_name}")
    def update_item(id: int, body: ResourceRequest) -> dict[str, Any]:
        repository.update(id, body.data.attributes)
        return resource_document(formatter.format(repository.find_by_id(id)))

    @router.delete(
        "/{id}",
        summary=f"Delete {entity_name}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
    )
    def delete_item(id: int) -> Response:
        repository.delete(id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
