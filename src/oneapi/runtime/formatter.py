"""
Resource formatter - JSON:API style envelopes for records.

Every record leaves the service as ``{"id", "type", "attributes"}`` where
``type`` is the entity name and ``id`` is decimal text.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from oneapi.runtime.repository import ListResult

ERROR_TITLE = "Error"


class ResourceFormatter:
    """Formats records of one entity."""

    def __init__(self, entity_name: str):
        self.entity_name = entity_name

    def format(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """
        Build the resource envelope for one record.

        Args:
            record: Full record including ``id``

        Returns:
            ``{"id": "<decimal>", "type": <entity>, "attributes": {...}}``
        """
        record_id = record.get("id")
        attributes = {key: value for key, value in record.items() if key != "id"}
        return {
            "id": "" if record_id is None else str(int(record_id)),
            "type": self.entity_name,
            "attributes": attributes,
        }

    def format_many(self, records: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Format records, preserving input order."""
        return [self.format(record) for record in records]


# =============================================================================
# Documents
# =============================================================================


def resource_document(resource: dict[str, Any]) -> dict[str, Any]:
    return {"data": resource}


def list_meta(result: ListResult) -> dict[str, int]:
    return {
        "total": result.total,
        "page": result.page,
        "page_size": result.page_size,
        "total_pages": result.total_pages,
    }


def collection_document(formatter: ResourceFormatter, result: ListResult) -> dict[str, Any]:
    """List response: formatted page plus pagination meta."""
    return {
        "data": formatter.format_many(result.records),
        "meta": list_meta(result),
    }


def error_document(status: int, details: str | Iterable[str]) -> dict[str, Any]:
    """
    Build the error envelope.

    Args:
        status: HTTP status code, rendered as text
        details: One message or several (one error object each)
    """
    if isinstance(details, str):
        details = [details]
    return {
        "errors": [
            {"status": str(status), "title": ERROR_TITLE, "detail": detail}
            for detail in details
        ]
    }
