"""
Error types for OneAPI manifest loading, validation, and storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class OneAPIError(Exception):
    """Base exception for all OneAPI errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ManifestError(OneAPIError):
    """
    Raised when a manifest cannot be loaded.

    Examples:
    - File missing or unreadable
    - Invalid YAML syntax
    - No entities declared
    - Unknown field type, reserved field name, enum without variants
    """

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


@dataclass(frozen=True)
class FieldError:
    """
    A single violated rule for one field of a record.

    Attributes:
        field: Field name the rule applies to
        code: Machine-readable rule kind (required, type, enum, scalar, unknown_field)
        message: Human-readable description
    """

    field: str
    code: str
    message: str

    def __str__(self) -> str:
        return self.message


class ValidationError(OneAPIError):
    """
    Raised when a record fails entity validation.

    Carries every violated rule, never just the first one.
    """

    def __init__(self, entity: str, errors: list[FieldError]):
        self.entity = entity
        self.errors = list(errors)
        details = "; ".join(str(e) for e in self.errors)
        super().__init__(f"validation failed for {entity}: {details}")


class NotFoundError(OneAPIError):
    """Raised when no record exists for a given id."""

    def __init__(self, entity: str, id: int):
        self.entity = entity
        self.id = id
        super().__init__(f"{entity} with id {id} not found")


class StorageError(OneAPIError):
    """
    Raised when the storage engine fails.

    The original driver exception is kept as ``__cause__``.
    """

    pass
