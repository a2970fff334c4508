"""
Entity model - compiled, immutable runtime form of one manifest entity.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from oneapi.errors import FieldError
from oneapi.runtime.field_compiler import CompiledField, compile_field
from oneapi.specs.manifest import EntityDef, FieldKind


class EntityModel:
    """
    Field table and validator chains for one entity.

    Built once at startup and never mutated. Each Repository owns exactly
    one EntityModel.

    Example:
        >>> model = EntityModel.from_definition("task", entity_def)
        >>> model.validate({"title": "x"})
        [FieldError(field='status', code='required', message='field status is required')]
    """

    __slots__ = ("_name", "_fields")

    def __init__(self, name: str, fields: Mapping[str, CompiledField]):
        self._name = name
        self._fields: Mapping[str, CompiledField] = MappingProxyType(dict(fields))

    @classmethod
    def from_definition(cls, name: str, definition: EntityDef) -> EntityModel:
        """Compile every field of a manifest entity, keeping manifest order."""
        fields = {
            field_name: compile_field(field_name, field_def)
            for field_name, field_def in definition.fields.items()
        }
        return cls(name, fields)

    @property
    def name(self) -> str:
        return self._name

    @property
    def fields(self) -> Mapping[str, CompiledField]:
        return self._fields

    @property
    def field_names(self) -> list[str]:
        return list(self._fields)

    def has_field(self, name: str) -> bool:
        return name in self._fields

    def get_field(self, name: str) -> CompiledField | None:
        return self._fields.get(name)

    def field_kind(self, name: str) -> FieldKind | None:
        field = self._fields.get(name)
        return field.kind if field else None

    def storage_type(self, name: str) -> str | None:
        """
        SQLite column type for a declared field.

        Returns:
            Column type, or None for names that are not declared fields
        """
        field = self._fields.get(name)
        if field is None:
            return None
        return field.storage_type

    def validate(self, record: Mapping[str, Any]) -> list[FieldError]:
        """
        Validate a record against every rule of the entity.

        Unknown keys are reported first (in record order), then every
        declared field runs its full chain (in manifest order). Nothing
        short-circuits: the complete error list is returned.

        Args:
            record: Field name to value mapping; absent fields count as None

        Returns:
            All violations, empty when the record is valid
        """
        errors: list[FieldError] = []

        for key in record:
            if key not in self._fields:
                errors.append(FieldError(key, "unknown_field", f"unknown field: {key}"))

        for name, field in self._fields.items():
            errors.extend(field.validate(record.get(name)))

        return errors

    def __repr__(self) -> str:
        return f"EntityModel(name={self._name!r}, fields={self.field_names!r})"
