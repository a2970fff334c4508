"""
Field compiler - turns manifest field definitions into validator chains.

Each FieldDef compiles to a CompiledField holding its storage type and an
ordered tuple of validators. A validator is a callable taking one value and
returning a FieldError or None.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from oneapi.errors import FieldError
from oneapi.runtime.values import (
    Value,
    finite_float,
    fits_int64,
    is_integer,
    is_real,
    is_scalar,
    is_storable,
    parse_float_text,
    parse_int_text,
)
from oneapi.specs.manifest import FieldDef, FieldKind

FieldValidator = Callable[[Value], "FieldError | None"]


# =============================================================================
# Storage Type Mapping
# =============================================================================

_STORAGE_TYPES: dict[FieldKind, str] = {
    FieldKind.STRING: "TEXT",
    FieldKind.ENUM: "TEXT",
    FieldKind.INT: "INTEGER",
    FieldKind.DOUBLE: "REAL",
    FieldKind.BOOL: "BOOLEAN",
}


def storage_type_for(kind: FieldKind) -> str:
    """Map a semantic field type to its SQLite column type."""
    return _STORAGE_TYPES.get(kind, "TEXT")


# =============================================================================
# Compiled Field
# =============================================================================


@dataclass(frozen=True)
class CompiledField:
    """
    Runtime form of one field.

    Attributes:
        name: Field name
        kind: Semantic type
        required: Whether a non-blank value is mandatory
        variants: Allowed values for enum fields (declared order)
        storage_type: SQLite column type
        validators: Ordered validator chain
    """

    name: str
    kind: FieldKind
    required: bool
    variants: tuple[str, ...]
    storage_type: str
    validators: tuple[FieldValidator, ...]

    def validate(self, value: Value) -> list[FieldError]:
        """Run the whole chain; every failing validator contributes an error."""
        errors = []
        for validator in self.validators:
            error = validator(value)
            if error is not None:
                errors.append(error)
        return errors


# =============================================================================
# Validator Builders
# =============================================================================


def _required_validator(name: str) -> FieldValidator:
    def validate(value: Value) -> FieldError | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            return FieldError(name, "required", f"field {name} is required")
        return None

    return validate


def _scalar_validator(name: str) -> FieldValidator:
    def validate(value: Value) -> FieldError | None:
        if not is_scalar(value):
            return FieldError(name, "scalar", f"field {name} must be a scalar value")
        return None

    return validate


def _string_validator(name: str) -> FieldValidator:
    def validate(value: Value) -> FieldError | None:
        if value is None or not is_scalar(value):
            return None
        if not isinstance(value, str):
            return FieldError(name, "type", f"field {name} must be a string")
        return None

    return validate


def _int_validator(name: str) -> FieldValidator:
    def validate(value: Value) -> FieldError | None:
        if value is None or not is_scalar(value):
            return None
        if is_integer(value) and fits_int64(value):
            return None
        if isinstance(value, str):
            if parse_int_text(value) is None:
                return FieldError(name, "type", f"field {name} must be a number")
            return None
        return FieldError(name, "type", f"field {name} must be an integer")

    return validate


def _double_validator(name: str) -> FieldValidator:
    def validate(value: Value) -> FieldError | None:
        if value is None or not is_scalar(value):
            return None
        if is_real(value) and finite_float(value) is not None:
            return None
        if isinstance(value, str) and parse_float_text(value) is not None:
            return None
        return FieldError(name, "type", f"field {name} must be a number")

    return validate


def _range_validator(name: str) -> FieldValidator:
    def validate(value: Value) -> FieldError | None:
        if is_scalar(value) and not is_storable(value):
            return FieldError(name, "range", f"field {name} is out of range")
        return None

    return validate


def _enum_validator(name: str, variants: tuple[str, ...]) -> FieldValidator:
    allowed = frozenset(variants)
    listing = ", ".join(variants)

    def validate(value: Value) -> FieldError | None:
        if value is None or not is_scalar(value):
            return None
        if not isinstance(value, str):
            return FieldError(name, "type", f"field {name} must be a string for enum type")
        if value not in allowed:
            return FieldError(name, "enum", f"field {name} must be one of: {listing}")
        return None

    return validate


# =============================================================================
# Compiler
# =============================================================================


def compile_field(name: str, definition: FieldDef) -> CompiledField:
    """
    Compile one field definition.

    Chain order: required check, scalar check, then the type check. The
    type checks let None (and non-scalars, already reported) through. Bool
    fields accept any scalar SQLite can store.

    Args:
        name: Field name
        definition: Field definition from the manifest

    Returns:
        Compiled field
    """
    validators: list[FieldValidator] = []

    if definition.required:
        validators.append(_required_validator(name))

    validators.append(_scalar_validator(name))

    variants = tuple(definition.variants or ())
    kind = definition.type
    if kind == FieldKind.STRING:
        validators.append(_string_validator(name))
    elif kind == FieldKind.INT:
        validators.append(_int_validator(name))
    elif kind == FieldKind.DOUBLE:
        validators.append(_double_validator(name))
    elif kind == FieldKind.ENUM:
        validators.append(_enum_validator(name, variants))
    elif kind == FieldKind.BOOL:
        validators.append(_range_validator(name))

    return CompiledField(
        name=name,
        kind=kind,
        required=definition.required,
        variants=variants,
        storage_type=storage_type_for(kind),
        validators=tuple(validators),
    )
