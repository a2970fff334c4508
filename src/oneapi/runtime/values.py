"""
Record values and SQLite marshaling.

A record maps field names to scalar values: None, str, int, float or bool.
Anything else (lists, mappings, bytes) is not a record value and is rejected
by validation before it can reach the storage engine.
"""

from __future__ import annotations

import math
import re
from typing import Any, Union

from oneapi.specs.manifest import FieldKind

Value = Union[None, str, int, float, bool]
Record = dict[str, Value]

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INT_TEXT = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_TEXT = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")


def is_scalar(value: Any) -> bool:
    """True if value belongs to the closed record value set."""
    return value is None or isinstance(value, (str, int, float, bool))


def is_integer(value: Any) -> bool:
    """Native integer check; bool is not an integer here."""
    return isinstance(value, int) and not isinstance(value, bool)


def is_real(value: Any) -> bool:
    """Native number check for double fields (ints included, bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_int_text(text: str) -> int | None:
    """
    Parse base-10 integer text into a 64-bit int.

    Accepts an optional sign followed by digits only, no surrounding
    whitespace or digit separators.

    Returns:
        Parsed integer, or None if the text is not a 64-bit integer
    """
    if not _INT_TEXT.match(text):
        return None
    number = int(text)
    return number if fits_int64(number) else None


def parse_float_text(text: str) -> float | None:
    """
    Parse decimal float text (with optional exponent).

    Returns:
        Parsed float, or None if the text is not a finite number
    """
    if not _FLOAT_TEXT.match(text):
        return None
    return finite_float(float(text))


def fits_int64(value: int) -> bool:
    return INT64_MIN <= value <= INT64_MAX


def finite_float(value: int | float) -> float | None:
    """Convert a native number to a finite float, or None if it has none."""
    try:
        number = float(value)
    except OverflowError:
        return None
    if not math.isfinite(number):
        return None
    return number


def is_storable(value: Any) -> bool:
    """
    True if SQLite can hold value unchanged.

    Integers must fit in 64 bits and floats must be finite.
    """
    if is_integer(value):
        return fits_int64(value)
    if isinstance(value, float):
        return math.isfinite(value)
    return True


# =============================================================================
# SQLite Marshaling
# =============================================================================


def to_storage(value: Value, kind: FieldKind | None = None) -> Any:
    """Convert a validated record value to an SQLite-compatible value."""
    if value is None:
        return None
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, str):
        # Numeric text was accepted by validation; store it as a number
        if kind == FieldKind.INT:
            parsed = parse_int_text(value)
            return parsed if parsed is not None else value
        if kind == FieldKind.DOUBLE:
            parsed_float = parse_float_text(value)
            return parsed_float if parsed_float is not None else value
        return value
    if kind == FieldKind.DOUBLE and isinstance(value, int):
        return float(value)
    return value


def from_storage(value: Any, kind: FieldKind | None = None) -> Value:
    """Convert an SQLite value back to a record value."""
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if kind == FieldKind.BOOL and is_integer(value) and value in (0, 1):
        return bool(value)
    return value
