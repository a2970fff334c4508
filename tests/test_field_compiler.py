"""
Tests for field compilation and record value handling.
"""

import math

import pytest

from oneapi.runtime.field_compiler import compile_field, storage_type_for
from oneapi.runtime.values import (
    from_storage,
    parse_float_text,
    parse_int_text,
    to_storage,
)
from oneapi.specs import FieldDef, FieldKind


def messages(field, value):
    return [e.message for e in field.validate(value)]


# =============================================================================
# Storage Types
# =============================================================================


class TestStorageTypes:
    @pytest.mark.parametrize(
        "kind,expected",
        [
            (FieldKind.STRING, "TEXT"),
            (FieldKind.ENUM, "TEXT"),
            (FieldKind.INT, "INTEGER"),
            (FieldKind.DOUBLE, "REAL"),
            (FieldKind.BOOL, "BOOLEAN"),
        ],
    )
    def test_mapping(self, kind, expected):
        assert storage_type_for(kind) == expected

    def test_compiled_field_carries_storage_type(self):
        field = compile_field("price", FieldDef(type="double"))
        assert field.storage_type == "REAL"
        assert field.kind == FieldKind.DOUBLE
        assert field.variants == ()


# =============================================================================
# Validator Chains
# =============================================================================


class TestRequired:
    def test_missing_value(self):
        field = compile_field("title", FieldDef(type="string", required=True))
        assert messages(field, None) == ["field title is required"]

    def test_blank_string(self):
        field = compile_field("title", FieldDef(type="string", required=True))
        assert messages(field, "   ") == ["field title is required"]

    def test_optional_accepts_none(self):
        field = compile_field("title", FieldDef(type="string"))
        assert field.validate(None) == []

    def test_required_bool_false_is_present(self):
        field = compile_field("active", FieldDef(type="bool", required=True))
        assert field.validate(False) == []


class TestStringField:
    def test_accepts_text(self):
        field = compile_field("title", FieldDef(type="string"))
        assert field.validate("hello") == []

    def test_rejects_number(self):
        field = compile_field("title", FieldDef(type="string"))
        assert messages(field, 42) == ["field title must be a string"]

    def test_rejects_non_scalar(self):
        field = compile_field("title", FieldDef(type="string"))
        errors = field.validate(["a", "b"])
        assert [e.code for e in errors] == ["scalar"]
        assert errors[0].message == "field title must be a scalar value"


class TestIntField:
    @pytest.mark.parametrize("value", [0, -7, 2**63 - 1, "42", "-3", "+5"])
    def test_accepts(self, value):
        field = compile_field("quantity", FieldDef(type="int"))
        assert field.validate(value) == []

    @pytest.mark.parametrize("value", ["abc", "1.5", " 4", "1_000", str(2**63)])
    def test_rejects_unparsable_text(self, value):
        field = compile_field("quantity", FieldDef(type="int"))
        assert messages(field, value) == ["field quantity must be a number"]

    @pytest.mark.parametrize("value", [1.5, True, 2**63, -(2**63) - 1, 2**70])
    def test_rejects_non_integers(self, value):
        field = compile_field("quantity", FieldDef(type="int"))
        assert messages(field, value) == ["field quantity must be an integer"]


class TestDoubleField:
    @pytest.mark.parametrize("value", [1.5, 3, "2.5", "1e3", "-0.5"])
    def test_accepts(self, value):
        field = compile_field("price", FieldDef(type="double"))
        assert field.validate(value) == []

    @pytest.mark.parametrize(
        "value",
        ["cheap", False, "nan", "inf", "-Infinity", "1e999", math.nan, math.inf, 10**400],
    )
    def test_rejects(self, value):
        field = compile_field("price", FieldDef(type="double"))
        assert messages(field, value) == ["field price must be a number"]


class TestEnumField:
    def test_accepts_variant(self):
        field = compile_field("status", FieldDef(type="enum", variants=["open", "done"]))
        assert field.validate("done") == []

    def test_case_sensitive(self):
        field = compile_field("status", FieldDef(type="enum", variants=["open", "done"]))
        errors = field.validate("Open")
        assert [e.code for e in errors] == ["enum"]
        assert errors[0].message == "field status must be one of: open, done"

    def test_non_string(self):
        field = compile_field("status", FieldDef(type="enum", variants=["open", "done"]))
        assert messages(field, 1) == ["field status must be a string for enum type"]

    def test_required_and_invalid_both_checked(self):
        field = compile_field(
            "status", FieldDef(type="enum", required=True, variants=["open", "done"])
        )
        assert messages(field, "") == [
            "field status is required",
            "field status must be one of: open, done",
        ]


class TestBoolField:
    @pytest.mark.parametrize("value", [True, False, "yes", 1])
    def test_passes_scalars_through(self, value):
        field = compile_field("active", FieldDef(type="bool"))
        assert field.validate(value) == []

    @pytest.mark.parametrize("value", [2**64, math.nan, -math.inf])
    def test_rejects_unstorable_numbers(self, value):
        field = compile_field("active", FieldDef(type="bool"))
        errors = field.validate(value)
        assert [e.code for e in errors] == ["range"]
        assert errors[0].message == "field active is out of range"


# =============================================================================
# Values
# =============================================================================


class TestTextParsing:
    def test_int_text(self):
        assert parse_int_text("12") == 12
        assert parse_int_text("-12") == -12
        assert parse_int_text("12.0") is None
        assert parse_int_text("") is None

    def test_float_text(self):
        assert parse_float_text("1.25") == 1.25
        assert parse_float_text(".5") == 0.5
        assert parse_float_text("1E-2") == 0.01
        assert parse_float_text("one") is None

    @pytest.mark.parametrize("text", ["nan", "inf", "Infinity", "1e400"])
    def test_float_text_must_be_finite(self, text):
        assert parse_float_text(text) is None


class TestStorageMarshaling:
    def test_bool_round_trip(self):
        assert to_storage(True, FieldKind.BOOL) == 1
        assert from_storage(1, FieldKind.BOOL) is True
        assert from_storage(0, FieldKind.BOOL) is False

    def test_numeric_text_stored_as_number(self):
        assert to_storage("42", FieldKind.INT) == 42
        assert to_storage("2.5", FieldKind.DOUBLE) == 2.5

    def test_int_for_double_becomes_float(self):
        stored = to_storage(3, FieldKind.DOUBLE)
        assert stored == 3.0
        assert isinstance(stored, float)

    def test_large_int_for_double(self):
        assert to_storage(2**70, FieldKind.DOUBLE) == float(2**70)

    def test_text_untouched(self):
        assert to_storage("42", FieldKind.STRING) == "42"
        assert from_storage("42", FieldKind.STRING) == "42"

    def test_bytes_decoded(self):
        assert from_storage(b"abc") == "abc"
