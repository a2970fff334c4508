"""
Tests for EntityModel compilation and record validation.
"""

import pytest

from oneapi.runtime.entity_model import EntityModel
from oneapi.specs import FieldKind


class TestEntityModel:
    """Field table access."""

    def test_fields_keep_manifest_order(self, item_model: EntityModel):
        assert item_model.name == "item"
        assert item_model.field_names == ["name", "quantity", "price", "active", "size"]

    def test_field_lookup(self, task_model: EntityModel):
        assert task_model.has_field("title")
        assert not task_model.has_field("id")
        assert task_model.field_kind("status") == FieldKind.ENUM
        assert task_model.get_field("missing") is None

    def test_storage_type(self, item_model: EntityModel):
        assert item_model.storage_type("name") == "TEXT"
        assert item_model.storage_type("quantity") == "INTEGER"
        assert item_model.storage_type("price") == "REAL"
        assert item_model.storage_type("active") == "BOOLEAN"
        assert item_model.storage_type("size") == "TEXT"
        assert item_model.storage_type("nope") is None

    def test_fields_are_read_only(self, task_model: EntityModel):
        with pytest.raises(TypeError):
            task_model.fields["extra"] = task_model.fields["title"]

    def test_repr(self, task_model: EntityModel):
        assert repr(task_model) == "EntityModel(name='task', fields=['title', 'status'])"


class TestValidate:
    """Whole-record validation."""

    def test_valid_record(self, task_model: EntityModel):
        assert task_model.validate({"title": "Buy milk", "status": "open"}) == []

    def test_collects_every_error(self, task_model: EntityModel):
        errors = task_model.validate({})
        assert [e.message for e in errors] == [
            "field title is required",
            "field status is required",
        ]

    def test_enum_is_case_sensitive(self, task_model: EntityModel):
        errors = task_model.validate({"title": "x", "status": "Open"})
        assert [e.message for e in errors] == ["field status must be one of: open, done"]

    def test_unknown_fields_reported_first(self, task_model: EntityModel):
        errors = task_model.validate({"colour": "red", "title": 5, "status": "open"})
        assert [(e.field, e.code) for e in errors] == [
            ("colour", "unknown_field"),
            ("title", "type"),
        ]
        assert errors[0].message == "unknown field: colour"

    def test_mixed_types(self, item_model: EntityModel):
        errors = item_model.validate(
            {"name": "Widget", "quantity": "many", "price": "free", "size": "XL"}
        )
        assert [e.field for e in errors] == ["quantity", "price", "size"]

    def test_id_is_not_a_declared_field(self, task_model: EntityModel):
        errors = task_model.validate({"id": 1, "title": "x", "status": "open"})
        assert [e.message for e in errors] == ["unknown field: id"]
