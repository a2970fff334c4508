"""Shared pytest fixtures for OneAPI tests."""

import logging
from pathlib import Path

import pytest

from oneapi.runtime.database import DatabaseManager
from oneapi.runtime.entity_model import EntityModel
from oneapi.runtime.logging import ROOT_LOGGER_NAME
from oneapi.runtime.repository import SQLiteRepository
from oneapi.specs import EntityDef, FieldDef, Manifest, manifest_from_dict

TASK_MANIFEST = {
    "entities": {
        "task": {
            "fields": {
                "title": {"type": "string", "required": True},
                "status": {"type": "enum", "required": True, "variants": ["open", "done"]},
            }
        }
    }
}


@pytest.fixture
def task_entity_def() -> EntityDef:
    """The task entity from the reference example."""
    return EntityDef(
        fields={
            "title": FieldDef(type="string", required=True),
            "status": FieldDef(type="enum", required=True, variants=["open", "done"]),
        }
    )


@pytest.fixture
def task_model(task_entity_def: EntityDef) -> EntityModel:
    return EntityModel.from_definition("task", task_entity_def)


@pytest.fixture
def item_model() -> EntityModel:
    """An entity exercising every field type."""
    return EntityModel.from_definition(
        "item",
        EntityDef(
            fields={
                "name": FieldDef(type="string", required=True),
                "quantity": FieldDef(type="int"),
                "price": FieldDef(type="double"),
                "active": FieldDef(type="bool"),
                "size": FieldDef(type="enum", variants=["S", "M", "L"]),
            }
        ),
    )


@pytest.fixture
def db_manager():
    """In-memory database manager."""
    db = DatabaseManager()
    yield db
    db.close()


@pytest.fixture
def task_repository(db_manager: DatabaseManager, task_model: EntityModel) -> SQLiteRepository:
    repo = SQLiteRepository(db_manager, task_model)
    repo.create_schema()
    return repo


@pytest.fixture
def item_repository(db_manager: DatabaseManager, item_model: EntityModel) -> SQLiteRepository:
    repo = SQLiteRepository(db_manager, item_model)
    repo.create_schema()
    return repo


@pytest.fixture
def task_manifest() -> Manifest:
    return manifest_from_dict(TASK_MANIFEST)


@pytest.fixture
def manifest_file(tmp_path: Path) -> Path:
    """A manifest on disk with two entities."""
    path = tmp_path / "manifest.yaml"
    path.write_text(
        """
prefix: /api
server:
  port: 8181
entities:
  task:
    fields:
      title:
        type: string
        required: true
      status:
        type: enum
        required: true
        variants: [open, done]
  note:
    fields:
      body:
        type: string
"""
    )
    return path


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging during a test."""
    yield
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
