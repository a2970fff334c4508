"""
OneAPI - CRUD services from a declarative manifest.

A manifest lists entities and their typed fields. OneAPI compiles it into
validators and SQLite tables and serves a JSON:API style CRUD surface per
entity, with no code written per entity.

This package provides:
- specs: Manifest types and the YAML loader
- runtime: Field compiler, entity model, repository, formatter and server
- cli: The ``oneapi`` command
"""

from oneapi._version import get_version as _get_version

__version__ = _get_version()

__all__ = ["__version__"]
