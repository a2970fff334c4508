"""
Manifest specification types and loader.

A manifest declares entities and their fields; everything else in OneAPI is
derived from it at startup.
"""

from oneapi.specs.loader import load_manifest, load_manifest_from_string, manifest_from_dict
from oneapi.specs.manifest import (
    RESERVED_FIELD_NAMES,
    AuthConfig,
    BearerTokenConfig,
    EntityDef,
    FieldDef,
    FieldKind,
    Manifest,
    ServerConfig,
)

__all__ = [
    # Types
    "AuthConfig",
    "BearerTokenConfig",
    "EntityDef",
    "FieldDef",
    "FieldKind",
    "Manifest",
    "ServerConfig",
    "RESERVED_FIELD_NAMES",
    # Loading
    "load_manifest",
    "load_manifest_from_string",
    "manifest_from_dict",
]
