"""Loaders for declarative catalog definitions."""

from .json_loader import (
    CatalogDefinition,
    load_catalog_from_json,
    parse_catalog_dict,
    validate_catalog_dict,
    validate_catalog_file,
)

__all__ = [
    "CatalogDefinition",
    "load_catalog_from_json",
    "parse_catalog_dict",
    "validate_catalog_dict",
    "validate_catalog_file",
]
