"""Testing utilities for GachaForge."""

from .factory import CardFactory, CatalogFactory
from .fixtures import app_fixture, memory_app

__all__ = [
    "CardFactory",
    "CatalogFactory",
    "app_fixture",
    "memory_app",
]
