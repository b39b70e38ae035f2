"""Pytest fixtures for GachaForge."""

from __future__ import annotations

from random import Random

import pytest

from ..app import GachaApp
from ..config import GachaForgeConfig
from .factory import CatalogFactory


@pytest.fixture()
def memory_app() -> GachaApp:
    return GachaApp(GachaForgeConfig(), catalog=CatalogFactory().build(), rng=Random(7))


def app_fixture(seed: int | None = None, **kwargs) -> GachaApp:
    """Helper for ad-hoc tests where pytest is not available."""
    rng = Random(seed) if seed is not None else None
    return GachaApp(GachaForgeConfig(**kwargs), catalog=CatalogFactory().build(), rng=rng)
