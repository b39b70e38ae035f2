"""GachaForge framework public API."""

from .app import GachaApp
from .config import GachaForgeConfig
from .registry import CardRegistry

__all__ = [
    "GachaApp",
    "GachaForgeConfig",
    "CardRegistry",
]
