"""Storage backends for GachaForge."""

from .base import CollectionStore, PityState, PityStore, StorageError
from .memory import InMemoryCollectionStore, InMemoryPityStore
from .sqlalchemy import AsyncSQLAlchemyStorage

__all__ = [
    "CollectionStore",
    "PityState",
    "PityStore",
    "StorageError",
    "InMemoryCollectionStore",
    "InMemoryPityStore",
    "AsyncSQLAlchemyStorage",
]
