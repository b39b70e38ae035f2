"""Top level application object for GachaForge services."""

from __future__ import annotations

from random import Random
from typing import Any

from .config import GachaForgeConfig
from .domain.cards import CardCatalog
from .domain.deck import DeckValidator
from .domain.engine import RollEngine
from .domain.events import EventBus
from .domain.pity import PityTracker
from .loaders import load_catalog_from_json
from .storage.base import CollectionStore, PityStore
from .storage.memory import InMemoryCollectionStore, InMemoryPityStore
from .storage.sqlalchemy import AsyncSQLAlchemyStorage


class GachaApp:
    """Central dependency container used by the web adapter and the CLI."""

    def __init__(
        self,
        config: GachaForgeConfig,
        *,
        catalog: CardCatalog | None = None,
        pity_store: PityStore | None = None,
        collection_store: CollectionStore | None = None,
        event_bus: EventBus | None = None,
        rng: Random | None = None,
    ) -> None:
        self.config = config
        self.event_bus = event_bus or EventBus()
        if catalog is None:
            if not config.catalog_path:
                raise ValueError("GachaApp needs a catalog or config.catalog_path")
            catalog = load_catalog_from_json(config.catalog_path)
        self.catalog = catalog

        self._rng = rng or (Random(config.rng_seed) if config.rng_seed is not None else Random())

        self._sqlalchemy_storage: AsyncSQLAlchemyStorage | None = None
        self.pity_store, self.collection_store = self._wire_storage(pity_store, collection_store)

        self.pity_tracker = PityTracker(
            self.pity_store,
            event_bus=self.event_bus,
            persist_timeout=config.pity.persist_timeout,
            persist_retries=config.pity.persist_retries,
            persist_retry_delay=config.pity.persist_retry_delay,
        )
        self.roll_engine = RollEngine(
            self.catalog,
            self.pity_tracker,
            rng=self._rng,
            event_bus=self.event_bus,
        )
        self.deck_validator = DeckValidator(config.deck, catalog=self.catalog)

    def _wire_storage(
        self,
        pity_store: PityStore | None,
        collection_store: CollectionStore | None,
    ) -> tuple[PityStore, CollectionStore]:
        if pity_store and collection_store:
            return pity_store, collection_store

        backend = self.config.storage.backend
        if backend == "memory":
            return (
                pity_store or InMemoryPityStore(),
                collection_store or InMemoryCollectionStore(),
            )
        if backend == "sqlalchemy":
            dsn = self.config.storage.resolve_dsn()
            if not dsn:
                raise ValueError("SQLAlchemy backend requires a DSN")
            storage = AsyncSQLAlchemyStorage(dsn, echo=self.config.storage.echo_sql)
            self._sqlalchemy_storage = storage
            return (
                pity_store or storage.pity_store(),
                collection_store or storage.collection_store(),
            )
        raise ValueError(f"Unsupported storage backend {backend}")

    def snapshot(self) -> dict[str, Any]:
        """Export current configuration for debugging."""
        return {
            "storage": self.config.storage.backend,
            "cards": len(self.catalog),
            "packs": [pack.pack_id for pack in self.catalog.iter_packs()],
            "max_deck_size": self.config.deck.max_deck_size,
        }

    async def init_backend(self) -> None:
        """Initialize storage backend resources (e.g., database tables)."""
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.init_models()

    async def shutdown(self) -> None:
        """Flush pending pity retries and release backend resources."""
        await self.pity_tracker.drain()
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.dispose()
