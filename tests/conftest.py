from __future__ import annotations

from dataclasses import dataclass
from random import Random

import pytest

from gachaforge.domain.cards import Card, CardCatalog, CardType, PackType, Rarity
from gachaforge.domain.engine import RollEngine
from gachaforge.domain.events import EventBus
from gachaforge.domain.pity import PityTracker
from gachaforge.registry import CardRegistry
from gachaforge.storage.memory import InMemoryPityStore
from gachaforge.testing.fixtures import memory_app  # noqa: F401


def card(card_id: str, rarity: Rarity, **kwargs) -> Card:
    return Card(card_id=card_id, name=card_id.replace("_", " ").title(), rarity=rarity, **kwargs)


@pytest.fixture()
def catalog() -> CardCatalog:
    registry = CardRegistry()
    registry.cards(
        [
            card("goblin", Rarity.COMMON, cost=1, attack=1, health=1, tags={"horde"}),
            card("militia", Rarity.COMMON, cost=1, attack=1, health=2),
            card("spark", Rarity.COMMON, card_type=CardType.SPELL, cost=1),
            card("wolf", Rarity.COMMON, cost=2, attack=2, health=2, tags={"beast"}),
            card("archer", Rarity.UNCOMMON, cost=2, attack=2, health=1),
            card("healer", Rarity.UNCOMMON, cost=3, health=3, tags={"holy"}),
            card("knight", Rarity.RARE, cost=4, attack=3, health=4, tags={"holy"}),
            card("dragon", Rarity.EPIC, cost=7, attack=6, health=6, tags={"beast"}),
            card("phoenix", Rarity.EPIC, cost=6, attack=5, health=4, tags={"beast"}),
            card("crown", Rarity.LEGENDARY, card_type=CardType.ARTIFACT, cost=5),
        ]
    )
    registry.packs(
        [
            PackType(
                pack_id="basic",
                name="Basic Pack",
                rarity_weights={
                    Rarity.COMMON: 0.70,
                    Rarity.UNCOMMON: 0.20,
                    Rarity.RARE: 0.08,
                    Rarity.EPIC: 0.02,
                },
            ),
            PackType(
                pack_id="steady",
                name="Steady Pack",
                rarity_weights={Rarity.COMMON: 1.0},
            ),
            PackType(
                pack_id="premium",
                name="Premium Pack",
                rarity_weights={Rarity.RARE: 0.6, Rarity.EPIC: 0.3, Rarity.LEGENDARY: 0.1},
                max_batch=5,
                qualifying_rarity=Rarity.LEGENDARY,
                pity_threshold=10,
            ),
            PackType(
                pack_id="deluxe",
                name="Deluxe Pack",
                rarity_weights={Rarity.COMMON: 1.0},
                max_batch=5,
                value_multiplier=1.5,
                last_slot_floor=Rarity.RARE,
                last_slot_chance=1.0,
            ),
        ]
    )
    return registry.build()


@dataclass
class Rig:
    engine: RollEngine
    tracker: PityTracker
    store: InMemoryPityStore
    bus: EventBus


@pytest.fixture()
def make_rig(catalog):
    def factory(*, seed: int = 1, store=None, distribution=None, **tracker_kwargs) -> Rig:
        store = store if store is not None else InMemoryPityStore()
        bus = EventBus()
        tracker_kwargs.setdefault("persist_retry_delay", 0)
        tracker = PityTracker(store, event_bus=bus, **tracker_kwargs)
        engine = RollEngine(
            catalog, tracker, rng=Random(seed), distribution=distribution, event_bus=bus
        )
        return Rig(engine=engine, tracker=tracker, store=store, bus=bus)

    return factory
