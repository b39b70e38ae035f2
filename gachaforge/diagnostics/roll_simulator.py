"""Monte-Carlo roll simulation for balancing pack types."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from random import Random
from typing import Dict

from ..domain.cards import CardCatalog, Rarity
from ..domain.distribution import RandomSource, RarityDistribution


@dataclass(slots=True)
class SimulationResult:
    pack_id: str
    rolls: int
    rarities: Counter[Rarity] = field(default_factory=Counter)
    cards: Dict[str, int] = field(default_factory=dict)
    forced: int = 0
    longest_drought: int = 0

    def frequency(self, rarity: Rarity) -> float:
        return self.rarities.get(rarity, 0) / self.rolls if self.rolls else 0.0


class RollSimulator:
    """Replay a single player's rolls on one pack, pity included, without storage."""

    def __init__(
        self,
        catalog: CardCatalog,
        *,
        rng: RandomSource | None = None,
        distribution: RarityDistribution | None = None,
    ) -> None:
        self._catalog = catalog
        self._rng = rng or Random()
        self._distribution = distribution or RarityDistribution()

    def simulate(
        self, pack_id: str, *, rolls: int = 1000, pity: bool = True, batch: int = 1
    ) -> SimulationResult:
        """Roll ``rolls`` cards in batches of ``batch``; the batch size drives the last slot bonus."""
        pack = self._catalog.get_pack(pack_id)
        result = SimulationResult(pack_id=pack.pack_id, rolls=rolls)
        bonus_tiers = self._catalog.bonus_rarities(pack.pack_id)
        counter = 0
        for index in range(rolls):
            last = index % batch == batch - 1 or index == rolls - 1
            if pity and counter >= pack.pity_threshold - 1:
                rarity = pack.qualifying_rarity
                result.forced += 1
            elif last and bonus_tiers and self._rng.random() < pack.last_slot_chance:
                rarity = self._rng.choice(bonus_tiers)
            else:
                rarity = self._distribution.sample(pack, self._rng)
            card = self._rng.choice(self._catalog.list_by_rarity_and_pack(rarity, pack.pack_id))
            result.rarities[card.rarity] += 1
            result.cards[card.card_id] = result.cards.get(card.card_id, 0) + 1
            if card.rarity >= pack.qualifying_rarity:
                counter = 0
            else:
                counter = min(counter + 1, pack.pity_threshold)
                result.longest_drought = max(result.longest_drought, counter)
        return result
