"""Roll orchestration: pity, sampling and card resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from random import Random
from typing import Iterator

from .cards import Card, CardCatalog, PackType, Rarity
from .distribution import RandomSource, RarityDistribution
from .events import ROLL_COMPLETED, EventBus
from .exceptions import ConfigurationError, InvalidRollCount, TransientError
from .pity import PityTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RollResult:
    pack_id: str
    cards: tuple[Card, ...]
    forced: tuple[bool, ...]
    pity_counter: int
    value_multiplier: float = 1.0

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def total_value(self) -> int:
        """Rarity points of the batch scaled by the pack multiplier, rounded."""
        return round(sum(card.rarity.points for card in self.cards) * self.value_multiplier)

    def __iter__(self) -> Iterator[tuple[Card, bool]]:
        return iter(zip(self.cards, self.forced))

    def to_dict(self) -> dict:
        return {
            "cards": [
                {
                    "id": card.card_id,
                    "name": card.name,
                    "rarity": card.rarity.value,
                    "forced": forced,
                }
                for card, forced in self
            ],
            "packType": self.pack_id,
            "count": self.count,
            "totalValue": self.total_value,
            "bonusMultiplier": self.value_multiplier,
        }


class RollEngine:
    """Turn a roll request into cards, honouring each player's pity timer.

    The whole batch runs inside the player's exclusive section: rolls for the
    same player are serialized, rolls for different players are not.
    """

    def __init__(
        self,
        catalog: CardCatalog,
        tracker: PityTracker,
        *,
        rng: RandomSource | None = None,
        distribution: RarityDistribution | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._catalog = catalog
        self._tracker = tracker
        self._rng = rng or Random()
        self._distribution = distribution or RarityDistribution()
        self._event_bus = event_bus

    @property
    def catalog(self) -> CardCatalog:
        return self._catalog

    async def roll(self, player_id: str, pack_id: str, count: int) -> RollResult:
        pack = self._catalog.get_pack(pack_id)
        if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= pack.max_batch:
            raise InvalidRollCount(count, pack.max_batch)

        persist_error: TransientError | None = None
        async with self._tracker.locked(player_id):
            await self._tracker.load(player_id)
            before = self._tracker.snapshot(player_id)
            cards: list[Card] = []
            forced: list[bool] = []
            try:
                for slot in range(count):
                    card, was_forced = self._roll_slot(player_id, pack, last=slot == count - 1)
                    cards.append(card)
                    forced.append(was_forced)
            except ConfigurationError:
                # Nothing was delivered, so the partial batch must not move pity.
                self._tracker.restore(player_id, before)
                raise
            result = RollResult(
                pack_id=pack.pack_id,
                cards=tuple(cards),
                forced=tuple(forced),
                pity_counter=self._tracker.counter(player_id, pack),
                value_multiplier=pack.value_multiplier,
            )
            logger.info(
                "Rolled %s card(s) from %s for %s (forced=%s, pity=%s)",
                result.count,
                pack.pack_id,
                player_id,
                sum(forced),
                result.pity_counter,
            )
            try:
                await self._tracker.commit(player_id)
            except TransientError as exc:
                exc.result = result
                persist_error = exc

        if self._event_bus is not None:
            await self._event_bus.publish(
                ROLL_COMPLETED,
                {
                    "player_id": player_id,
                    "pack_id": pack.pack_id,
                    "cards": [card.card_id for card in result.cards],
                    "forced": list(result.forced),
                    "pity_counter": result.pity_counter,
                    "total_value": result.total_value,
                    "persisted": persist_error is None,
                },
            )
        if persist_error is not None:
            raise persist_error
        return result

    def _roll_slot(self, player_id: str, pack: PackType, *, last: bool = False) -> tuple[Card, bool]:
        forced = self._tracker.should_force(player_id, pack)
        if forced:
            rarity = pack.qualifying_rarity
        elif last and self._last_slot_bonus(pack):
            rarity = self._rng.choice(self._catalog.bonus_rarities(pack.pack_id))
        else:
            rarity = self._distribution.sample(pack, self._rng)
        card = self._resolve(pack, rarity)
        self._tracker.record_result(player_id, pack, card.rarity)
        return card, forced

    def _last_slot_bonus(self, pack: PackType) -> bool:
        return pack.last_slot_floor is not None and self._rng.random() < pack.last_slot_chance

    def _resolve(self, pack: PackType, rarity: Rarity) -> Card:
        pool = self._catalog.list_by_rarity_and_pack(rarity, pack.pack_id)
        if not pool:
            raise ConfigurationError(
                f"Pack '{pack.pack_id}' has no {rarity.value} cards in its pool"
            )
        return self._rng.choice(pool)
