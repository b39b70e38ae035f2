"""Card domain models and the immutable catalog."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping

from .exceptions import CardNotFound, ConfigurationError, UnknownPackType


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"
    MYTHIC = "mythic"
    COSMIC = "cosmic"

    @property
    def rank(self) -> int:
        return _RARITY_ORDER.index(self)

    @property
    def points(self) -> int:
        """Collection value of a single card of this tier."""
        return _RARITY_POINTS[self]

    @classmethod
    def ordered(cls) -> tuple["Rarity", ...]:
        return _RARITY_ORDER

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Rarity):
            return NotImplemented
        return self.rank >= other.rank


_RARITY_ORDER = tuple(Rarity)

_RARITY_POINTS = {
    Rarity.COMMON: 10,
    Rarity.UNCOMMON: 25,
    Rarity.RARE: 50,
    Rarity.EPIC: 100,
    Rarity.LEGENDARY: 250,
    Rarity.MYTHIC: 500,
    Rarity.COSMIC: 1000,
}


class CardType(str, Enum):
    CREATURE = "creature"
    SPELL = "spell"
    ARTIFACT = "artifact"


@dataclass(frozen=True, slots=True)
class Card:
    """Definition of a collectible card."""

    card_id: str
    name: str
    rarity: Rarity = Rarity.COMMON
    card_type: CardType = CardType.CREATURE
    cost: int = 0
    attack: int = 0
    defense: int = 0
    health: int = 0
    effects: tuple[str, ...] = ()
    tags: frozenset[str] = frozenset()
    description: str = ""

    def __post_init__(self) -> None:
        if self.cost < 0:
            raise ConfigurationError(f"Card '{self.card_id}' has negative cost {self.cost}")
        object.__setattr__(self, "rarity", Rarity(self.rarity))
        object.__setattr__(self, "card_type", CardType(self.card_type))
        object.__setattr__(self, "effects", tuple(self.effects))
        object.__setattr__(self, "tags", frozenset(self.tags))


@dataclass(frozen=True, slots=True)
class PackType:
    """Named roll configuration.

    ``card_ids`` and ``tags`` restrict the pool a pack draws from; when both
    are empty the pack draws from the whole catalog. ``value_multiplier``
    scales the collection value of a roll. When ``last_slot_floor`` is set,
    the last slot of a batch picks uniformly among the stocked tiers at or
    above it with probability ``last_slot_chance``.
    """

    pack_id: str
    name: str
    rarity_weights: Mapping[Rarity, float] = field(hash=False)
    max_batch: int = 10
    card_ids: frozenset[str] = frozenset()
    tags: frozenset[str] = frozenset()
    qualifying_rarity: Rarity = Rarity.EPIC
    pity_threshold: int = 50
    value_multiplier: float = 1.0
    last_slot_floor: Rarity | None = None
    last_slot_chance: float = 0.5

    def __post_init__(self) -> None:
        weights = {Rarity(key): float(value) for key, value in self.rarity_weights.items()}
        object.__setattr__(self, "rarity_weights", MappingProxyType(weights))
        object.__setattr__(self, "card_ids", frozenset(self.card_ids))
        object.__setattr__(self, "tags", frozenset(self.tags))
        object.__setattr__(self, "qualifying_rarity", Rarity(self.qualifying_rarity))
        if self.last_slot_floor is not None:
            object.__setattr__(self, "last_slot_floor", Rarity(self.last_slot_floor))

    def allows(self, card: Card) -> bool:
        if self.card_ids and card.card_id not in self.card_ids:
            return False
        if self.tags and not (self.tags & card.tags):
            return False
        return True

    def reachable_rarities(self) -> tuple[Rarity, ...]:
        """Tiers a roll on this pack can produce, sampled or forced."""
        tiers = {rarity for rarity, weight in self.rarity_weights.items() if weight > 0}
        tiers.add(self.qualifying_rarity)
        return tuple(sorted(tiers))


class CardCatalog:
    """Read-only registry of cards and pack types.

    Pools per ``(rarity, pack)`` are computed once at construction; a catalog
    that cannot serve every reachable tier of every pack is rejected.
    """

    def __init__(self, cards: Iterable[Card], packs: Iterable[PackType]) -> None:
        from .distribution import validate_weights

        card_map: dict[str, Card] = {}
        for card in cards:
            if card.card_id in card_map:
                raise ConfigurationError(f"Card {card.card_id} already registered")
            card_map[card.card_id] = card
        pack_map: dict[str, PackType] = {}
        for pack in packs:
            if pack.pack_id in pack_map:
                raise ConfigurationError(f"Pack {pack.pack_id} already registered")
            pack_map[pack.pack_id] = pack

        ordered_cards = sorted(card_map.values(), key=lambda card: card.card_id)
        pools: dict[tuple[str, Rarity], tuple[Card, ...]] = {}
        errors: list[str] = []
        for pack in pack_map.values():
            try:
                validate_weights(pack.rarity_weights, label=f"Pack '{pack.pack_id}'")
            except ConfigurationError as exc:
                errors.append(str(exc))
            if pack.max_batch <= 0:
                errors.append(f"Pack '{pack.pack_id}' has non-positive max batch {pack.max_batch}.")
            if pack.pity_threshold <= 0:
                errors.append(
                    f"Pack '{pack.pack_id}' has non-positive pity threshold {pack.pity_threshold}."
                )
            if pack.value_multiplier <= 0:
                errors.append(
                    f"Pack '{pack.pack_id}' has non-positive value multiplier {pack.value_multiplier}."
                )
            if not 0 <= pack.last_slot_chance <= 1:
                errors.append(
                    f"Pack '{pack.pack_id}' last slot chance {pack.last_slot_chance} is outside [0, 1]."
                )
            for card_id in pack.card_ids:
                if card_id not in card_map:
                    errors.append(f"Pack '{pack.pack_id}' references unknown card '{card_id}'.")

            by_rarity: defaultdict[Rarity, list[Card]] = defaultdict(list)
            for card in ordered_cards:
                if pack.allows(card):
                    by_rarity[card.rarity].append(card)
            for rarity in Rarity.ordered():
                pools[(pack.pack_id, rarity)] = tuple(by_rarity.get(rarity, ()))
            for rarity in pack.reachable_rarities():
                if not pools[(pack.pack_id, rarity)]:
                    errors.append(
                        f"Pack '{pack.pack_id}' can produce {rarity.value} but its pool has no "
                        f"{rarity.value} cards."
                    )
            floor = pack.last_slot_floor
            if floor is not None and not any(
                pools[(pack.pack_id, rarity)] for rarity in Rarity.ordered() if rarity >= floor
            ):
                errors.append(
                    f"Pack '{pack.pack_id}' has no cards at or above its last slot floor "
                    f"{floor.value}."
                )
        if errors:
            raise ConfigurationError(
                "Catalog is inconsistent:\n" + "\n".join(f"- {err}" for err in errors)
            )

        self._cards = MappingProxyType(card_map)
        self._packs = MappingProxyType(pack_map)
        self._pools = MappingProxyType(pools)

    def get_by_id(self, card_id: str) -> Card:
        try:
            return self._cards[card_id]
        except KeyError as exc:
            raise CardNotFound(card_id) from exc

    def has_card(self, card_id: str) -> bool:
        return card_id in self._cards

    def get_pack(self, pack_id: str) -> PackType:
        try:
            return self._packs[pack_id]
        except KeyError as exc:
            raise UnknownPackType(pack_id) from exc

    def has_pack(self, pack_id: str) -> bool:
        return pack_id in self._packs

    def list_by_rarity_and_pack(self, rarity: Rarity, pack_id: str) -> tuple[Card, ...]:
        """Cards of ``rarity`` in the pack's pool, unique and ordered by id."""
        pack = self.get_pack(pack_id)
        return self._pools[(pack.pack_id, Rarity(rarity))]

    def bonus_rarities(self, pack_id: str) -> tuple[Rarity, ...]:
        """Stocked tiers at or above the pack's last slot floor, common first."""
        pack = self.get_pack(pack_id)
        if pack.last_slot_floor is None:
            return ()
        return tuple(
            rarity
            for rarity in Rarity.ordered()
            if rarity >= pack.last_slot_floor and self._pools[(pack.pack_id, rarity)]
        )

    def iter_cards(self) -> Iterable[Card]:
        return self._cards.values()

    def list_cards(
        self,
        *,
        query: str | None = None,
        rarity: Rarity | None = None,
        card_type: CardType | None = None,
    ) -> list[Card]:
        """Filtered listing; with a query the order is :meth:`search` order, else by id."""
        if query and query.strip():
            cards = self.search(query)
        else:
            cards = sorted(self._cards.values(), key=lambda card: card.card_id)
        if rarity is not None:
            cards = [card for card in cards if card.rarity is Rarity(rarity)]
        if card_type is not None:
            cards = [card for card in cards if card.card_type is CardType(card_type)]
        return cards

    def popular_tags(self, limit: int = 10) -> list[tuple[str, int]]:
        counts = Counter(tag for card in self._cards.values() for tag in card.tags)
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]

    def iter_packs(self) -> Iterable[PackType]:
        return self._packs.values()

    def search(self, query: str) -> list[Card]:
        """Cards whose name, description or tags mention ``query``, rarest first."""
        needle = query.strip().lower()
        if not needle:
            return []
        matches = [
            card
            for card in self._cards.values()
            if needle in card.name.lower()
            or needle in card.description.lower()
            or needle in {tag.lower() for tag in card.tags}
        ]
        return sorted(matches, key=lambda card: (-card.rarity.rank, card.name))

    def rarity_counts(self) -> dict[Rarity, int]:
        return dict(Counter(card.rarity for card in self._cards.values()))

    def type_counts(self) -> dict[CardType, int]:
        return dict(Counter(card.card_type for card in self._cards.values()))

    def __len__(self) -> int:
        return len(self._cards)
