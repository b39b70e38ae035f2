"""Deck construction rules and validation."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Collection, Iterable, Mapping, Sequence

from .cards import Card, CardCatalog, CardType, Rarity
from .exceptions import DeckError, DeckSizeError, DuplicateLimitError, UnownedCardError

DEFAULT_MAX_COPIES: Mapping[Rarity, int] = {
    Rarity.COMMON: 3,
    Rarity.UNCOMMON: 3,
    Rarity.RARE: 2,
    Rarity.EPIC: 2,
    Rarity.LEGENDARY: 1,
    Rarity.MYTHIC: 1,
    Rarity.COSMIC: 1,
}

OwnedCollection = Collection[str] | Mapping[str, int]


@dataclass(slots=True)
class DeckRules:
    """Composition limits; ``restricted`` overrides the per-rarity copy limit."""

    max_deck_size: int = 30
    max_copies: Mapping[Rarity, int] = field(default_factory=lambda: dict(DEFAULT_MAX_COPIES))
    restricted: Mapping[str, int] = field(default_factory=dict)

    def copy_limit(self, card: Card) -> int:
        if card.card_id in self.restricted:
            return self.restricted[card.card_id]
        return self.max_copies.get(card.rarity, 1)


@dataclass(frozen=True, slots=True)
class Deck:
    cards: tuple[Card, ...] = ()

    @classmethod
    def of(cls, cards: Iterable[Card]) -> "Deck":
        return cls(cards=tuple(cards))

    @property
    def size(self) -> int:
        return len(self.cards)

    @property
    def total_cost(self) -> int:
        return sum(card.cost for card in self.cards)

    def copies(self) -> Counter[str]:
        return Counter(card.card_id for card in self.cards)


@dataclass(frozen=True, slots=True)
class DeckVerdict:
    valid: bool
    error: DeckError | None = None

    @property
    def error_kind(self) -> str | None:
        return self.error.kind if self.error else None


@dataclass(frozen=True, slots=True)
class DeckStats:
    size: int
    total_cost: int
    average_cost: float
    average_attack: float
    average_health: float
    rarity_distribution: Mapping[Rarity, int]
    type_distribution: Mapping[CardType, int]


class DeckValidator:
    """Pure validation of a candidate deck against the player's collection.

    Checks run in order and stop at the first failure: size, ownership,
    per-card copy limit.
    """

    def __init__(self, rules: DeckRules, *, catalog: CardCatalog | None = None) -> None:
        self._rules = rules
        self._catalog = catalog

    @property
    def rules(self) -> DeckRules:
        return self._rules

    def validate(self, deck: Deck, owned: OwnedCollection) -> None:
        self._check_size(deck.size)
        for card in deck.cards:
            if not _owns(owned, card.card_id):
                raise UnownedCardError(card.card_id)
        by_id = {card.card_id: card for card in deck.cards}
        for card_id, copies in deck.copies().items():
            limit = self._rules.copy_limit(by_id[card_id])
            if copies > limit:
                raise DuplicateLimitError(card_id, copies, limit)

    def validate_ids(self, card_ids: Sequence[str], owned: OwnedCollection) -> Deck:
        """Resolve ``card_ids`` through the catalog, validate and return the deck."""
        if self._catalog is None:
            raise RuntimeError("DeckValidator needs a catalog to resolve card ids")
        self._check_size(len(card_ids))
        cards: list[Card] = []
        for card_id in card_ids:
            # A card absent from the catalog can never have been rolled.
            if not self._catalog.has_card(card_id) or not _owns(owned, card_id):
                raise UnownedCardError(card_id)
            cards.append(self._catalog.get_by_id(card_id))
        deck = Deck.of(cards)
        self.validate(deck, owned)
        return deck

    def check(self, card_ids: Sequence[str], owned: OwnedCollection) -> DeckVerdict:
        try:
            self.validate_ids(card_ids, owned)
        except DeckError as exc:
            return DeckVerdict(valid=False, error=exc)
        return DeckVerdict(valid=True)

    def summarize(self, deck: Deck) -> DeckStats:
        size = deck.size
        return DeckStats(
            size=size,
            total_cost=deck.total_cost,
            average_cost=deck.total_cost / size if size else 0.0,
            average_attack=sum(card.attack for card in deck.cards) / size if size else 0.0,
            average_health=sum(card.health for card in deck.cards) / size if size else 0.0,
            rarity_distribution=dict(Counter(card.rarity for card in deck.cards)),
            type_distribution=dict(Counter(card.card_type for card in deck.cards)),
        )

    def _check_size(self, size: int) -> None:
        if not 1 <= size <= self._rules.max_deck_size:
            raise DeckSizeError(size, self._rules.max_deck_size)


def _owns(owned: OwnedCollection, card_id: str) -> bool:
    if isinstance(owned, Mapping):
        return owned.get(card_id, 0) > 0
    return card_id in owned
