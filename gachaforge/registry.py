"""Chainable builder for the immutable card catalog."""

from __future__ import annotations

from typing import Iterable

from .domain.cards import Card, CardCatalog, PackType
from .domain.exceptions import ConfigurationError


class CardRegistry:
    """Collect card and pack definitions, then freeze them into a CardCatalog."""

    def __init__(self) -> None:
        self._cards: dict[str, Card] = {}
        self._packs: dict[str, PackType] = {}

    def card(self, card: Card) -> "CardRegistry":
        if card.card_id in self._cards:
            raise ConfigurationError(f"Card {card.card_id} already registered")
        self._cards[card.card_id] = card
        return self

    def cards(self, cards: Iterable[Card]) -> "CardRegistry":
        for card in cards:
            self.card(card)
        return self

    def pack(self, pack: PackType) -> "CardRegistry":
        if pack.pack_id in self._packs:
            raise ConfigurationError(f"Pack {pack.pack_id} already registered")
        self._packs[pack.pack_id] = pack
        return self

    def packs(self, packs: Iterable[PackType]) -> "CardRegistry":
        for pack in packs:
            self.pack(pack)
        return self

    def build(self) -> CardCatalog:
        return CardCatalog(self._cards.values(), self._packs.values())


__all__ = ["CardRegistry"]
