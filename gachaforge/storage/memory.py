"""In-memory storage backend for GachaForge."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Mapping

from .base import CollectionStore, PityState, PityStore


class InMemoryPityStore(PityStore):
    def __init__(self) -> None:
        self._records: dict[str, dict[str, PityState]] = {}
        self.saves = 0

    async def load(self, player_id: str) -> Mapping[str, PityState]:
        stored = self._records.get(player_id, {})
        return {pack_id: state.copy() for pack_id, state in stored.items()}

    async def save(self, player_id: str, states: Mapping[str, PityState]) -> None:
        self._records[player_id] = {pack_id: state.copy() for pack_id, state in states.items()}
        self.saves += 1

    def dump(self) -> dict[str, dict[str, dict[str, int]]]:
        return {
            player_id: {pack_id: state.to_dict() for pack_id, state in states.items()}
            for player_id, states in self._records.items()
        }


class InMemoryCollectionStore(CollectionStore):
    def __init__(self) -> None:
        self._collections: dict[str, Counter[str]] = {}

    async def owned(self, player_id: str) -> Mapping[str, int]:
        return dict(self._collections.get(player_id, Counter()))

    async def add_cards(self, player_id: str, card_ids: Iterable[str]) -> None:
        collection = self._collections.setdefault(player_id, Counter())
        collection.update(card_ids)
