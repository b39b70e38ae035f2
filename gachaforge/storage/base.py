"""Storage abstractions used by the GachaForge services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Protocol


class StorageError(RuntimeError):
    """Raised by stores when the backend is unavailable."""


@dataclass(slots=True)
class PityState:
    """Consecutive rolls since the last qualifying result on one pack type."""

    counter: int = 0
    threshold: int = 50

    def copy(self) -> "PityState":
        return PityState(counter=self.counter, threshold=self.threshold)

    def to_dict(self) -> dict[str, int]:
        return {"counter": self.counter, "threshold": self.threshold}

    @classmethod
    def from_dict(cls, data: Mapping[str, int]) -> "PityState":
        return cls(counter=int(data["counter"]), threshold=int(data["threshold"]))


class PityStore(Protocol):
    """Persisted layout: player id -> {pack id -> {counter, threshold}}."""

    async def load(self, player_id: str) -> Mapping[str, PityState]:
        ...

    async def save(self, player_id: str, states: Mapping[str, PityState]) -> None:
        ...


class CollectionStore(Protocol):
    """Owned-card quantities per player."""

    async def owned(self, player_id: str) -> Mapping[str, int]:
        ...

    async def add_cards(self, player_id: str, card_ids: Iterable[str]) -> None:
        ...
