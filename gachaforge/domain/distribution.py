"""Weighted rarity sampling."""

from __future__ import annotations

import math
from typing import Mapping, Protocol, Sequence, TypeVar

from .cards import PackType, Rarity
from .exceptions import ConfigurationError

T = TypeVar("T")

WEIGHT_TOLERANCE = 1e-6


class RandomSource(Protocol):
    """Subset of :class:`random.Random` the engine relies on."""

    def random(self) -> float: ...

    def choice(self, seq: Sequence[T]) -> T: ...


def validate_weights(weights: Mapping[Rarity, float], *, label: str = "Weight table") -> None:
    """Reject tables with negative weights or a total other than 1."""
    if not weights:
        raise ConfigurationError(f"{label} has an empty rarity weight table.")
    for rarity, weight in weights.items():
        if not isinstance(rarity, Rarity):
            raise ConfigurationError(f"{label} references invalid rarity '{rarity}'.")
        if weight is None or math.isnan(weight) or weight < 0:
            raise ConfigurationError(f"{label} has negative weight {weight} for {rarity.value}.")
    total = math.fsum(weights.values())
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise ConfigurationError(f"{label} rarity weights sum to {total:.6f}, expected 1.")


class RarityDistribution:
    """Cumulative-weight inversion over tiers in fixed order, common first."""

    def sample(self, pack: PackType, rng: RandomSource) -> Rarity:
        draw = rng.random()
        cumulative = 0.0
        last_positive: Rarity | None = None
        for rarity in Rarity.ordered():
            weight = pack.rarity_weights.get(rarity, 0.0)
            if weight <= 0:
                continue
            cumulative += weight
            last_positive = rarity
            if draw < cumulative:
                return rarity
        # Floating residue when the weights sum to just under 1.
        if last_positive is None:
            raise ConfigurationError(f"Pack '{pack.pack_id}' has no positive rarity weight.")
        return last_positive

    def probabilities(self, pack: PackType) -> dict[Rarity, float]:
        return {
            rarity: pack.rarity_weights.get(rarity, 0.0)
            for rarity in Rarity.ordered()
            if pack.rarity_weights.get(rarity, 0.0) > 0
        }

    def qualifying_probability(self, pack: PackType) -> float:
        """Chance that a single sampled roll reaches the pack's qualifying tier."""
        return math.fsum(
            weight
            for rarity, weight in pack.rarity_weights.items()
            if rarity >= pack.qualifying_rarity
        )
