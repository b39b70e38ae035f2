"""Domain models and services."""

from .cards import Card, CardCatalog, CardType, PackType, Rarity
from .deck import Deck, DeckRules, DeckStats, DeckValidator, DeckVerdict
from .distribution import RandomSource, RarityDistribution, validate_weights
from .engine import RollEngine, RollResult
from .events import EventBus
from .exceptions import (
    CardNotFound,
    ConfigurationError,
    DeckError,
    DeckSizeError,
    DuplicateLimitError,
    GachaForgeError,
    InvalidRollCount,
    TransientError,
    UnknownPackType,
    UnownedCardError,
    ValidationError,
)
from .pity import KeyedLock, PityTracker

__all__ = [
    "Card",
    "CardCatalog",
    "CardType",
    "PackType",
    "Rarity",
    "Deck",
    "DeckRules",
    "DeckStats",
    "DeckValidator",
    "DeckVerdict",
    "RandomSource",
    "RarityDistribution",
    "validate_weights",
    "RollEngine",
    "RollResult",
    "EventBus",
    "CardNotFound",
    "ConfigurationError",
    "DeckError",
    "DeckSizeError",
    "DuplicateLimitError",
    "GachaForgeError",
    "InvalidRollCount",
    "TransientError",
    "UnknownPackType",
    "UnownedCardError",
    "ValidationError",
    "KeyedLock",
    "PityTracker",
]
