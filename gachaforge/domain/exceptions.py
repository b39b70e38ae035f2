"""Exceptions raised by GachaForge domain services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .engine import RollResult


class GachaForgeError(RuntimeError):
    """Base class for domain exceptions."""


class ValidationError(GachaForgeError):
    """Raised when caller-supplied input violates a documented constraint."""

    kind = "ValidationError"


class UnknownPackType(ValidationError):
    """Raised when a roll names a pack type that is not loaded."""

    def __init__(self, pack_id: str) -> None:
        super().__init__(f"Unknown pack type '{pack_id}'")
        self.pack_id = pack_id


class InvalidRollCount(ValidationError):
    """Raised when a roll count is not a positive integer within the pack limit."""

    def __init__(self, count: object, max_batch: int) -> None:
        super().__init__(f"Card count must be an integer between 1 and {max_batch}, got {count!r}")
        self.count = count
        self.max_batch = max_batch


class DeckError(ValidationError):
    """Base class for deck composition failures."""


class DeckSizeError(DeckError):
    kind = "DeckSizeError"

    def __init__(self, size: int, max_size: int) -> None:
        super().__init__(f"Deck must contain between 1 and {max_size} cards, got {size}")
        self.size = size
        self.max_size = max_size


class UnownedCardError(DeckError):
    kind = "UnownedCardError"

    def __init__(self, card_id: str) -> None:
        super().__init__(f"Card '{card_id}' is not in the player's collection")
        self.card_id = card_id


class DuplicateLimitError(DeckError):
    kind = "DuplicateLimitError"

    def __init__(self, card_id: str, copies: int, limit: int) -> None:
        super().__init__(f"Card '{card_id}' appears {copies} times, limit is {limit}")
        self.card_id = card_id
        self.copies = copies
        self.limit = limit


class ConfigurationError(GachaForgeError):
    """Raised when catalog or pack-type data is internally inconsistent."""


class CardNotFound(GachaForgeError):
    """Raised when a card identifier is absent from the catalog."""

    def __init__(self, card_id: str) -> None:
        super().__init__(f"Card {card_id} not found")
        self.card_id = card_id


class TransientError(GachaForgeError):
    """Raised when pity state could not be persisted after a completed roll.

    The roll is never discarded: ``result`` holds the cards the player received.
    """

    def __init__(
        self,
        message: str,
        *,
        player_id: str,
        result: "RollResult | None" = None,
    ) -> None:
        super().__init__(message)
        self.player_id = player_id
        self.result = result
