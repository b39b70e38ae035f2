"""Validation utilities for GachaForge applications."""

from __future__ import annotations

from .app import GachaApp
from .domain.cards import Rarity


def validate_app(app: GachaApp) -> list[str]:
    """Return list of validation errors discovered in configured app.

    Catalog consistency (weights, pools) is enforced when the catalog is built;
    this covers the settings layered on top of it.
    """
    errors: list[str] = []

    if not list(app.catalog.iter_packs()):
        errors.append("No pack types registered in application.")

    rules = app.config.deck
    if rules.max_deck_size <= 0:
        errors.append("Deck configuration 'max_deck_size' must be positive.")
    for rarity in Rarity.ordered():
        limit = rules.max_copies.get(rarity)
        if limit is None:
            errors.append(f"Deck configuration has no copy limit for {rarity.value}.")
        elif limit <= 0:
            errors.append(f"Deck copy limit for {rarity.value} must be positive, got {limit}.")
    for card_id, limit in rules.restricted.items():
        if not app.catalog.has_card(card_id):
            errors.append(f"Deck restriction references unknown card '{card_id}'.")
        if limit < 0:
            errors.append(f"Deck restriction for '{card_id}' cannot be negative.")

    pity = app.config.pity
    if pity.persist_timeout is not None and pity.persist_timeout <= 0:
        errors.append("Pity configuration 'persist_timeout' must be positive.")
    if pity.persist_retries < 0:
        errors.append("Pity configuration 'persist_retries' cannot be negative.")
    if pity.persist_retry_delay < 0:
        errors.append("Pity configuration 'persist_retry_delay' cannot be negative.")

    return errors


__all__ = ["validate_app"]
