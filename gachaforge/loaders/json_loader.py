"""Load cards and pack types from JSON definitions."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Sequence

from ..domain.cards import Card, CardCatalog, CardType, PackType, Rarity
from ..domain.distribution import WEIGHT_TOLERANCE
from ..domain.exceptions import ConfigurationError


@dataclass(slots=True)
class CatalogDefinition:
    cards: Sequence[Card]
    packs: Sequence[PackType]

    def build(self) -> CardCatalog:
        return CardCatalog(self.cards, self.packs)


def load_catalog_from_json(path: str | Path) -> CardCatalog:
    """Read, validate and freeze a catalog JSON file."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_catalog_dict(data).build()


def parse_catalog_dict(data: dict[str, Any]) -> CatalogDefinition:
    """Parse a JSON dict (already decoded) into domain objects."""
    errors = validate_catalog_dict(data)
    if errors:
        raise ConfigurationError(_format_errors("Catalog validation failed", errors))
    cards = tuple(parse_card(entry) for entry in data.get("cards", []))
    packs = tuple(parse_pack(entry) for entry in data.get("packs", []))
    return CatalogDefinition(cards=cards, packs=packs)


def parse_card(entry: dict[str, Any]) -> Card:
    return Card(
        card_id=entry["id"],
        name=entry["name"],
        rarity=Rarity(entry.get("rarity", Rarity.COMMON.value)),
        card_type=CardType(entry.get("type", CardType.CREATURE.value)),
        cost=int(entry.get("cost", 0)),
        attack=int(entry.get("attack", 0)),
        defense=int(entry.get("defense", 0)),
        health=int(entry.get("health", 0)),
        effects=tuple(map(str, entry.get("effects", []))),
        tags=frozenset(map(str, entry.get("tags", []))),
        description=entry.get("description", ""),
    )


def parse_pack(entry: dict[str, Any]) -> PackType:
    return PackType(
        pack_id=entry["id"],
        name=entry.get("name", entry["id"]),
        rarity_weights={Rarity(k): float(v) for k, v in entry["rarityWeights"].items()},
        max_batch=int(entry.get("maxBatch", 10)),
        card_ids=frozenset(entry.get("cards", ())),
        tags=frozenset(entry.get("tags", ())),
        qualifying_rarity=Rarity(entry.get("qualifyingRarity", Rarity.EPIC.value)),
        pity_threshold=int(entry.get("pityThreshold", 50)),
        value_multiplier=float(entry.get("bonusMultiplier", 1.0)),
        last_slot_floor=Rarity(entry["lastSlotFloor"]) if entry.get("lastSlotFloor") else None,
        last_slot_chance=float(entry.get("lastSlotChance", 0.5)),
    )


def validate_catalog_file(path: str | Path) -> list[str]:
    """Validate catalog JSON file and return a list of errors."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        return [f"Catalog is not valid JSON: {exc}"]
    except OSError as exc:
        return [f"Catalog cannot be read: {exc}"]
    errors = validate_catalog_dict(data)
    if errors:
        return errors
    try:
        parse_catalog_dict(data).build()
    except ConfigurationError as exc:
        return [str(exc)]
    return []


def validate_catalog_dict(data: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["Catalog must be a JSON object."]

    cards_raw = data.get("cards")
    card_ids: set[str] = set()
    if not isinstance(cards_raw, list) or not cards_raw:
        errors.append("Catalog must contain non-empty 'cards' array.")
    else:
        for idx, entry in enumerate(cards_raw, start=1):
            if not isinstance(entry, dict):
                errors.append(f"Card #{idx} must be an object.")
                continue
            card_id = entry.get("id")
            if not isinstance(card_id, str) or not card_id.strip():
                errors.append(f"Card #{idx} must define non-empty 'id'.")
                continue
            if card_id in card_ids:
                errors.append(f"Card id '{card_id}' defined multiple times.")
            card_ids.add(card_id)

            name = entry.get("name")
            if not isinstance(name, str) or not name.strip():
                errors.append(f"Card '{card_id}' must define non-empty 'name'.")

            rarity_value = entry.get("rarity")
            if not _is_rarity(rarity_value):
                errors.append(f"Card '{card_id}' has invalid rarity '{rarity_value}'.")

            type_value = entry.get("type", CardType.CREATURE.value)
            if type_value not in {card_type.value for card_type in CardType}:
                errors.append(f"Card '{card_id}' has invalid type '{type_value}'.")

            for stat in ("cost", "attack", "defense", "health"):
                value = entry.get(stat, 0)
                if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                    errors.append(f"Card '{card_id}' '{stat}' must be a non-negative integer.")

            for list_field in ("effects", "tags"):
                value = entry.get(list_field, [])
                if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                    errors.append(f"Card '{card_id}' '{list_field}' must be a list of strings.")

    packs_raw = data.get("packs")
    if not isinstance(packs_raw, list) or not packs_raw:
        errors.append("Catalog must contain non-empty 'packs' array.")
        return errors

    pack_ids: set[str] = set()
    for idx, entry in enumerate(packs_raw, start=1):
        if not isinstance(entry, dict):
            errors.append(f"Pack #{idx} must be an object.")
            continue
        pack_id = entry.get("id")
        if not isinstance(pack_id, str) or not pack_id.strip():
            errors.append(f"Pack #{idx} must define non-empty 'id'.")
            continue
        if pack_id in pack_ids:
            errors.append(f"Pack id '{pack_id}' defined multiple times.")
        pack_ids.add(pack_id)

        cards = entry.get("cards", [])
        if not isinstance(cards, list):
            errors.append(f"Pack '{pack_id}' 'cards' must be an array.")
        else:
            for card_id in cards:
                if not isinstance(card_id, str):
                    errors.append(f"Pack '{pack_id}' 'cards' entries must be card id strings.")
                elif card_ids and card_id not in card_ids:
                    errors.append(f"Pack '{pack_id}' references unknown card '{card_id}'.")

        tags = entry.get("tags", [])
        if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
            errors.append(f"Pack '{pack_id}' 'tags' must be a list of strings.")

        for key in ("maxBatch", "pityThreshold"):
            value = entry.get(key, 1)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                errors.append(f"Pack '{pack_id}' has invalid '{key}' value '{value}'.")

        qualifying = entry.get("qualifyingRarity", Rarity.EPIC.value)
        if not _is_rarity(qualifying):
            errors.append(f"Pack '{pack_id}' has invalid 'qualifyingRarity' '{qualifying}'.")

        multiplier = entry.get("bonusMultiplier", 1)
        if isinstance(multiplier, bool) or not isinstance(multiplier, (int, float)) or multiplier <= 0:
            errors.append(f"Pack '{pack_id}' 'bonusMultiplier' must be a positive number.")
        floor = entry.get("lastSlotFloor")
        if floor is not None and not _is_rarity(floor):
            errors.append(f"Pack '{pack_id}' has invalid 'lastSlotFloor' '{floor}'.")
        chance = entry.get("lastSlotChance", 0.5)
        if isinstance(chance, bool) or not isinstance(chance, (int, float)) or not 0 <= chance <= 1:
            errors.append(f"Pack '{pack_id}' 'lastSlotChance' must be a number between 0 and 1.")

        rarity_weights = entry.get("rarityWeights")
        if not isinstance(rarity_weights, dict) or not rarity_weights:
            errors.append(f"Pack '{pack_id}' must define non-empty 'rarityWeights'.")
            continue
        weights_ok = True
        for rarity_code, weight in rarity_weights.items():
            if not _is_rarity(rarity_code):
                errors.append(f"Pack '{pack_id}' rarityWeights contains invalid rarity '{rarity_code}'.")
                weights_ok = False
            if isinstance(weight, bool) or not isinstance(weight, (int, float)) or weight < 0:
                errors.append(
                    f"Pack '{pack_id}' rarityWeights for '{rarity_code}' must be a non-negative number."
                )
                weights_ok = False
        if weights_ok:
            total = math.fsum(float(weight) for weight in rarity_weights.values())
            if abs(total - 1.0) > WEIGHT_TOLERANCE:
                errors.append(f"Pack '{pack_id}' rarityWeights sum to {total:.6f}, expected 1.")

    return errors


def _is_rarity(value: object) -> bool:
    return isinstance(value, str) and value in {rarity.value for rarity in Rarity}


def _format_errors(prefix: str, errors: Iterable[str]) -> str:
    formatted = "\n".join(f"- {err}" for err in errors)
    return f"{prefix}:\n{formatted}"
