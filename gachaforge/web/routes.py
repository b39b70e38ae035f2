"""HTTP routes exposing the catalog, the roll engine and deck validation."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictInt

from ..app import GachaApp
from ..domain.cards import Card, CardType, Rarity
from ..domain.engine import RollResult
from ..domain.exceptions import (
    CardNotFound,
    ConfigurationError,
    TransientError,
    ValidationError,
)
from ..storage.base import StorageError

logger = logging.getLogger(__name__)

PlayerResolver = Callable[..., Awaitable[str]]

SERVICE_UNAVAILABLE = "Service unavailable, please try again later."


class RollRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pack_type: str = Field(default="basic", alias="packType")
    count: StrictInt = 1


class DeckValidationRequest(BaseModel):
    cards: list[str] = Field(default_factory=list)


def card_payload(card: Card) -> dict:
    return {
        "id": card.card_id,
        "name": card.name,
        "rarity": card.rarity.value,
        "type": card.card_type.value,
        "cost": card.cost,
        "attack": card.attack,
        "defense": card.defense,
        "health": card.health,
        "effects": list(card.effects),
        "tags": sorted(card.tags),
        "description": card.description,
    }


async def header_player_id(x_player_id: str | None = Header(default=None)) -> str:
    """Default identity resolver; production deployments plug in their session lookup."""
    if not x_player_id:
        raise HTTPException(status_code=401, detail="Missing player identity")
    return x_player_id


def build_router(app: GachaApp, *, identify: PlayerResolver = header_player_id) -> APIRouter:
    router = APIRouter()
    engine = app.roll_engine
    catalog = app.catalog
    collections = app.collection_store
    validator = app.deck_validator

    @router.get("/cards")
    async def list_cards(
        q: str | None = None,
        rarity: Rarity | None = None,
        card_type: CardType | None = Query(default=None, alias="type"),
        limit: int = Query(default=20, ge=1, le=100),
        offset: int = Query(default=0, ge=0),
    ):
        cards = catalog.list_cards(query=q, rarity=rarity, card_type=card_type)
        return {
            "cards": [card_payload(card) for card in cards[offset : offset + limit]],
            "total": len(cards),
            "limit": limit,
            "offset": offset,
        }

    @router.get("/cards/tags")
    async def popular_tags(limit: int = Query(default=10, ge=1, le=50)):
        return {"tags": [{"tag": tag, "count": count} for tag, count in catalog.popular_tags(limit)]}

    @router.get("/cards/{card_id}")
    async def get_card(card_id: str):
        try:
            card = catalog.get_by_id(card_id)
        except CardNotFound as exc:
            return JSONResponse(status_code=404, content={"error": "CardNotFound", "message": str(exc)})
        return card_payload(card)

    @router.post("/cards/roll")
    async def roll_cards(body: RollRequest, player_id: str = Depends(identify)):
        try:
            result = await engine.roll(player_id, body.pack_type, body.count)
        except ValidationError as exc:
            return JSONResponse(status_code=400, content={"error": exc.kind, "message": str(exc)})
        except ConfigurationError:
            logger.exception("Roll on %s failed on catalog configuration", body.pack_type)
            return JSONResponse(
                status_code=500,
                content={"error": "ConfigurationError", "message": SERVICE_UNAVAILABLE},
            )
        except TransientError as exc:
            if exc.result is None:
                return JSONResponse(
                    status_code=503,
                    content={"error": "TransientError", "message": SERVICE_UNAVAILABLE, "retry": True},
                )
            await _grant(player_id, exc.result)
            return JSONResponse(status_code=503, content={**exc.result.to_dict(), "retry": True})

        if not await _grant(player_id, result):
            return JSONResponse(status_code=503, content={**result.to_dict(), "retry": True})
        return result.to_dict()

    @router.post("/decks/validate")
    async def validate_deck(body: DeckValidationRequest, player_id: str = Depends(identify)):
        try:
            owned = await collections.owned(player_id)
        except StorageError:
            logger.exception("Collection for %s is unavailable", player_id)
            return JSONResponse(
                status_code=503,
                content={"error": "TransientError", "message": SERVICE_UNAVAILABLE, "retry": True},
            )
        verdict = validator.check(body.cards, owned)
        if verdict.valid:
            return {"valid": True}
        return {"valid": False, "error": verdict.error_kind, "message": str(verdict.error)}

    async def _grant(player_id: str, result: RollResult) -> bool:
        try:
            await collections.add_cards(player_id, [card.card_id for card in result.cards])
        except StorageError:
            logger.error(
                "Cards %s rolled by %s were not added to the collection",
                [card.card_id for card in result.cards],
                player_id,
                exc_info=True,
            )
            return False
        return True

    return router
