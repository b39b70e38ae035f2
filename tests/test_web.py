from random import Random

import pytest
from fastapi.testclient import TestClient

from gachaforge import GachaApp, GachaForgeConfig
from gachaforge.storage.base import StorageError
from gachaforge.storage.memory import InMemoryPityStore
from gachaforge.web import create_app

ALICE = {"X-Player-Id": "alice"}


class BrokenSaveStore(InMemoryPityStore):
    async def save(self, player_id, states):
        raise StorageError("database is down")


@pytest.fixture()
def gacha(catalog) -> GachaApp:
    return GachaApp(GachaForgeConfig(), catalog=catalog, rng=Random(5))


@pytest.fixture()
def client(gacha):
    with TestClient(create_app(gacha)) as test_client:
        yield test_client


def test_roll_returns_cards(client):
    response = client.post("/cards/roll", json={"packType": "basic", "count": 3}, headers=ALICE)
    assert response.status_code == 200
    body = response.json()
    assert body["packType"] == "basic"
    assert body["count"] == 3
    assert len(body["cards"]) == 3
    assert set(body["cards"][0]) == {"id", "name", "rarity", "forced"}


def test_rolled_cards_join_the_collection_and_validate(client):
    response = client.post("/cards/roll", json={"packType": "steady", "count": 1}, headers=ALICE)
    card_id = response.json()["cards"][0]["id"]

    response = client.post("/decks/validate", json={"cards": [card_id]}, headers=ALICE)
    assert response.json() == {"valid": True}

    response = client.post(
        "/decks/validate", json={"cards": [card_id]}, headers={"X-Player-Id": "bob"}
    )
    body = response.json()
    assert body["valid"] is False
    assert body["error"] == "UnownedCardError"


def test_empty_deck_reports_size_error(client):
    response = client.post("/decks/validate", json={"cards": []}, headers=ALICE)
    assert response.status_code == 200
    assert response.json()["error"] == "DeckSizeError"


@pytest.mark.parametrize(
    "payload",
    [
        {"packType": "mystery", "count": 3},
        {"packType": "basic", "count": 0},
        {"packType": "basic", "count": 11},
        {"packType": "basic", "count": "3"},
        {"packType": "basic", "count": True},
    ],
)
def test_invalid_rolls_are_bad_requests(client, payload):
    response = client.post("/cards/roll", json=payload, headers=ALICE)
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


def test_roll_requires_identity(client):
    response = client.post("/cards/roll", json={"packType": "basic", "count": 1})
    assert response.status_code == 401


def test_persistence_failure_returns_cards_with_retry_flag(catalog):
    config = GachaForgeConfig()
    config.pity.persist_retries = 0
    gacha = GachaApp(config, catalog=catalog, pity_store=BrokenSaveStore())
    with TestClient(create_app(gacha)) as client:
        response = client.post("/cards/roll", json={"packType": "steady", "count": 2}, headers=ALICE)
        assert response.status_code == 503
        body = response.json()
        assert body["retry"] is True
        assert body["count"] == 2

        card_ids = [card["id"] for card in body["cards"]]
        response = client.post("/decks/validate", json={"cards": card_ids[:1]}, headers=ALICE)
        assert response.json()["valid"] is True


def test_roll_reports_value_and_multiplier(client):
    response = client.post("/cards/roll", json={"packType": "deluxe", "count": 2}, headers=ALICE)
    assert response.status_code == 200
    body = response.json()
    assert body["bonusMultiplier"] == 1.5
    assert body["totalValue"] >= round((10 + 50) * 1.5)


def test_get_card(client):
    response = client.get("/cards/dragon")
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "dragon"
    assert body["rarity"] == "epic"
    assert body["type"] == "creature"
    assert body["tags"] == ["beast"]


def test_get_unknown_card_is_not_found(client):
    response = client.get("/cards/ghost")
    assert response.status_code == 404
    assert response.json()["error"] == "CardNotFound"


def test_list_cards_with_filters_and_paging(client):
    response = client.get("/cards", params={"q": "beast", "rarity": "epic"})
    assert response.status_code == 200
    body = response.json()
    assert [card["id"] for card in body["cards"]] == ["dragon", "phoenix"]
    assert body["total"] == 2

    response = client.get("/cards", params={"limit": 3, "offset": 3})
    body = response.json()
    assert body["total"] == 10
    assert [card["id"] for card in body["cards"]] == ["goblin", "healer", "knight"]

    response = client.get("/cards", params={"type": "spell"})
    assert [card["id"] for card in response.json()["cards"]] == ["spark"]


def test_list_cards_rejects_unknown_rarity(client):
    response = client.get("/cards", params={"rarity": "shiny"})
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


def test_popular_tags(client):
    response = client.get("/cards/tags", params={"limit": 1})
    assert response.json() == {"tags": [{"tag": "beast", "count": 3}]}
