import pytest

from gachaforge.domain.cards import Card, Rarity
from gachaforge.domain.deck import Deck, DeckRules, DeckValidator
from gachaforge.domain.exceptions import (
    DeckSizeError,
    DuplicateLimitError,
    UnownedCardError,
    ValidationError,
)


def commons(count: int) -> list[Card]:
    return [Card(card_id=f"common_{idx:02d}", name=f"Common {idx}") for idx in range(count)]


def owned_all(cards) -> dict[str, int]:
    return {card.card_id: 3 for card in cards}


@pytest.fixture()
def validator(catalog) -> DeckValidator:
    return DeckValidator(DeckRules(), catalog=catalog)


def test_full_deck_is_valid(validator):
    pool = commons(10)
    deck = Deck.of(pool * 3)
    assert deck.size == 30
    validator.validate(deck, owned_all(pool))


def test_deck_size_bounds(validator):
    pool = commons(11)
    with pytest.raises(DeckSizeError) as excinfo:
        validator.validate(Deck.of((pool * 3)[:31]), owned_all(pool))
    assert excinfo.value.size == 31
    with pytest.raises(DeckSizeError):
        validator.validate(Deck(), owned_all(pool))


def test_size_is_checked_before_ownership(validator):
    with pytest.raises(DeckSizeError):
        validator.validate(Deck.of(commons(31)), {})


def test_unowned_card_is_rejected(validator):
    pool = commons(2)
    with pytest.raises(UnownedCardError) as excinfo:
        validator.validate(Deck.of(pool), {"common_00": 1, "common_01": 0})
    assert excinfo.value.card_id == "common_01"
    assert isinstance(excinfo.value, ValidationError)


def test_owned_collection_may_be_a_set(validator):
    pool = commons(2)
    validator.validate(Deck.of(pool), {"common_00", "common_01"})


def test_copy_limits_depend_on_rarity(validator):
    pool = commons(1)
    with pytest.raises(DuplicateLimitError) as excinfo:
        validator.validate(Deck.of(pool * 4), owned_all(pool))
    assert excinfo.value.limit == 3

    legend = Card(card_id="crown", name="Crown", rarity=Rarity.LEGENDARY)
    validator.validate(Deck.of([legend]), {"crown": 2})
    with pytest.raises(DuplicateLimitError):
        validator.validate(Deck.of([legend, legend]), {"crown": 2})


def test_restricted_cards_override_rarity_limit(catalog):
    validator = DeckValidator(DeckRules(restricted={"goblin": 1}), catalog=catalog)
    assert validator.check(["militia"] * 3, {"militia": 3}).valid
    verdict = validator.check(["goblin", "goblin"], {"goblin": 2})
    assert not verdict.valid
    assert verdict.error_kind == "DuplicateLimitError"


def test_check_resolves_ids_through_catalog(validator):
    verdict = validator.check(["goblin", "ghost"], {"goblin": 1, "ghost": 1})
    assert verdict.error_kind == "UnownedCardError"
    assert validator.check([], {}).error_kind == "DeckSizeError"
    assert validator.check(["goblin", "dragon"], {"goblin": 1, "dragon": 1}).valid


def test_custom_max_deck_size(catalog):
    validator = DeckValidator(DeckRules(max_deck_size=2), catalog=catalog)
    verdict = validator.check(["goblin"] * 3, {"goblin": 3})
    assert verdict.error_kind == "DeckSizeError"


def test_summarize(validator, catalog):
    owned = {"goblin": 2, "dragon": 1, "crown": 1}
    deck = validator.validate_ids(["goblin", "goblin", "dragon", "crown"], owned)
    stats = validator.summarize(deck)
    assert stats.size == 4
    assert stats.total_cost == 1 + 1 + 7 + 5
    assert stats.average_cost == pytest.approx(3.5)
    assert stats.rarity_distribution == {Rarity.COMMON: 2, Rarity.EPIC: 1, Rarity.LEGENDARY: 1}
