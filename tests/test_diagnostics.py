from random import Random

from gachaforge import GachaApp, GachaForgeConfig
from gachaforge.diagnostics import RollSimulator, run_checklist
from gachaforge.domain.cards import Rarity


def test_simulator_respects_pity(catalog):
    simulator = RollSimulator(catalog, rng=Random(3))
    result = simulator.simulate("steady", rolls=200)
    assert result.forced == 4
    assert result.rarities[Rarity.EPIC] == 4
    assert result.longest_drought == 49


def test_simulator_without_pity_never_forces(catalog):
    result = RollSimulator(catalog, rng=Random(3)).simulate("steady", rolls=200, pity=False)
    assert result.forced == 0
    assert result.frequency(Rarity.COMMON) == 1.0


def test_checklist_flags_pity_only_tiers(catalog):
    issues = run_checklist(GachaApp(GachaForgeConfig(), catalog=catalog))
    messages = [issue.message for issue in issues]
    assert "Pack steady only reaches epic through pity." in messages
    assert any(
        issue.severity == "info" and "single rare card" in issue.message for issue in issues
    )
    assert not any(issue.severity == "error" for issue in issues)


def test_checklist_on_memory_app(memory_app):
    issues = run_checklist(memory_app)
    assert not any(issue.severity == "error" for issue in issues)


def test_simulator_applies_last_slot_floor_per_batch(catalog):
    result = RollSimulator(catalog, rng=Random(4)).simulate("deluxe", rolls=40, batch=4, pity=False)
    upgraded = sum(count for rarity, count in result.rarities.items() if rarity >= Rarity.RARE)
    assert upgraded == 10
    assert result.rarities[Rarity.COMMON] == 30
