"""Automated checks to highlight balancing issues."""

from __future__ import annotations

from dataclasses import dataclass

from ..app import GachaApp
from ..domain.cards import Rarity
from ..domain.distribution import RarityDistribution


@dataclass(slots=True)
class ChecklistIssue:
    severity: str
    message: str


def run_checklist(app: GachaApp) -> list[ChecklistIssue]:
    issues: list[ChecklistIssue] = []
    distribution = RarityDistribution()
    packs = list(app.catalog.iter_packs())
    if not packs:
        issues.append(ChecklistIssue("error", "No pack types are registered."))

    for pack in packs:
        chance = distribution.qualifying_probability(pack)
        if chance <= 0:
            issues.append(
                ChecklistIssue(
                    "warning",
                    f"Pack {pack.pack_id} only reaches {pack.qualifying_rarity.value} through pity.",
                )
            )
        elif 1 / chance > pack.pity_threshold:
            issues.append(
                ChecklistIssue(
                    "warning",
                    f"Pack {pack.pack_id} expects {1 / chance:.0f} rolls per "
                    f"{pack.qualifying_rarity.value}, above its pity threshold of "
                    f"{pack.pity_threshold}; most qualifying results will be forced.",
                )
            )
        for rarity in distribution.probabilities(pack):
            if len(app.catalog.list_by_rarity_and_pack(rarity, pack.pack_id)) == 1:
                issues.append(
                    ChecklistIssue(
                        "info",
                        f"Pack {pack.pack_id} has a single {rarity.value} card; every "
                        f"{rarity.value} roll yields the same card.",
                    )
                )

    for rarity in Rarity.ordered():
        if rarity not in app.config.deck.max_copies:
            issues.append(
                ChecklistIssue("warning", f"No deck copy limit configured for {rarity.value}.")
            )

    return issues
