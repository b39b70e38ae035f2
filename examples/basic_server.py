"""Пример запуска GachaForge: каталог из JSON, симуляция и HTTP API."""

from __future__ import annotations

import asyncio
from pathlib import Path
from random import Random

from gachaforge import GachaApp, GachaForgeConfig
from gachaforge.diagnostics.roll_simulator import RollSimulator
from gachaforge.domain.events import PITY_PERSIST_EXHAUSTED

CATALOG_PATH = Path(__file__).with_name("catalog.json")


def build_app() -> GachaApp:
    config = GachaForgeConfig.from_env()
    config.catalog_path = config.catalog_path or str(CATALOG_PATH)
    app = GachaApp(config)

    async def alert_operators(payload) -> None:
        # Сюда подключается мониторинг: счётчик пити не удалось сохранить.
        print(f"Нужна ручная сверка пити для {payload['player_id']}: {payload['states']}")

    app.event_bus.subscribe(PITY_PERSIST_EXHAUSTED, alert_operators)
    return app


def simulate() -> None:
    app = build_app()
    result = RollSimulator(app.catalog, rng=Random(42)).simulate("basic", rolls=10_000)
    print(f"Гарантированных выпадений: {result.forced}, самая долгая серия: {result.longest_drought}")


async def roll_once() -> None:
    app = build_app()
    await app.init_backend()
    try:
        result = await app.roll_engine.roll("demo-player", "basic", 3)
        for card, forced in result:
            print(f"{card.name} ({card.rarity.value}){', по гаранту' if forced else ''}")
        print(f"Ценность набора: {result.total_value}")
    finally:
        await app.shutdown()


def run_server() -> None:
    import uvicorn

    from gachaforge.web import create_app

    uvicorn.run(create_app(build_app()), host="127.0.0.1", port=8000)


if __name__ == "__main__":
    asyncio.run(roll_once())
