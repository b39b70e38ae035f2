"""Command line helpers for GachaForge."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from random import Random

from rich.console import Console
from rich.table import Table

from .app import GachaApp
from .config import GachaForgeConfig
from .diagnostics.checklist import run_checklist as checklist_run
from .diagnostics.roll_simulator import RollSimulator
from .domain.distribution import RarityDistribution
from .domain.exceptions import ConfigurationError
from .loaders import load_catalog_from_json, validate_catalog_file
from .validators import validate_app

console = Console()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_simulator(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="GachaForge roll simulator")
    parser.add_argument("catalog", help="Path to catalog JSON file")
    parser.add_argument("pack_id", help="Pack type to simulate")
    parser.add_argument("--rolls", type=int, default=100_000, help="Number of rolls to simulate")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--no-pity", action="store_true", help="Disable the pity timer")
    parser.add_argument("--batch", type=int, default=1, help="Cards per roll request")
    args = parser.parse_args(argv)

    catalog = _load_catalog(args.catalog)
    simulator = RollSimulator(catalog, rng=Random(args.seed))
    result = simulator.simulate(
        args.pack_id, rolls=args.rolls, pity=not args.no_pity, batch=max(1, args.batch)
    )
    pack = catalog.get_pack(args.pack_id)
    configured = RarityDistribution().probabilities(pack)

    table = Table(title=f"{result.rolls} rolls on {pack.name}")
    table.add_column("Rarity")
    table.add_column("Configured", justify="right")
    table.add_column("Observed", justify="right")
    table.add_column("Count", justify="right")
    for rarity in sorted(set(configured) | set(result.rarities)):
        table.add_row(
            rarity.value,
            f"{configured.get(rarity, 0.0):.2%}",
            f"{result.frequency(rarity):.2%}",
            str(result.rarities.get(rarity, 0)),
        )
    console.print(table)
    console.print(
        f"Forced rolls: {result.forced}, longest drought: {result.longest_drought}, "
        f"unique cards: {len(result.cards)}"
    )


def run_checklist(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="GachaForge balance checks")
    parser.add_argument("catalog", help="Path to catalog JSON file")
    args = parser.parse_args(argv)

    app = _build_app(args.catalog)
    issues = checklist_run(app)
    if not issues:
        console.print("[bold green]No issues found.[/bold green]")
        return
    for issue in issues:
        console.print(f"[{issue.severity.upper()}] {issue.message}", markup=False)
    if any(issue.severity == "error" for issue in issues):
        sys.exit(1)


def run_validate(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="GachaForge catalog validator")
    parser.add_argument("catalog", help="Path to catalog JSON file")
    args = parser.parse_args(argv)

    errors = validate_catalog_file(Path(args.catalog))
    if errors:
        console.print("[bold red]Catalog errors:[/bold red]")
        for err in errors:
            console.print(f"- {err}", markup=False)
        sys.exit(1)

    issues = validate_app(_build_app(args.catalog))
    if issues:
        console.print("[bold red]Configuration errors:[/bold red]")
        for issue in issues:
            console.print(f"- {issue}", markup=False)
        sys.exit(1)
    console.print("[bold green]Catalog is valid.[/bold green]")


def run_server(argv: list[str] | None = None) -> None:
    import uvicorn

    from .web import create_app

    parser = argparse.ArgumentParser(description="Serve the GachaForge HTTP API")
    parser.add_argument("catalog", nargs="?", help="Path to catalog JSON file")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    config = GachaForgeConfig.from_env()
    if args.catalog:
        config.catalog_path = args.catalog
    configure_logging(config.log_level)
    uvicorn.run(create_app(GachaApp(config)), host=args.host, port=args.port)


def _load_catalog(path: str):
    try:
        return load_catalog_from_json(path)
    except ConfigurationError as exc:
        console.print(str(exc), markup=False)
    except json.JSONDecodeError as exc:
        console.print(f"Catalog is not valid JSON: {exc}", markup=False)
    except OSError as exc:
        console.print(f"Catalog cannot be read: {exc}", markup=False)
    sys.exit(1)


def _build_app(catalog_path: str) -> GachaApp:
    config = GachaForgeConfig.from_env()
    configure_logging(config.log_level)
    return GachaApp(config, catalog=_load_catalog(catalog_path))
