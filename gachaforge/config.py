"""Configuration models for GachaForge."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Literal, Mapping

from .domain.cards import Rarity
from .domain.deck import DEFAULT_MAX_COPIES, DeckRules

StorageBackend = Literal["memory", "sqlalchemy"]


@dataclass(slots=True)
class StorageConfig:
    """Configure where pity counters and collections are persisted."""

    backend: StorageBackend = "memory"
    dsn: str | None = None
    echo_sql: bool = False

    def resolve_dsn(self) -> str | None:
        if self.dsn:
            return self.dsn
        if self.backend == "sqlalchemy":
            return "sqlite+aiosqlite:///./gachaforge.db"
        return None


@dataclass(slots=True)
class PityConfig:
    """Persistence discipline for pity counters."""

    persist_timeout: float = 2.0
    persist_retries: int = 3
    persist_retry_delay: float = 0.5


@dataclass(slots=True)
class GachaForgeConfig:
    """Top-level configuration container."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    pity: PityConfig = field(default_factory=PityConfig)
    deck: DeckRules = field(default_factory=DeckRules)
    catalog_path: str | None = None
    rng_seed: int | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "GachaForgeConfig":
        """Create config from environment variables prefixed with GACHAFORGE_."""
        prefix = "GACHAFORGE_"
        storage_backend = os.getenv(f"{prefix}STORAGE_BACKEND", "memory")
        if storage_backend not in ("memory", "sqlalchemy"):
            raise ValueError(f"Unsupported {prefix}STORAGE_BACKEND '{storage_backend}'")
        dsn = os.getenv(f"{prefix}STORAGE_DSN")
        echo_sql = os.getenv(f"{prefix}STORAGE_ECHO_SQL", "false").lower() in {"1", "true", "yes"}

        pity_config = PityConfig(
            persist_timeout=float(os.getenv(f"{prefix}PITY_PERSIST_TIMEOUT", "2.0")),
            persist_retries=int(os.getenv(f"{prefix}PITY_PERSIST_RETRIES", "3")),
            persist_retry_delay=float(os.getenv(f"{prefix}PITY_PERSIST_RETRY_DELAY", "0.5")),
        )

        max_copies = dict(DEFAULT_MAX_COPIES)
        max_copies.update(_parse_max_copies(os.getenv(f"{prefix}DECK_MAX_COPIES")))
        deck_rules = DeckRules(
            max_deck_size=int(os.getenv(f"{prefix}MAX_DECK_SIZE", "30")),
            max_copies=max_copies,
        )

        return cls(
            storage=StorageConfig(backend=storage_backend, dsn=dsn, echo_sql=echo_sql),
            pity=pity_config,
            deck=deck_rules,
            catalog_path=os.getenv(f"{prefix}CATALOG_PATH") or None,
            rng_seed=(
                int(os.getenv(f"{prefix}RNG_SEED")) if os.getenv(f"{prefix}RNG_SEED") else None
            ),
            log_level=os.getenv(f"{prefix}LOG_LEVEL", "INFO").upper(),
        )


def _parse_max_copies(raw: str | None) -> Mapping[Rarity, int]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("Invalid JSON for GACHAFORGE_DECK_MAX_COPIES") from exc
    if not isinstance(data, dict):
        raise ValueError("GACHAFORGE_DECK_MAX_COPIES must be a JSON object")
    try:
        return {Rarity(str(k)): int(v) for k, v in data.items()}
    except ValueError as exc:
        raise ValueError(f"GACHAFORGE_DECK_MAX_COPIES is invalid: {exc}") from exc
