"""Per-player pity counters with a keyed-lock discipline."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Mapping

from .cards import PackType, Rarity
from .events import (
    PITY_PERSIST_EXHAUSTED,
    PITY_PERSIST_FAILED,
    PITY_PERSIST_RECOVERED,
    EventBus,
    EventPayload,
)
from .exceptions import TransientError
from ..storage.base import PityState, PityStore, StorageError

logger = logging.getLogger(__name__)

_TRANSIENT = (asyncio.TimeoutError, StorageError, OSError)


class KeyedLock:
    """One ``asyncio.Lock`` per key, discarded once no task holds or awaits it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __contains__(self, key: str) -> bool:
        return key in self._locks

    def __len__(self) -> int:
        return len(self._locks)


class PityTracker:
    """Cache and lock discipline around a :class:`PityStore`.

    ``should_force`` and ``record_result`` operate on the in-process cache and
    must be called while holding :meth:`locked` for the player, after
    :meth:`load`. :meth:`commit` persists the player's snapshot.
    """

    def __init__(
        self,
        store: PityStore,
        *,
        event_bus: EventBus | None = None,
        persist_timeout: float | None = 2.0,
        persist_retries: int = 3,
        persist_retry_delay: float = 0.5,
    ) -> None:
        self._store = store
        self._event_bus = event_bus
        self._timeout = persist_timeout
        self._max_retries = persist_retries
        self._retry_delay = persist_retry_delay
        self._cache: dict[str, dict[str, PityState]] = {}
        self._locks = KeyedLock()
        self._dirty: set[str] = set()
        self._retry_tasks: dict[str, asyncio.Task[None]] = {}

    def locked(self, player_id: str):
        return self._locks.hold(player_id)

    async def load(self, player_id: str) -> Mapping[str, PityState]:
        states = self._cache.get(player_id)
        if states is not None:
            return states
        try:
            stored = await asyncio.wait_for(self._store.load(player_id), self._timeout)
        except _TRANSIENT as exc:
            logger.warning("Loading pity state for %s failed: %s", player_id, exc)
            raise TransientError(
                f"Pity state for {player_id} is unavailable", player_id=player_id
            ) from exc
        states = {pack_id: state.copy() for pack_id, state in stored.items()}
        self._cache[player_id] = states
        return states

    def state(self, player_id: str, pack: PackType) -> PityState:
        states = self._cache.setdefault(player_id, {})
        state = states.get(pack.pack_id)
        if state is None:
            state = states[pack.pack_id] = PityState(counter=0, threshold=pack.pity_threshold)
        elif state.threshold != pack.pity_threshold:
            state.threshold = pack.pity_threshold
            state.counter = max(0, min(state.counter, state.threshold))
        return state

    def counter(self, player_id: str, pack: PackType) -> int:
        state = self._cache.get(player_id, {}).get(pack.pack_id)
        return state.counter if state else 0

    def should_force(self, player_id: str, pack: PackType) -> bool:
        state = self.state(player_id, pack)
        return state.counter >= state.threshold - 1

    def record_result(self, player_id: str, pack: PackType, achieved: Rarity) -> PityState:
        state = self.state(player_id, pack)
        if Rarity(achieved) >= pack.qualifying_rarity:
            state.counter = 0
        else:
            state.counter = min(state.counter + 1, state.threshold)
        self._dirty.add(player_id)
        return state

    def snapshot(self, player_id: str) -> dict[str, PityState]:
        return {pack_id: state.copy() for pack_id, state in self._cache.get(player_id, {}).items()}

    def restore(self, player_id: str, states: Mapping[str, PityState]) -> None:
        self._cache[player_id] = {pack_id: state.copy() for pack_id, state in states.items()}

    async def commit(self, player_id: str) -> None:
        """Persist the cached snapshot; raises TransientError and schedules a retry on failure."""
        try:
            await self._save(player_id)
        except asyncio.CancelledError:
            self._schedule_retry(player_id)
            raise
        except _TRANSIENT as exc:
            logger.warning("Persisting pity state for %s failed: %s", player_id, exc)
            self._schedule_retry(player_id)
            error = str(exc) or type(exc).__name__
            await self._publish(PITY_PERSIST_FAILED, {"player_id": player_id, "error": error})
            raise TransientError(
                f"Pity state for {player_id} was not persisted", player_id=player_id
            ) from exc

    def pending_retries(self) -> tuple[str, ...]:
        return tuple(pid for pid, task in self._retry_tasks.items() if not task.done())

    async def drain(self) -> None:
        """Wait for scheduled persistence retries to finish."""
        tasks = [task for task in self._retry_tasks.values() if not task.done()]
        if tasks:
            await asyncio.gather(*tasks)

    async def _save(self, player_id: str) -> None:
        snapshot = self.snapshot(player_id)
        await asyncio.wait_for(self._store.save(player_id, snapshot), self._timeout)
        self._dirty.discard(player_id)

    def _schedule_retry(self, player_id: str) -> None:
        task = self._retry_tasks.get(player_id)
        if task is not None and not task.done():
            return
        task = asyncio.get_running_loop().create_task(
            self._retry(player_id), name=f"pity-retry-{player_id}"
        )
        self._retry_tasks[player_id] = task
        task.add_done_callback(lambda done: self._forget_retry(player_id, done))

    def _forget_retry(self, player_id: str, task: asyncio.Task[None]) -> None:
        if self._retry_tasks.get(player_id) is task:
            del self._retry_tasks[player_id]

    async def _retry(self, player_id: str) -> None:
        attempt = 0
        while attempt < self._max_retries:
            attempt += 1
            await asyncio.sleep(self._retry_delay * attempt)
            async with self.locked(player_id):
                if player_id not in self._dirty:
                    logger.info("Pity state for %s was persisted by a later roll.", player_id)
                    return
                try:
                    await self._save(player_id)
                except _TRANSIENT as exc:
                    logger.warning(
                        "Retry %s/%s persisting pity state for %s failed: %s",
                        attempt,
                        self._max_retries,
                        player_id,
                        exc,
                    )
                    continue
            logger.info("Pity state for %s persisted on retry %s.", player_id, attempt)
            await self._publish(PITY_PERSIST_RECOVERED, {"player_id": player_id, "attempts": attempt})
            return
        logger.error(
            "Pity state for %s could not be persisted after %s retries; reconciliation required.",
            player_id,
            self._max_retries,
        )
        states = {pack_id: state.to_dict() for pack_id, state in self.snapshot(player_id).items()}
        await self._publish(PITY_PERSIST_EXHAUSTED, {"player_id": player_id, "states": states})

    async def _publish(self, event_name: str, payload: EventPayload) -> None:
        if self._event_bus is not None:
            await self._event_bus.publish(event_name, payload)
