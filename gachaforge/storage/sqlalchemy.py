"""SQLAlchemy storage backend for GachaForge."""

from __future__ import annotations

from collections import Counter
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Mapping

from sqlalchemy import Integer, String, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .base import CollectionStore, PityState, PityStore, StorageError


class Base(DeclarativeBase):
    pass


class PityTable(Base):
    __tablename__ = "gachaforge_pity"

    player_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    pack_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    counter: Mapped[int] = mapped_column(Integer, default=0)
    threshold: Mapped[int] = mapped_column(Integer)


class CollectionTable(Base):
    __tablename__ = "gachaforge_collection"

    player_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    card_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0)


class AsyncSQLAlchemyStorage:
    """Bundle of async stores backed by SQLAlchemy."""

    def __init__(self, dsn: str, *, echo: bool = False) -> None:
        self._engine = create_async_engine(dsn, echo=echo, future=True)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            yield session

    async def init_models(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    def pity_store(self) -> "AsyncSQLAlchemyPityStore":
        return AsyncSQLAlchemyPityStore(self._session_factory)

    def collection_store(self) -> "AsyncSQLAlchemyCollectionStore":
        return AsyncSQLAlchemyCollectionStore(self._session_factory)


class AsyncSQLAlchemyPityStore(PityStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load(self, player_id: str) -> Mapping[str, PityState]:
        try:
            async with self._session_factory() as session:
                stmt = select(PityTable).where(PityTable.player_id == player_id)
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not load pity state for {player_id}") from exc
        return {
            row.pack_id: PityState(counter=row.counter, threshold=row.threshold) for row in rows
        }

    async def save(self, player_id: str, states: Mapping[str, PityState]) -> None:
        # Whole-snapshot replace inside one transaction.
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(
                        delete(PityTable).where(PityTable.player_id == player_id)
                    )
                    session.add_all(
                        [
                            PityTable(
                                player_id=player_id,
                                pack_id=pack_id,
                                counter=state.counter,
                                threshold=state.threshold,
                            )
                            for pack_id, state in states.items()
                        ]
                    )
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not save pity state for {player_id}") from exc


class AsyncSQLAlchemyCollectionStore(CollectionStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def owned(self, player_id: str) -> Mapping[str, int]:
        try:
            async with self._session_factory() as session:
                stmt = select(CollectionTable).where(CollectionTable.player_id == player_id)
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not load collection for {player_id}") from exc
        return {row.card_id: row.quantity for row in rows if row.quantity > 0}

    async def add_cards(self, player_id: str, card_ids: Iterable[str]) -> None:
        counts = Counter(card_ids)
        if not counts:
            return
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    for card_id, amount in counts.items():
                        row = await session.get(CollectionTable, (player_id, card_id))
                        if row is None:
                            session.add(
                                CollectionTable(
                                    player_id=player_id, card_id=card_id, quantity=amount
                                )
                            )
                        else:
                            row.quantity += amount
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not update collection for {player_id}") from exc
