"""
Persistence backends for the rescue core.

The core only needs `load(key)` and `save(key, records)` over lists of
JSON-compatible dicts. Failures never propagate: loads degrade to an empty
list and saves are logged, the in-memory state stays authoritative.

A key whose last load failed is marked unreadable. Until a later load
succeeds, saves to it are refused so an empty in-memory view never
replaces the stored collection, and callers can check `load_failed()`
before writing seed data.
"""

import asyncio
import copy
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker
import structlog

from app.models.collection import StoredCollection

logger = structlog.get_logger()

Record = Dict[str, Any]

USERS_KEY = "guardian_paws_users"
NGOS_KEY = "guardian_paws_ngos"
REPORTS_KEY = "guardian_paws_reports"


class Persistence(ABC):

    @abstractmethod
    async def load(self, key: str) -> List[Record]:
        ...

    @abstractmethod
    async def save(self, key: str, records: List[Record]) -> None:
        ...

    def load_failed(self) -> bool:
        return False

    async def close(self) -> None:
        pass


class InMemoryPersistence(Persistence):
    """Dict-backed store. Records are deep-copied both ways."""

    def __init__(self, initial: Dict[str, List[Record]] = None):
        self._data: Dict[str, List[Record]] = copy.deepcopy(initial or {})

    async def load(self, key: str) -> List[Record]:
        return copy.deepcopy(self._data.get(key, []))

    async def save(self, key: str, records: List[Record]) -> None:
        self._data[key] = copy.deepcopy(records)


class SqlPersistence(Persistence):
    """
    Stores each collection as one JSON row in the `collections` table.

    Saves to one key are serialized in call order, so the last snapshot
    handed to `save` is the one left in the table.
    """

    def __init__(self, session_factory: async_sessionmaker, engine=None):
        self._session_factory = session_factory
        self._engine = engine
        self._unreadable: Set[str] = set()
        self._save_locks: Dict[str, asyncio.Lock] = {}

    def load_failed(self) -> bool:
        return bool(self._unreadable)

    async def load(self, key: str) -> List[Record]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(StoredCollection).where(StoredCollection.key == key)
                )
                row = result.scalar_one_or_none()
        except Exception as e:
            logger.error("persistence_load_failed", key=key, error=str(e))
            self._unreadable.add(key)
            return []

        self._unreadable.discard(key)
        if row is None or not row.payload:
            return []
        return list(row.payload)

    def _save_lock(self, key: str) -> asyncio.Lock:
        lock = self._save_locks.get(key)
        if lock is None:
            lock = self._save_locks[key] = asyncio.Lock()
        return lock

    async def save(self, key: str, records: List[Record]) -> None:
        if key in self._unreadable:
            logger.warning("persistence_save_skipped", key=key, reason="load_failed")
            return

        # asyncio.Lock is FIFO, so snapshots land in the order they were taken
        async with self._save_lock(key):
            try:
                async with self._session_factory() as session:
                    await session.merge(StoredCollection(key=key, payload=records))
                    await session.commit()
            except Exception as e:
                logger.error("persistence_save_failed", key=key, error=str(e))

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
