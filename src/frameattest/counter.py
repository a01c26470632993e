"""
frameattest.counter - Visit counter and its key-value backends.

Backends: MemoryCounterStore (default, tests), PostgresCounterStore (asyncpg)

The counter is best-effort: concurrent POSTs may read the same value and
lose an increment. Values are stored as strings so any string store fits.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

import asyncpg

COUNTER_NAMESPACE = "frameState"
COUNTER_KEY = "count"


# ─── Abstract Store ────────────────────────────────────────────────

class CounterStore(ABC):
    """Minimal async key-value interface."""

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None: ...


# ─── Memory Store ──────────────────────────────────────────────────

class MemoryCounterStore(CounterStore):
    """In-process dict. Lost on restart."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._store: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._store.get(key)

    async def set(self, key: str, value: str) -> None:
        self._store[key] = value


# ─── PostgreSQL Store ──────────────────────────────────────────────

class PostgresCounterStore(CounterStore):
    """Key-value rows in a ``frame_state`` table, one namespace per store."""

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS frame_state (
            namespace TEXT NOT NULL,
            key TEXT NOT NULL,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            PRIMARY KEY (namespace, key)
        )
    """

    def __init__(self, database_url: str, namespace: str = COUNTER_NAMESPACE):
        self.database_url = database_url
        self.namespace = namespace
        self._pool: Optional[asyncpg.Pool] = None

    async def connect(self) -> None:
        self._pool = await asyncpg.create_pool(
            self.database_url,
            min_size=1,
            max_size=4,
            command_timeout=10,
            timeout=10,
        )
        async with self._pool.acquire() as conn:
            await conn.execute(self.SCHEMA)

    async def close(self) -> None:
        if self._pool:
            await self._pool.close()
            self._pool = None

    async def get(self, key: str) -> Optional[str]:
        assert self._pool, "PostgresCounterStore not connected"
        async with self._pool.acquire() as conn:
            return await conn.fetchval(
                "SELECT value FROM frame_state WHERE namespace = $1 AND key = $2",
                self.namespace, key,
            )

    async def set(self, key: str, value: str) -> None:
        assert self._pool, "PostgresCounterStore not connected"
        async with self._pool.acquire() as conn:
            await conn.execute(
                """INSERT INTO frame_state (namespace, key, value, updated_at)
                   VALUES ($1, $2, $3, $4)
                   ON CONFLICT (namespace, key)
                   DO UPDATE SET value = EXCLUDED.value, updated_at = EXCLUDED.updated_at""",
                self.namespace, key, value, datetime.now(timezone.utc).isoformat(),
            )


# ─── Counter ───────────────────────────────────────────────────────

def parse_count(raw: Optional[str]) -> int:
    """Stored value as a non-negative int; anything unusable reads as 0."""
    if raw is None:
        return 0
    try:
        value = int(str(raw).strip())
    except ValueError:
        return 0
    return max(value, 0)


class VisitCounter:

    def __init__(self, store: CounterStore, key: str = COUNTER_KEY):
        self.store = store
        self.key = key

    async def read(self) -> int:
        return parse_count(await self.store.get(self.key))

    async def increment(self) -> int:
        """Read, add one, write back. Returns the new value."""
        value = await self.read() + 1
        await self.store.set(self.key, str(value))
        return value
