"""SQL executors the checkpointer issues statements through."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any, Literal, Protocol

BatchMode = Literal["write", "read", "deferred"]
Statement = tuple[str, Sequence[Any]]

_BEGIN = {
    "write": "BEGIN IMMEDIATE",
    "read": "BEGIN DEFERRED",
    "deferred": "BEGIN DEFERRED",
}


def _require_aiosqlite() -> Any:
    """Import aiosqlite with a clear error message if not installed."""
    try:
        import aiosqlite

        return aiosqlite
    except ImportError:
        raise ImportError("AiosqliteExecutor requires aiosqlite. Install it with: pip install graphvault") from None


class Executor(Protocol):
    """Runs SQL statements against a store.

    ``batch`` must apply all statements or none of them.
    """

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> list[tuple[Any, ...]]: ...

    async def batch(self, statements: Sequence[Statement], mode: BatchMode = "write") -> None: ...

    async def close(self) -> None: ...


class AiosqliteExecutor:
    """Executor over a single aiosqlite connection.

    The connection runs in autocommit mode; ``batch`` wraps its statements
    in an explicit transaction. Statements are serialized on the connection
    so a batch never picks up another coroutine's statement mid-transaction.

    Args:
        path: SQLite database file path (or ":memory:").
    """

    def __init__(self, path: str):
        self._path = path
        self._db: Any = None
        self._lock = asyncio.Lock()
        self._aiosqlite = _require_aiosqlite()

    @property
    def path(self) -> str:
        return self._path

    async def _ensure_db(self) -> Any:
        """Lazy-connect on first use."""
        if self._db is None:
            self._db = await self._aiosqlite.connect(self._path, isolation_level=None)
        return self._db

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> list[tuple[Any, ...]]:
        async with self._lock:
            db = await self._ensure_db()
            async with db.execute(sql, tuple(params)) as cursor:
                rows = await cursor.fetchall()
        return [tuple(row) for row in rows]

    async def batch(self, statements: Sequence[Statement], mode: BatchMode = "write") -> None:
        if not statements:
            return
        async with self._lock:
            db = await self._ensure_db()
            await db.execute(_BEGIN[mode])
            try:
                for sql, params in statements:
                    await db.execute(sql, tuple(params))
            except BaseException:
                await db.rollback()
                raise
            await db.commit()

    async def close(self) -> None:
        """Close the connection."""
        if self._db is not None:
            await self._db.close()
            self._db = None
