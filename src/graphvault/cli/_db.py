"""Database access helpers for CLI commands.

Creates a SqliteCheckpointer from a --db path and provides async helpers.
"""

from __future__ import annotations

import asyncio
from typing import Any


def run_async(coro: Any) -> Any:
    """Run an async coroutine from sync CLI context."""
    return asyncio.run(coro)


async def open_checkpointer(db: str):
    """Open a SqliteCheckpointer, initialize it, and return it."""
    from graphvault.checkpointers import SqliteCheckpointer

    cp = SqliteCheckpointer.from_path(db)
    await cp.initialize()
    return cp
