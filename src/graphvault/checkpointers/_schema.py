"""Schema setup for checkpointer databases.

Creates the ``checkpoints`` and ``writes`` tables if they don't exist.
Safe to re-run: every statement is ``IF NOT EXISTS``.
"""

from __future__ import annotations

import logging
import sqlite3

from graphvault.checkpointers.executor import Executor

logger = logging.getLogger("graphvault.checkpointers")


async def ensure_schema(executor: Executor) -> None:
    """Enable WAL where supported and create both tables."""
    await enable_wal(executor)
    await executor.execute(_CREATE_CHECKPOINTS)
    await executor.execute(_CREATE_WRITES)
    logger.debug("Checkpointer schema ready.")


async def enable_wal(executor: Executor) -> bool:
    """Try to switch the journal to WAL. Returns whether it took effect.

    In-memory databases and some storage modes refuse WAL; that only
    costs read/write concurrency, so failures are logged and ignored.
    """
    try:
        rows = await executor.execute("PRAGMA journal_mode=WAL")
    except sqlite3.Error as e:
        logger.debug("WAL journal mode not available: %s", e)
        return False
    mode = rows[0][0] if rows else None
    if mode != "wal":
        logger.debug("WAL journal mode not available, journal_mode=%s", mode)
        return False
    return True


# === SQL Definitions ===

_CREATE_CHECKPOINTS = """
CREATE TABLE IF NOT EXISTS checkpoints (
    thread_id TEXT NOT NULL,
    checkpoint_ns TEXT NOT NULL DEFAULT '',
    checkpoint_id TEXT NOT NULL,
    parent_checkpoint_id TEXT,
    type TEXT,
    checkpoint BLOB,
    metadata BLOB,
    PRIMARY KEY (thread_id, checkpoint_ns, checkpoint_id)
)
"""

_CREATE_WRITES = """
CREATE TABLE IF NOT EXISTS writes (
    thread_id TEXT NOT NULL,
    checkpoint_ns TEXT NOT NULL DEFAULT '',
    checkpoint_id TEXT NOT NULL,
    task_id TEXT NOT NULL,
    idx INTEGER NOT NULL,
    channel TEXT NOT NULL,
    type TEXT,
    value BLOB,
    PRIMARY KEY (thread_id, checkpoint_ns, checkpoint_id, task_id, idx)
)
"""
