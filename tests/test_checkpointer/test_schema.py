"""Tests for schema setup and the once-per-instance guard."""

import sqlite3

import pytest

from graphvault.checkpointers import AiosqliteExecutor, Checkpoint, CheckpointKey, SqliteCheckpointer
from graphvault.checkpointers._schema import enable_wal, ensure_schema

aiosqlite = pytest.importorskip("aiosqlite")


class RecordingExecutor:
    """Wraps an executor and records every statement."""

    def __init__(self, inner, *, fail_pragma=False):
        self.inner = inner
        self.fail_pragma = fail_pragma
        self.statements = []

    async def execute(self, sql, params=()):
        self.statements.append(sql)
        if self.fail_pragma and sql.startswith("PRAGMA"):
            raise sqlite3.OperationalError("journal mode not supported")
        return await self.inner.execute(sql, params)

    async def batch(self, statements, mode="write"):
        self.statements.extend(sql for sql, _ in statements)
        await self.inner.batch(statements, mode)

    async def close(self):
        await self.inner.close()

    def count(self, fragment):
        return sum(fragment in sql for sql in self.statements)


async def _table_columns(executor, table):
    return [row[1] for row in await executor.execute(f"PRAGMA table_info({table})")]


class TestEnsureSchema:
    async def test_creates_tables(self, tmp_path):
        ex = AiosqliteExecutor(str(tmp_path / "schema.db"))
        try:
            await ensure_schema(ex)
            assert await _table_columns(ex, "checkpoints") == [
                "thread_id",
                "checkpoint_ns",
                "checkpoint_id",
                "parent_checkpoint_id",
                "type",
                "checkpoint",
                "metadata",
            ]
            assert await _table_columns(ex, "writes") == [
                "thread_id",
                "checkpoint_ns",
                "checkpoint_id",
                "task_id",
                "idx",
                "channel",
                "type",
                "value",
            ]
        finally:
            await ex.close()

    async def test_idempotent(self, tmp_path):
        ex = AiosqliteExecutor(str(tmp_path / "schema.db"))
        try:
            await ensure_schema(ex)
            await ensure_schema(ex)
        finally:
            await ex.close()

    async def test_wal_enabled_on_file(self, tmp_path):
        ex = AiosqliteExecutor(str(tmp_path / "wal.db"))
        try:
            assert await enable_wal(ex) is True
        finally:
            await ex.close()

    async def test_wal_unavailable_in_memory(self):
        ex = AiosqliteExecutor(":memory:")
        try:
            assert await enable_wal(ex) is False
        finally:
            await ex.close()

    async def test_wal_failure_is_not_fatal(self, tmp_path, caplog):
        ex = RecordingExecutor(AiosqliteExecutor(str(tmp_path / "nowal.db")), fail_pragma=True)
        try:
            with caplog.at_level("DEBUG", logger="graphvault.checkpointers"):
                await ensure_schema(ex)
            assert ex.count("CREATE TABLE") == 2
            assert "WAL journal mode not available" in caplog.text
        finally:
            await ex.close()


class TestSetupGuard:
    async def test_schema_created_once_per_instance(self, tmp_path):
        ex = RecordingExecutor(AiosqliteExecutor(str(tmp_path / "guard.db")))
        cp = SqliteCheckpointer(ex)
        try:
            config = await cp.put(CheckpointKey(thread_id="t"), Checkpoint(id="c1"), {})
            await cp.put_writes(config, [("a", 1)], task_id="t1")
            await cp.get_tuple(config)
            _ = [item async for item in cp.list(config)]
            await cp.delete_thread("t")
            assert ex.count("CREATE TABLE") == 2
        finally:
            await cp.close()

    async def test_separate_instances_each_set_up(self, tmp_path):
        first = RecordingExecutor(AiosqliteExecutor(str(tmp_path / "a.db")))
        second = RecordingExecutor(AiosqliteExecutor(str(tmp_path / "b.db")))
        try:
            await SqliteCheckpointer(first).get_tuple(CheckpointKey(thread_id="t"))
            await SqliteCheckpointer(second).get_tuple(CheckpointKey(thread_id="t"))
            assert first.count("CREATE TABLE") == 2
            assert second.count("CREATE TABLE") == 2
        finally:
            await first.close()
            await second.close()
