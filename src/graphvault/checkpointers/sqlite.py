"""SQLite-based checkpointer."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Any

from graphvault.checkpointers._codec import dump_checkpoint, load_checkpoint, load_metadata
from graphvault.checkpointers._migrate import needs_upgrade, upgrade
from graphvault.checkpointers._schema import ensure_schema
from graphvault.checkpointers._writes import (
    PENDING_SENDS_SUBQUERY,
    PENDING_WRITES_SUBQUERY,
    decode_pending_sends,
    decode_pending_writes,
    get_writes,
    put_writes_statements,
)
from graphvault.checkpointers.base import Checkpointer
from graphvault.checkpointers.executor import AiosqliteExecutor, Executor
from graphvault.checkpointers.serializers import JsonSerializer, Serializer, dumps_canonical
from graphvault.checkpointers.types import (
    CHECKPOINT_METADATA_KEYS,
    Checkpoint,
    CheckpointKey,
    CheckpointMetadata,
    CheckpointPendingWrite,
    CheckpointTuple,
    PendingWrite,
)
from graphvault.exceptions import InvalidConfigError


# Explicit column list: row tuples are unpacked positionally in _row_to_tuple
_SELECT_CHECKPOINTS = f"""
SELECT
    thread_id,
    checkpoint_ns,
    checkpoint_id,
    parent_checkpoint_id,
    type,
    checkpoint,
    metadata,{PENDING_WRITES_SUBQUERY},{PENDING_SENDS_SUBQUERY}
FROM checkpoints
"""

_UPSERT_CHECKPOINT = """
INSERT OR REPLACE INTO checkpoints
    (thread_id, checkpoint_ns, checkpoint_id, parent_checkpoint_id, type, checkpoint, metadata)
VALUES (?, ?, ?, ?, ?, ?, ?)
"""


class SqliteCheckpointer(Checkpointer):
    """SQLite-based checkpoint persistence.

    Best for: local development, single-server deployments, simple production.

    Args:
        executor: Executor to run statements through. Use ``from_path`` to
            open a database file directly.
        serializer: Value serializer (default: JSON).

    Example::

        checkpointer = SqliteCheckpointer.from_path("./checkpoints.db")
        config = CheckpointKey(thread_id="thread-1")
        config = await checkpointer.put(config, checkpoint, {"source": "input", "step": -1})
        await checkpointer.put_writes(config, [("messages", "hi")], task_id="task-1")

        latest = await checkpointer.get_tuple(CheckpointKey(thread_id="thread-1"))
        async for item in checkpointer.list(CheckpointKey(thread_id="thread-1"), limit=10):
            ...
    """

    def __init__(self, executor: Executor, *, serializer: Serializer | None = None):
        super().__init__(serializer=serializer)
        self.executor = executor
        self._is_setup = False

    @classmethod
    def from_path(cls, path: str, *, serializer: Serializer | None = None) -> SqliteCheckpointer:
        """Checkpointer over an aiosqlite connection to ``path``."""
        return cls(AiosqliteExecutor(path), serializer=serializer)

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        await ensure_schema(self.executor)
        self._is_setup = True

    async def close(self) -> None:
        """Close the underlying executor."""
        await self.executor.close()

    async def _ensure_ready(self) -> None:
        """Lazy-initialize on first use."""
        if not self._is_setup:
            await self.initialize()

    # === Write ===

    async def put(
        self,
        config: CheckpointKey,
        checkpoint: Checkpoint,
        metadata: CheckpointMetadata,
    ) -> CheckpointKey:
        """Store a checkpoint; ``config.checkpoint_id`` becomes its parent."""
        await self._ensure_ready()
        if not config.thread_id:
            raise InvalidConfigError(["thread_id"])

        checkpoint_ns = config.checkpoint_ns or ""
        type_tag, checkpoint_blob, metadata_blob = dump_checkpoint(self.serde, checkpoint, metadata)

        await self.executor.execute(
            _UPSERT_CHECKPOINT,
            (
                config.thread_id,
                checkpoint_ns,
                checkpoint.id,
                config.checkpoint_id,
                type_tag,
                checkpoint_blob,
                metadata_blob,
            ),
        )
        return CheckpointKey(thread_id=config.thread_id, checkpoint_ns=checkpoint_ns, checkpoint_id=checkpoint.id)

    async def put_writes(
        self,
        config: CheckpointKey,
        writes: Sequence[PendingWrite],
        task_id: str,
    ) -> None:
        """Store writes in one atomic batch."""
        await self._ensure_ready()
        missing = [name for name in ("thread_id", "checkpoint_id") if not getattr(config, name)]
        if missing:
            raise InvalidConfigError(missing)

        statements = put_writes_statements(self.serde, config, task_id, writes)
        await self.executor.batch(statements, mode="write")

    async def delete_thread(self, thread_id: str) -> None:
        """Delete a thread's checkpoints and writes in one atomic batch."""
        await self._ensure_ready()
        await self.executor.batch(
            [
                ("DELETE FROM checkpoints WHERE thread_id = ?", (thread_id,)),
                ("DELETE FROM writes WHERE thread_id = ?", (thread_id,)),
            ],
            mode="write",
        )

    # === Read ===

    async def get_tuple(self, config: CheckpointKey) -> CheckpointTuple | None:
        """Get one checkpoint (latest if no checkpoint_id) in a single query."""
        await self._ensure_ready()
        if not config.thread_id:
            raise InvalidConfigError(["thread_id"])

        checkpoint_ns = config.checkpoint_ns or ""
        if config.checkpoint_id:
            rows = await self.executor.execute(
                f"{_SELECT_CHECKPOINTS} WHERE thread_id = ? AND checkpoint_ns = ? AND checkpoint_id = ?",
                (config.thread_id, checkpoint_ns, config.checkpoint_id),
            )
        else:
            rows = await self.executor.execute(
                f"{_SELECT_CHECKPOINTS} WHERE thread_id = ? AND checkpoint_ns = ? ORDER BY checkpoint_id DESC LIMIT 1",
                (config.thread_id, checkpoint_ns),
            )

        if not rows:
            return None
        checkpoint_tuple = self._row_to_tuple(rows[0])
        if checkpoint_tuple.config.thread_id is None or checkpoint_tuple.config.checkpoint_id is None:
            raise InvalidConfigError(["thread_id", "checkpoint_id"], "Could not resolve thread_id and checkpoint_id for checkpoint")
        return checkpoint_tuple

    async def list(
        self,
        config: CheckpointKey | None,
        *,
        filter: dict[str, Any] | None = None,
        before: CheckpointKey | None = None,
        limit: int | None = None,
    ) -> AsyncIterator[CheckpointTuple]:
        """Iterate checkpoints newest first.

        Only metadata keys in ``CHECKPOINT_METADATA_KEYS`` are filterable;
        other keys are ignored. Rows are decoded as they are consumed.
        """
        await self._ensure_ready()

        conditions: list[str] = []
        params: list[Any] = []

        if config is not None and config.thread_id:
            conditions.append("thread_id = ?")
            params.append(config.thread_id)
        if config is not None and config.checkpoint_ns is not None:
            conditions.append("checkpoint_ns = ?")
            params.append(config.checkpoint_ns)
        if before is not None and before.checkpoint_id is not None:
            conditions.append("checkpoint_id < ?")
            params.append(before.checkpoint_id)

        criteria = _sanitize_filter(filter)
        for key, value in criteria.items():
            # json_quote keeps strings quoted so both sides are JSON text.
            # Non-JSON metadata (pickle) passes here and is matched after decoding.
            conditions.append(
                "CASE WHEN json_valid(CAST(metadata AS TEXT)) "
                f"THEN json_quote(json_extract(CAST(metadata AS TEXT), '$.{key}')) = ? ELSE 1 END"
            )
            params.append(dumps_canonical(value))

        # Only a JSON serializer guarantees every readable row was matched in SQL
        match_decoded = bool(criteria) and not isinstance(self.serde, JsonSerializer)

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        sql = f"{_SELECT_CHECKPOINTS}{where} ORDER BY checkpoint_id DESC"
        if limit is not None and not match_decoded:
            sql += " LIMIT ?"
            params.append(int(limit))

        rows = await self.executor.execute(sql, params)
        yielded = 0
        for row in rows:
            if match_decoded and limit is not None and yielded >= limit:
                return
            item = self._row_to_tuple(row)
            if match_decoded and not _metadata_matches(item.metadata, criteria):
                continue
            yielded += 1
            yield item

    async def get_writes(self, config: CheckpointKey) -> list[CheckpointPendingWrite]:
        """Get pending writes recorded against ``config.checkpoint_id``."""
        await self._ensure_ready()
        missing = [name for name in ("thread_id", "checkpoint_id") if not getattr(config, name)]
        if missing:
            raise InvalidConfigError(missing)
        return await get_writes(self.executor, self.serde, config, config.checkpoint_id)

    # === Internal ===

    def _row_to_tuple(self, row: tuple[Any, ...]) -> CheckpointTuple:
        """Convert a checkpoint row to CheckpointTuple.

        Columns: thread_id, checkpoint_ns, checkpoint_id, parent_checkpoint_id,
                 type, checkpoint, metadata, pending_writes, pending_sends
        """
        (
            thread_id,
            checkpoint_ns,
            checkpoint_id,
            parent_checkpoint_id,
            type_tag,
            checkpoint_blob,
            metadata_blob,
            pending_writes,
            pending_sends,
        ) = row

        checkpoint = load_checkpoint(self.serde, type_tag, checkpoint_blob)
        if needs_upgrade(checkpoint, parent_checkpoint_id):
            checkpoint = upgrade(
                checkpoint,
                decode_pending_sends(pending_sends, self.serde),
                self.get_next_version,
            )

        return CheckpointTuple(
            config=CheckpointKey(thread_id=thread_id, checkpoint_ns=checkpoint_ns, checkpoint_id=checkpoint_id),
            checkpoint=checkpoint,
            metadata=load_metadata(self.serde, type_tag, metadata_blob),
            parent_config=(
                CheckpointKey(thread_id=thread_id, checkpoint_ns=checkpoint_ns, checkpoint_id=parent_checkpoint_id)
                if parent_checkpoint_id
                else None
            ),
            pending_writes=decode_pending_writes(pending_writes, self.serde),
        )


def _sanitize_filter(filter: dict[str, Any] | None) -> dict[str, Any]:
    """Keep recognized metadata keys with non-None values."""
    return {key: value for key, value in (filter or {}).items() if key in CHECKPOINT_METADATA_KEYS and value is not None}


def _metadata_matches(metadata: CheckpointMetadata, criteria: dict[str, Any]) -> bool:
    """Decoded-side equivalent of the SQL filter, compared as canonical JSON."""
    return all(
        key in metadata and dumps_canonical(metadata[key], default=str) == dumps_canonical(value, default=str) for key, value in criteria.items()
    )
