"""Pending writes: per-checkpoint side effects keyed by (task_id, idx).

Writes are stored against the checkpoint that was current when the task
ran, which is usually written *before* the next checkpoint exists. Nothing
here assumes the owning checkpoint row is present.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from graphvault.checkpointers._codec import load_value, to_bytes
from graphvault.checkpointers.executor import Executor, Statement
from graphvault.checkpointers.serializers import Serializer
from graphvault.checkpointers.types import TASKS, CheckpointKey, CheckpointPendingWrite, PendingWrite

_UPSERT_WRITE = """
INSERT OR REPLACE INTO writes
    (thread_id, checkpoint_ns, checkpoint_id, task_id, idx, channel, type, value)
VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""

# Correlated subqueries for checkpoint reads. Values are hex-encoded so
# binary serializer output survives JSON aggregation.
PENDING_WRITES_SUBQUERY = """
(
    SELECT json_group_array(
        json_object(
            'task_id', pw.task_id,
            'idx', pw.idx,
            'channel', pw.channel,
            'type', pw.type,
            'value', hex(pw.value)
        )
    )
    FROM writes AS pw
    WHERE pw.thread_id = checkpoints.thread_id
      AND pw.checkpoint_ns = checkpoints.checkpoint_ns
      AND pw.checkpoint_id = checkpoints.checkpoint_id
) AS pending_writes"""

PENDING_SENDS_SUBQUERY = f"""
(
    SELECT json_group_array(
        json_object(
            'task_id', ps.task_id,
            'idx', ps.idx,
            'type', ps.type,
            'value', hex(ps.value)
        )
    )
    FROM writes AS ps
    WHERE ps.thread_id = checkpoints.thread_id
      AND ps.checkpoint_ns = checkpoints.checkpoint_ns
      AND ps.checkpoint_id = checkpoints.parent_checkpoint_id
      AND ps.channel = '{TASKS}'
) AS pending_sends"""


def put_writes_statements(
    serde: Serializer,
    key: CheckpointKey,
    task_id: str,
    writes: Sequence[PendingWrite],
) -> list[Statement]:
    """Build one upsert per write; ``idx`` is the write's position."""
    statements: list[Statement] = []
    for idx, (channel, value) in enumerate(writes):
        type_tag, blob = serde.dumps_typed(value)
        statements.append(
            (
                _UPSERT_WRITE,
                (
                    key.thread_id,
                    key.checkpoint_ns or "",
                    key.checkpoint_id,
                    task_id,
                    idx,
                    channel,
                    type_tag,
                    blob,
                ),
            )
        )
    return statements


async def get_writes(
    executor: Executor,
    serde: Serializer,
    key: CheckpointKey,
    checkpoint_id: str,
) -> list[CheckpointPendingWrite]:
    """All writes recorded against a checkpoint, ordered by task then idx."""
    rows = await executor.execute(
        """
        SELECT task_id, channel, type, value FROM writes
        WHERE thread_id = ? AND checkpoint_ns = ? AND checkpoint_id = ?
        ORDER BY task_id, idx
        """,
        (key.thread_id, key.checkpoint_ns or "", checkpoint_id),
    )
    return [(task_id, channel, load_value(serde, type_tag, value)) for task_id, channel, type_tag, value in rows]


async def get_pending_sends(
    executor: Executor,
    serde: Serializer,
    key: CheckpointKey,
    parent_checkpoint_id: str,
) -> list[Any]:
    """Decoded TASKS writes under the parent checkpoint, ordered by idx."""
    rows = await executor.execute(
        """
        SELECT type, value FROM writes
        WHERE thread_id = ? AND checkpoint_ns = ? AND checkpoint_id = ? AND channel = ?
        ORDER BY idx, task_id
        """,
        (key.thread_id, key.checkpoint_ns or "", parent_checkpoint_id, TASKS),
    )
    return [load_value(serde, type_tag, value) for type_tag, value in rows]


def _parse_aggregate(column: Any) -> list[dict[str, Any]]:
    """Parse a json_group_array column. NULL or empty means no rows."""
    raw = to_bytes(column)
    if not raw:
        return []
    return json.loads(raw.decode("utf-8"))


def _load_hex(serde: Serializer, entry: dict[str, Any]) -> Any:
    return load_value(serde, entry.get("type"), bytes.fromhex(entry.get("value") or ""))


def decode_pending_writes(column: Any, serde: Serializer) -> list[CheckpointPendingWrite]:
    """Decode the ``pending_writes`` subquery column."""
    entries = sorted(_parse_aggregate(column), key=lambda e: (e["task_id"], e["idx"]))
    return [(e["task_id"], e["channel"], _load_hex(serde, e)) for e in entries]


def decode_pending_sends(column: Any, serde: Serializer) -> list[Any]:
    """Decode the ``pending_sends`` subquery column."""
    entries = sorted(_parse_aggregate(column), key=lambda e: (e["idx"], e["task_id"]))
    return [_load_hex(serde, e) for e in entries]
