"""Write a short checkpoint history, then resume it from storage.

Shows the round trip a graph runtime makes each step:
  1. put() a checkpoint at the end of a step
  2. put_writes() as tasks finish in the next step
  3. get_tuple() / list() to resume or inspect

Run:  uv run python examples/resume_thread.py
"""

from __future__ import annotations

import asyncio
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

from graphvault import TASKS, Checkpoint, CheckpointKey, SqliteCheckpointer


def _checkpoint_id(step: int) -> str:
    """Time-sortable id so lexical order matches creation order."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return (base + timedelta(minutes=step)).isoformat()


async def write_history(cp: SqliteCheckpointer, thread_id: str) -> CheckpointKey:
    config = CheckpointKey(thread_id=thread_id)
    counter = 0
    for step in range(-1, 3):
        checkpoint = Checkpoint(
            id=_checkpoint_id(step + 1),
            channel_values={"counter": counter},
            channel_versions={"counter": step + 2},
        )
        source = "input" if step == -1 else "loop"
        config = await cp.put(config, checkpoint, {"source": source, "step": step})
        await cp.put_writes(config, [("counter", counter + 1), (TASKS, {"node": "increment"})], task_id=f"task-{step + 1}")
        counter += 1
    return config


async def main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        db = str(Path(tmp) / "checkpoints.db")
        cp = SqliteCheckpointer.from_path(db)
        try:
            await write_history(cp, "demo")

            latest = await cp.get_tuple(CheckpointKey(thread_id="demo"))
            print(f"latest: {latest.checkpoint.id} counter={latest.checkpoint.channel_values['counter']}")
            print(f"pending writes: {latest.pending_writes}")

            print("\nhistory (newest first):")
            async for item in cp.list(CheckpointKey(thread_id="demo")):
                print(f"  {item.checkpoint.id}  {item.metadata}")

            print("\nloop checkpoints only, two at a time:")
            async for item in cp.list(CheckpointKey(thread_id="demo"), filter={"source": "loop"}, limit=2):
                print(f"  {item.checkpoint.id}")

            await cp.delete_thread("demo")
            print(f"\nafter delete: {await cp.get_tuple(CheckpointKey(thread_id='demo'))}")
        finally:
            await cp.close()


if __name__ == "__main__":
    asyncio.run(main())
