"""Checkpoint inspection CLI commands: ls, show, writes."""

from __future__ import annotations

from typing import Annotated, Any

import typer

from graphvault.cli._config import resolve_db
from graphvault.cli._db import open_checkpointer, run_async
from graphvault.cli._format import (
    DEFAULT_LIMIT,
    describe_value,
    format_table,
    format_timestamp,
    print_ctas,
    print_json,
    print_lines,
    truncate_value,
)

app = typer.Typer(help="Inspect a thread's checkpoints.")

# Common options
DbOption = Annotated[str | None, typer.Option("--db", help="Database path (default: [tool.graphvault].db)")]
NsOption = Annotated[str, typer.Option("--ns", help="Checkpoint namespace")]
JsonFlag = Annotated[bool, typer.Option("--json", help="Output as JSON")]
OutputOption = Annotated[str | None, typer.Option("--output", help="Write JSON to file")]
LimitOption = Annotated[int, typer.Option("--limit", help="Max results")]


@app.command("ls")
def checkpoints_ls(
    thread_id: Annotated[str, typer.Argument(help="Thread ID")],
    db: DbOption = None,
    ns: NsOption = "",
    before: Annotated[str | None, typer.Option("--before", help="Only checkpoints older than this ID")] = None,
    source: Annotated[str | None, typer.Option("--source", help="Filter by metadata source")] = None,
    step: Annotated[int | None, typer.Option("--step", help="Filter by metadata step")] = None,
    limit: LimitOption = DEFAULT_LIMIT,
    as_json: JsonFlag = False,
    output: OutputOption = None,
):
    """List checkpoints for a thread, newest first."""
    from graphvault.checkpointers import CheckpointKey

    config = CheckpointKey(thread_id=thread_id, checkpoint_ns=ns)
    before_key = CheckpointKey(thread_id=thread_id, checkpoint_ns=ns, checkpoint_id=before) if before else None

    async def _load():
        cp = await open_checkpointer(resolve_db(db))
        try:
            return [
                item
                async for item in cp.list(
                    config,
                    filter={"source": source, "step": step},
                    before=before_key,
                    limit=limit,
                )
            ]
        finally:
            await cp.close()

    items = run_async(_load())

    if as_json:
        print_json("checkpoints.ls", [item.to_dict() for item in items], output)
        return

    if not items:
        print(f"No checkpoints found for thread '{thread_id}'.")
        return

    print(f"\nCheckpoints: {thread_id} ({len(items)} shown)\n")

    headers = ["Checkpoint", "Parent", "Source", "Step", "Writes", "Created"]
    rows = [
        [
            item.checkpoint.id,
            item.parent_config.checkpoint_id if item.parent_config else "—",
            str(item.metadata.get("source", "—")),
            str(item.metadata.get("step", "—")),
            str(len(item.pending_writes)),
            format_timestamp(item.checkpoint.ts),
        ]
        for item in items
    ]
    lines = format_table(headers, rows, right=("Step", "Writes"))
    print_lines(lines)

    print_ctas(
        [
            f"graphvault checkpoints show {thread_id} <id>   to inspect a checkpoint",
            f"graphvault checkpoints ls {thread_id} --before <id>  for older checkpoints",
        ]
    )


@app.command("show")
def checkpoints_show(
    thread_id: Annotated[str, typer.Argument(help="Thread ID")],
    checkpoint_id: Annotated[str | None, typer.Argument(help="Checkpoint ID (default: latest)")] = None,
    db: DbOption = None,
    ns: NsOption = "",
    show_values: Annotated[bool, typer.Option("--values", help="Show channel values")] = False,
    as_json: JsonFlag = False,
    output: OutputOption = None,
):
    """Show one checkpoint with its metadata and pending writes."""
    from graphvault.checkpointers import CheckpointKey

    config = CheckpointKey(thread_id=thread_id, checkpoint_ns=ns, checkpoint_id=checkpoint_id)

    async def _load():
        cp = await open_checkpointer(resolve_db(db))
        try:
            return await cp.get_tuple(config)
        finally:
            await cp.close()

    item = run_async(_load())
    if item is None:
        label = f"Checkpoint '{checkpoint_id}'" if checkpoint_id else "No checkpoint"
        print(f"Error: {label} not found for thread '{thread_id}'.")
        raise typer.Exit(1)

    if as_json:
        data = item.to_dict()
        data["channel_values"] = item.checkpoint.channel_values
        print_json("checkpoints.show", data, output)
        return

    ckpt = item.checkpoint
    parent = item.parent_config.checkpoint_id if item.parent_config else "—"
    print(f"\nCheckpoint: {ckpt.id} | v{ckpt.version} | parent {parent} | {format_timestamp(ckpt.ts)}\n")
    print(f"  metadata: {dict(item.metadata)}")

    if ckpt.channel_values:
        headers = ["Channel", "Version", "Type", "Size"]
        if show_values:
            headers.append("Value")
        rows = []
        for name, value in ckpt.channel_values.items():
            type_str, size_str = describe_value(value)
            row = [name, str(ckpt.channel_versions.get(name, "—")), type_str, size_str]
            if show_values:
                row.append(truncate_value(value, max_chars=80))
            rows.append(row)
        print()
        print_lines(format_table(headers, rows))
    else:
        print("  No channel values.")

    if item.pending_writes:
        print(f"\n  pending writes: {len(item.pending_writes)}")

    print_ctas(
        [
            f"graphvault checkpoints show {thread_id} {ckpt.id} --values  to show values inline",
            f"graphvault checkpoints writes {thread_id} {ckpt.id}         for pending writes",
        ]
    )


@app.command("writes")
def checkpoints_writes(
    thread_id: Annotated[str, typer.Argument(help="Thread ID")],
    checkpoint_id: Annotated[str, typer.Argument(help="Checkpoint ID")],
    db: DbOption = None,
    ns: NsOption = "",
    as_json: JsonFlag = False,
    output: OutputOption = None,
):
    """Show pending writes recorded against a checkpoint."""
    from graphvault.checkpointers import CheckpointKey

    config = CheckpointKey(thread_id=thread_id, checkpoint_ns=ns, checkpoint_id=checkpoint_id)

    async def _load():
        cp = await open_checkpointer(resolve_db(db))
        try:
            return await cp.get_writes(config)
        finally:
            await cp.close()

    writes = run_async(_load())

    if as_json:
        data: list[dict[str, Any]] = [{"task_id": t, "channel": c, "value": v} for t, c, v in writes]
        print_json("checkpoints.writes", data, output)
        return

    if not writes:
        print(f"No pending writes for checkpoint '{checkpoint_id}'.")
        return

    print(f"\nWrites: {checkpoint_id} ({len(writes)} total)\n")

    headers = ["Task", "Channel", "Type", "Value"]
    rows = [[task_id, channel, describe_value(value)[0], truncate_value(value, max_chars=60)] for task_id, channel, value in writes]
    print_lines(format_table(headers, rows))
