"""Thread management CLI commands: delete."""

from __future__ import annotations

from typing import Annotated

import typer

from graphvault.cli._config import resolve_db
from graphvault.cli._db import open_checkpointer, run_async

app = typer.Typer(help="Manage checkpoint threads.")


@app.command("delete")
def threads_delete(
    thread_id: Annotated[str, typer.Argument(help="Thread ID to delete")],
    db: Annotated[str | None, typer.Option("--db", help="Database path (default: [tool.graphvault].db)")] = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
):
    """Delete every checkpoint and write of a thread, in all namespaces."""
    if not yes:
        typer.confirm(f"Delete all checkpoints and writes for thread '{thread_id}'?", abort=True)

    async def _delete():
        cp = await open_checkpointer(resolve_db(db))
        try:
            await cp.delete_thread(thread_id)
        finally:
            await cp.close()

    run_async(_delete())
    print(f"Deleted thread '{thread_id}'.")
