"""Graphvault CLI: inspect and manage checkpoint databases.

Entry point for the `graphvault` command. Requires ``pip install graphvault[cli]``.

Commands:
    checkpoints ls      List a thread's checkpoints, newest first
    checkpoints show    Show one checkpoint (latest by default)
    checkpoints writes  Show pending writes recorded against a checkpoint
    threads delete      Delete every checkpoint and write of a thread
"""

from __future__ import annotations


def _require_typer():
    """Check that typer is available."""
    try:
        import typer  # noqa: F401
    except ImportError:
        import sys

        print("Error: typer is required for the CLI. Install with: pip install graphvault[cli]", file=sys.stderr)
        raise SystemExit(1) from None


def create_app():
    """Create the Typer app with all subcommands."""
    _require_typer()

    import typer

    from graphvault.cli.checkpoints import app as checkpoints_app
    from graphvault.cli.threads import app as threads_app

    app = typer.Typer(
        name="graphvault",
        help="Graphvault checkpoint inspection CLI.",
        no_args_is_help=True,
    )
    app.add_typer(checkpoints_app, name="checkpoints")
    app.add_typer(threads_app, name="threads")

    return app


def main():
    """CLI entry point."""
    app = create_app()
    app()
