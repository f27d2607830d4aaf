"""Output helpers shared by the checkpoint and thread commands.

Tables for humans, a versioned JSON envelope for scripts.
"""

from __future__ import annotations

import json
from collections.abc import Collection
from datetime import datetime, timezone
from typing import Any

# JSON envelope version, bumped on breaking changes to JSON structure
SCHEMA_VERSION = 1

DEFAULT_LIMIT = 20
MAX_LINES = 100


def json_envelope(command: str, data: Any) -> dict[str, Any]:
    """Wrap command output as ``{schema_version, command, generated_at, data}``."""
    return {
        "schema_version": SCHEMA_VERSION,
        "command": command,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def print_json(command: str, data: Any, output: str | None = None) -> None:
    """Print the JSON envelope, or write it to ``output``."""
    text = json.dumps(json_envelope(command, data), indent=2, default=str)
    if not output:
        print(text)
        return

    with open(output, "w") as f:
        f.write(text)
    print(f"Wrote {command} output to {output} ({len(text.encode()) / 1024:.1f}KB)")


def format_timestamp(ts: str | None) -> str:
    """Checkpoint ``ts`` as ``YYYY-MM-DD HH:MM:SS``."""
    if not ts:
        return "—"
    return ts[:19].replace("T", " ")


def describe_value(value: Any) -> tuple[str, str]:
    """(type, size) of a channel value or pending write."""
    if value is None:
        return "—", "—"
    if isinstance(value, (list, tuple, set)):
        return type(value).__name__, f"{len(value)} items"
    if isinstance(value, dict):
        return "dict", f"{len(value)} keys"
    if isinstance(value, (str, bytes)):
        size = len(value.encode("utf-8")) if isinstance(value, str) else len(value)
        return type(value).__name__, f"{size}B" if size < 1024 else f"{size / 1024:.1f}KB"
    if isinstance(value, (bool, int, float)):
        return type(value).__name__, str(value)
    return type(value).__name__, "—"


def truncate_value(value: Any, max_chars: int = 200) -> str:
    text = value if isinstance(value, str) else json.dumps(value, default=str)
    return text if len(text) <= max_chars else text[:max_chars] + "…"


def format_table(headers: list[str], rows: list[list[str]], *, right: Collection[str] = (), indent: int = 2) -> list[str]:
    """Align ``rows`` under ``headers``; columns named in ``right`` are right-aligned."""
    if not rows:
        return []

    widths = [max(len(header), *(len(row[i]) for row in rows)) for i, header in enumerate(headers)]
    prefix = " " * indent

    def _line(cells: list[str]) -> str:
        return prefix + "  ".join(
            cell.rjust(width) if header in right else cell.ljust(width) for header, cell, width in zip(headers, cells, widths)
        )

    return [_line(headers), prefix + "  ".join("─" * w for w in widths), *(_line(row) for row in rows)]


def print_lines(lines: list[str], max_lines: int = MAX_LINES) -> None:
    """Print at most ``max_lines`` lines, pointing at --json for the rest."""
    for line in lines[:max_lines]:
        print(line)
    if len(lines) > max_lines:
        print(f"\n  # ... {len(lines) - max_lines} more lines (use --json for full output)")


def print_ctas(ctas: list[str]) -> None:
    """Print next-step command suggestions."""
    print()
    for cta in ctas:
        print(f"  → {cta}")
