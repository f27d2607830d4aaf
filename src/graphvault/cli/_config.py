"""Project-level configuration from pyproject.toml.

Reads the [tool.graphvault] section to provide the default database
path for the CLI.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DB = "./checkpoints.db"


@dataclass(frozen=True)
class GraphvaultConfig:
    """Configuration from [tool.graphvault] in pyproject.toml."""

    db: str | None = None


def find_pyproject(start: Path | None = None) -> Path | None:
    """Walk up from start directory to find pyproject.toml."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def load_config(start: Path | None = None) -> GraphvaultConfig:
    """Load [tool.graphvault] from the nearest pyproject.toml.

    Returns default config if no pyproject.toml or no [tool.graphvault] section.
    """
    path = find_pyproject(start)
    if path is None:
        return GraphvaultConfig()

    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib

    with open(path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("tool", {}).get("graphvault", {})
    if not section:
        return GraphvaultConfig()

    return GraphvaultConfig(db=section.get("db"))


def resolve_db(db: str | None, start: Path | None = None) -> str:
    """--db if given, else [tool.graphvault].db, else DEFAULT_DB."""
    if db:
        return db
    return load_config(start).db or DEFAULT_DB
