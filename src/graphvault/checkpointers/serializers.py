"""Serializers for checkpointer value storage."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any


class Serializer(ABC):
    """Base class for typed value serialization.

    Checkpointers store the returned type tag next to the bytes and hand
    both back on read, so a row is always decoded by the codec that wrote it.
    """

    @abstractmethod
    def dumps_typed(self, value: Any) -> tuple[str, bytes]:
        """Convert value to a (type_tag, bytes) pair for storage."""
        ...

    @abstractmethod
    def loads_typed(self, type_tag: str, data: bytes) -> Any:
        """Convert stored bytes back to a value."""
        ...


class JsonSerializer(Serializer):
    """JSON serializer (default). Safe, human-readable, inspectable.

    Output is compact (no whitespace after separators) so stored metadata
    compares equal to the JSON that SQLite's json functions produce.

    By default, raises TypeError on non-JSON-serializable types.
    Pass ``lossy=True`` to fall back to ``str()`` for unsupported types.
    """

    type_tag = "json"

    def __init__(self, *, lossy: bool = False):
        self._default = str if lossy else None

    def dumps_typed(self, value: Any) -> tuple[str, bytes]:
        return self.type_tag, dumps_canonical(value, default=self._default).encode("utf-8")

    def loads_typed(self, type_tag: str, data: bytes) -> Any:
        if type_tag != self.type_tag:
            raise ValueError(f"JsonSerializer cannot decode type {type_tag!r}")
        if not data:
            return None
        return json.loads(data.decode("utf-8"))


class PickleSerializer(Serializer):
    """Pickle serializer for complex Python objects.

    WARNING: Pickle can execute arbitrary code on deserialization.
    Requires explicit ``allow_pickle=True`` to construct.

    Values written by a ``JsonSerializer`` (type ``"json"``) are still
    readable, so a store can switch to pickle without rewriting history.
    """

    type_tag = "pickle"

    def __init__(self, *, allow_pickle: bool = False):
        if not allow_pickle:
            raise ValueError(
                "PickleSerializer requires explicit allow_pickle=True. "
                "Pickle can execute arbitrary code on deserialization. "
                "Only use with trusted data sources."
            )
        self._json = JsonSerializer()

    def dumps_typed(self, value: Any) -> tuple[str, bytes]:
        import pickle

        return self.type_tag, pickle.dumps(value)

    def loads_typed(self, type_tag: str, data: bytes) -> Any:
        if type_tag == JsonSerializer.type_tag:
            return self._json.loads_typed(type_tag, data)
        if type_tag != self.type_tag:
            raise ValueError(f"PickleSerializer cannot decode type {type_tag!r}")
        import pickle

        return pickle.loads(data)  # noqa: S301


def dumps_canonical(value: Any, *, default: Any = None) -> str:
    """Compact JSON text, the form metadata filters compare against."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=default)
