"""Conversion between stored rows and checkpoint objects."""

from __future__ import annotations

from typing import Any

from graphvault.checkpointers.serializers import Serializer
from graphvault.checkpointers.types import Checkpoint, CheckpointMetadata
from graphvault.exceptions import SerializationMismatchError

# Rows written before the type column existed were JSON.
DEFAULT_TYPE = "json"


def to_bytes(value: bytes | bytearray | memoryview | str | None) -> bytes:
    """Normalize a BLOB or TEXT column to bytes."""
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def dump_checkpoint(
    serde: Serializer,
    checkpoint: Checkpoint,
    metadata: CheckpointMetadata,
) -> tuple[str, bytes, bytes]:
    """Encode a checkpoint and its metadata for one row.

    Returns (type_tag, checkpoint_blob, metadata_blob).

    Raises:
        SerializationMismatchError: The two payloads got different type tags.
    """
    checkpoint_type, checkpoint_blob = serde.dumps_typed(checkpoint.to_dict())
    metadata_type, metadata_blob = serde.dumps_typed(dict(metadata))
    if checkpoint_type != metadata_type:
        raise SerializationMismatchError(checkpoint_type, metadata_type)
    return checkpoint_type, checkpoint_blob, metadata_blob


def load_value(serde: Serializer, type_tag: str | None, data: Any) -> Any:
    return serde.loads_typed(type_tag or DEFAULT_TYPE, to_bytes(data))


def load_checkpoint(serde: Serializer, type_tag: str | None, data: Any) -> Checkpoint:
    return Checkpoint.from_dict(load_value(serde, type_tag, data))


def load_metadata(serde: Serializer, type_tag: str | None, data: Any) -> CheckpointMetadata:
    metadata = load_value(serde, type_tag, data)
    return CheckpointMetadata(**metadata) if metadata else CheckpointMetadata()
