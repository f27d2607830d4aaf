"""Graphvault - Durable checkpoint persistence for resumable graph execution."""

from graphvault.checkpointers import (
    CHECKPOINT_METADATA_KEYS,
    CHECKPOINT_VERSION,
    TASKS,
    AiosqliteExecutor,
    Checkpoint,
    CheckpointKey,
    CheckpointMetadata,
    CheckpointPendingWrite,
    Checkpointer,
    CheckpointTuple,
    Executor,
    JsonSerializer,
    PendingWrite,
    PickleSerializer,
    Serializer,
    SqliteCheckpointer,
)
from graphvault.exceptions import InvalidConfigError, SerializationMismatchError

__all__ = [
    # Checkpointers
    "Checkpointer",
    "SqliteCheckpointer",
    "Executor",
    "AiosqliteExecutor",
    # Types
    "Checkpoint",
    "CheckpointKey",
    "CheckpointMetadata",
    "CheckpointPendingWrite",
    "CheckpointTuple",
    "PendingWrite",
    "TASKS",
    "CHECKPOINT_VERSION",
    "CHECKPOINT_METADATA_KEYS",
    # Serializers
    "Serializer",
    "JsonSerializer",
    "PickleSerializer",
    # Errors
    "InvalidConfigError",
    "SerializationMismatchError",
]
