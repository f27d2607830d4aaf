"""Checkpointer package for graph state persistence.

Provides the ``Checkpointer`` ABC, ``SqliteCheckpointer`` implementation,
and supporting types for resumable graph execution.
"""

from graphvault.checkpointers.base import Checkpointer
from graphvault.checkpointers.executor import AiosqliteExecutor, Executor
from graphvault.checkpointers.serializers import JsonSerializer, PickleSerializer, Serializer
from graphvault.checkpointers.sqlite import SqliteCheckpointer
from graphvault.checkpointers.types import (
    CHECKPOINT_METADATA_KEYS,
    CHECKPOINT_VERSION,
    TASKS,
    Checkpoint,
    CheckpointKey,
    CheckpointMetadata,
    CheckpointPendingWrite,
    CheckpointTuple,
    PendingWrite,
)

__all__ = [
    "AiosqliteExecutor",
    "CHECKPOINT_METADATA_KEYS",
    "CHECKPOINT_VERSION",
    "Checkpoint",
    "CheckpointKey",
    "CheckpointMetadata",
    "CheckpointPendingWrite",
    "CheckpointTuple",
    "Checkpointer",
    "Executor",
    "JsonSerializer",
    "PendingWrite",
    "PickleSerializer",
    "Serializer",
    "SqliteCheckpointer",
    "TASKS",
]
