"""Checkpointer base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence
from typing import Any

from graphvault.checkpointers.serializers import JsonSerializer, Serializer
from graphvault.checkpointers.types import (
    ChannelVersion,
    Checkpoint,
    CheckpointKey,
    CheckpointMetadata,
    CheckpointTuple,
    PendingWrite,
)


class Checkpointer(ABC):
    """Base class for checkpoint persistence.

    A thread's history is a chain of checkpoints linked by parent id,
    partitioned by (thread_id, checkpoint_ns). Pending writes are stored
    per checkpoint and returned alongside it on read.

    The graph runtime calls put() at the end of each step, put_writes()
    as tasks finish, and get_tuple()/list() to resume or inspect.
    """

    def __init__(self, serializer: Serializer | None = None):
        self.serde = serializer or JsonSerializer()

    # === Write Operations ===

    @abstractmethod
    async def put(
        self,
        config: CheckpointKey,
        checkpoint: Checkpoint,
        metadata: CheckpointMetadata,
    ) -> CheckpointKey:
        """Store a checkpoint with insert-or-replace semantics.

        ``config.checkpoint_id`` (if any) becomes the new checkpoint's parent.
        Returns the key addressing the stored checkpoint.
        """
        ...

    @abstractmethod
    async def put_writes(
        self,
        config: CheckpointKey,
        writes: Sequence[PendingWrite],
        task_id: str,
    ) -> None:
        """Store a task's writes against ``config.checkpoint_id`` atomically.

        Each write lands at idx equal to its position; re-sending the same
        (task_id, idx) replaces the earlier value.
        """
        ...

    @abstractmethod
    async def delete_thread(self, thread_id: str) -> None:
        """Delete all checkpoints and writes of a thread, in every namespace."""
        ...

    # === Read Operations ===

    @abstractmethod
    async def get_tuple(self, config: CheckpointKey) -> CheckpointTuple | None:
        """Get a checkpoint with metadata and pending writes.

        ``checkpoint_id=None`` means latest. Returns None if not found.
        """
        ...

    @abstractmethod
    def list(
        self,
        config: CheckpointKey | None,
        *,
        filter: dict[str, Any] | None = None,
        before: CheckpointKey | None = None,
        limit: int | None = None,
    ) -> AsyncIterator[CheckpointTuple]:
        """Iterate checkpoints newest first, optionally filtered by metadata."""
        ...

    async def get(self, config: CheckpointKey) -> Checkpoint | None:
        """Get just the checkpoint.

        Default implementation calls get_tuple.
        """
        checkpoint_tuple = await self.get_tuple(config)
        return checkpoint_tuple.checkpoint if checkpoint_tuple else None

    def get_next_version(self, current: ChannelVersion | None, channel: str | None = None) -> ChannelVersion:
        """Next channel version after ``current``. None starts at 1.

        Raises TypeError for non-integer versions; subclasses using
        another version scheme override this method.
        """
        if current is None:
            return 1
        if not isinstance(current, int):
            raise TypeError(f"{type(self).__name__} only increments integer versions, got {current!r}")
        return current + 1

    # === Lifecycle ===

    async def initialize(self) -> None:  # noqa: B027
        """Initialize the checkpointer (create tables, etc.)."""

    async def close(self) -> None:  # noqa: B027
        """Clean up resources (close connections, etc.)."""
