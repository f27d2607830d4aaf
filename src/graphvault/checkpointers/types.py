"""Checkpointer types for graph state persistence."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, TypedDict, Union

ChannelVersion = Union[int, float, str]

# Reserved channel carrying pending sends into the next step.
TASKS = "__pregel_tasks"

# Checkpoints below this version predate the TASKS channel.
CHECKPOINT_VERSION = 4


def _utcnow_iso() -> str:
    """UTC-aware ISO timestamp (avoids deprecated utcnow)."""
    return datetime.now(timezone.utc).isoformat()


class CheckpointMetadata(TypedDict, total=False):
    """Caller-supplied annotation stored next to a checkpoint.

    Attributes:
        source: What produced the checkpoint ("input", "loop", "update", "fork").
        step: Step number (-1 for the input checkpoint).
        parents: Mapping of parent namespace to parent checkpoint id.
    """

    source: str
    step: int
    parents: dict[str, str]


# Keys `list(filter=...)` can match on. Derived from the TypedDict so the two never drift.
CHECKPOINT_METADATA_KEYS: frozenset[str] = frozenset(CheckpointMetadata.__required_keys__ | CheckpointMetadata.__optional_keys__)

PendingWrite = tuple[str, Any]
"""(channel, value) emitted by a task."""

CheckpointPendingWrite = tuple[str, str, Any]
"""(task_id, channel, value) as returned on read."""


@dataclass
class Checkpoint:
    """Snapshot of graph state at one step.

    Attributes:
        id: Caller-assigned id, lexically ordered by creation within a thread.
        version: Payload format version (serialized as ``v``).
        ts: Creation timestamp.
        channel_values: Channel name to value.
        channel_versions: Channel name to comparable version token.
        versions_seen: Per-node map of channel versions already consumed.
    """

    id: str
    version: int = CHECKPOINT_VERSION
    ts: str = field(default_factory=_utcnow_iso)
    channel_values: dict[str, Any] = field(default_factory=dict)
    channel_versions: dict[str, ChannelVersion] = field(default_factory=dict)
    versions_seen: dict[str, dict[str, ChannelVersion]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serializable payload. Nested mappings are copied."""
        return {
            "v": self.version,
            "id": self.id,
            "ts": self.ts,
            "channel_values": dict(self.channel_values),
            "channel_versions": dict(self.channel_versions),
            "versions_seen": {k: dict(v) for k, v in self.versions_seen.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Checkpoint:
        """Build from a stored payload. Unknown legacy keys are ignored."""
        return cls(
            id=data["id"],
            version=data.get("v", 1),
            ts=data.get("ts", ""),
            channel_values=dict(data.get("channel_values") or {}),
            channel_versions=dict(data.get("channel_versions") or {}),
            versions_seen={k: dict(v) for k, v in (data.get("versions_seen") or {}).items()},
        )

    def copy(self, **changes: Any) -> Checkpoint:
        """Shallow copy with fresh top-level mappings."""
        copied = replace(
            self,
            channel_values=dict(self.channel_values),
            channel_versions=dict(self.channel_versions),
            versions_seen={k: dict(v) for k, v in self.versions_seen.items()},
        )
        return replace(copied, **changes) if changes else copied


@dataclass(frozen=True)
class CheckpointKey:
    """Partition key addressing a thread, namespace and optionally one checkpoint.

    ``checkpoint_ns=None`` is only meaningful for ``list``, where it means
    "every namespace".
    """

    thread_id: str | None
    checkpoint_ns: str | None = ""
    checkpoint_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable dict."""
        return {
            "thread_id": self.thread_id,
            "checkpoint_ns": self.checkpoint_ns,
            "checkpoint_id": self.checkpoint_id,
        }


@dataclass
class CheckpointTuple:
    """A checkpoint together with its key, metadata and pending writes."""

    config: CheckpointKey
    checkpoint: Checkpoint
    metadata: CheckpointMetadata
    parent_config: CheckpointKey | None = None
    pending_writes: list[CheckpointPendingWrite] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Summary dict for display. Channel values are left to the caller."""
        return {
            "config": self.config.to_dict(),
            "parent_config": self.parent_config.to_dict() if self.parent_config else None,
            "checkpoint_id": self.checkpoint.id,
            "v": self.checkpoint.version,
            "ts": self.checkpoint.ts,
            "channels": sorted(self.checkpoint.channel_values),
            "channel_versions": self.checkpoint.channel_versions,
            "metadata": dict(self.metadata),
            "pending_writes": [{"task_id": t, "channel": c} for t, c, _ in self.pending_writes],
        }


def max_channel_version(*versions: ChannelVersion) -> ChannelVersion:
    """Greatest of the given channel versions.

    String tokens such as ``"00003.abc"`` rank by their leading integer, so
    they compare against numeric versions from older writers.
    """
    return max(versions, key=_version_sort_key)


def _version_sort_key(version: ChannelVersion) -> tuple[float, str]:
    if isinstance(version, str):
        head = version.split(".", 1)[0]
        return (int(head) if head.isdigit() else 0, version)
    return (version, "")
