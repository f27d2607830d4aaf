"""Tests for checkpointer types."""

import pytest

from graphvault.checkpointers import (
    CHECKPOINT_METADATA_KEYS,
    CHECKPOINT_VERSION,
    Checkpoint,
    CheckpointKey,
    CheckpointTuple,
)
from graphvault.checkpointers.types import max_channel_version


class TestCheckpoint:
    def test_defaults(self):
        checkpoint = Checkpoint(id="c1")
        assert checkpoint.version == CHECKPOINT_VERSION
        assert checkpoint.channel_values == {}
        assert checkpoint.channel_versions == {}
        assert checkpoint.versions_seen == {}
        assert checkpoint.ts

    def test_to_dict_uses_v(self):
        data = Checkpoint(id="c1", version=3, ts="2024-01-01T00:00:00+00:00").to_dict()
        assert data == {
            "v": 3,
            "id": "c1",
            "ts": "2024-01-01T00:00:00+00:00",
            "channel_values": {},
            "channel_versions": {},
            "versions_seen": {},
        }

    def test_from_dict_roundtrip(self):
        checkpoint = Checkpoint(
            id="c1",
            channel_values={"x": [1]},
            channel_versions={"x": 2},
            versions_seen={"node": {"x": 1}},
        )
        assert Checkpoint.from_dict(checkpoint.to_dict()) == checkpoint

    def test_from_dict_ignores_legacy_keys(self):
        checkpoint = Checkpoint.from_dict({"v": 1, "id": "c1", "ts": "t", "pending_sends": ["s"]})
        assert checkpoint.id == "c1"
        assert checkpoint.version == 1
        assert checkpoint.channel_values == {}

    def test_from_dict_missing_version_is_legacy(self):
        assert Checkpoint.from_dict({"id": "c1"}).version < CHECKPOINT_VERSION

    def test_to_dict_copies_mappings(self):
        checkpoint = Checkpoint(id="c1", channel_values={"x": 1})
        data = checkpoint.to_dict()
        data["channel_values"]["y"] = 2
        assert checkpoint.channel_values == {"x": 1}

    def test_copy_is_independent(self):
        checkpoint = Checkpoint(id="c1", channel_values={"x": 1}, versions_seen={"n": {"x": 1}})
        copied = checkpoint.copy()
        copied.channel_values["y"] = 2
        copied.versions_seen["n"]["x"] = 5
        assert checkpoint.channel_values == {"x": 1}
        assert checkpoint.versions_seen == {"n": {"x": 1}}

    def test_copy_with_changes(self):
        assert Checkpoint(id="c1").copy(id="c2").id == "c2"


class TestCheckpointKey:
    def test_defaults(self):
        key = CheckpointKey(thread_id="t")
        assert key.checkpoint_ns == ""
        assert key.checkpoint_id is None

    def test_frozen(self):
        key = CheckpointKey(thread_id="t")
        with pytest.raises(AttributeError):
            key.thread_id = "other"  # type: ignore[misc]

    def test_to_dict(self):
        assert CheckpointKey("t", "ns", "c1").to_dict() == {"thread_id": "t", "checkpoint_ns": "ns", "checkpoint_id": "c1"}


class TestCheckpointTuple:
    def test_to_dict(self):
        item = CheckpointTuple(
            config=CheckpointKey("t", "", "c2"),
            checkpoint=Checkpoint(id="c2", ts="ts", channel_values={"b": 1, "a": 2}),
            metadata={"source": "loop", "step": 1},
            parent_config=CheckpointKey("t", "", "c1"),
            pending_writes=[("task", "a", 1)],
        )
        data = item.to_dict()
        assert data["checkpoint_id"] == "c2"
        assert data["parent_config"]["checkpoint_id"] == "c1"
        assert data["channels"] == ["a", "b"]
        assert data["pending_writes"] == [{"task_id": "task", "channel": "a"}]

    def test_to_dict_root(self):
        item = CheckpointTuple(config=CheckpointKey("t", "", "c1"), checkpoint=Checkpoint(id="c1"), metadata={})
        assert item.to_dict()["parent_config"] is None


class TestMetadataKeys:
    def test_recognized_keys(self):
        assert CHECKPOINT_METADATA_KEYS == {"source", "step", "parents"}


class TestMaxChannelVersion:
    def test_ints(self):
        assert max_channel_version(1, 5, 3) == 5

    def test_strings(self):
        assert max_channel_version("00002.1", "00010.5") == "00010.5"

    def test_mixed_int_and_str(self):
        assert max_channel_version(2, "00003") == "00003"
        assert max_channel_version(4, "00003.abc") == 4

    def test_non_numeric_strings_rank_lexically(self):
        assert max_channel_version("a", "b") == "b"
