"""Tests for the read-time legacy checkpoint upgrade."""

from graphvault.checkpointers import TASKS, Checkpoint
from graphvault.checkpointers._migrate import needs_upgrade, upgrade


def _next_version(current):
    return 1 if current is None else current + 1


class TestNeedsUpgrade:
    def test_legacy_with_parent(self):
        assert needs_upgrade(Checkpoint(id="c", version=3), "parent")

    def test_legacy_without_parent(self):
        assert not needs_upgrade(Checkpoint(id="c", version=3), None)

    def test_current_version(self):
        assert not needs_upgrade(Checkpoint(id="c"), "parent")


class TestUpgrade:
    def test_no_sends_returns_same_object(self):
        checkpoint = Checkpoint(id="c", version=3, channel_versions={"x": 2})
        assert upgrade(checkpoint, [], _next_version) is checkpoint

    def test_sets_tasks_channel(self):
        checkpoint = Checkpoint(id="c", version=3, channel_values={"x": 1}, channel_versions={"x": 2, "y": 7})
        upgraded = upgrade(checkpoint, ["s1", "s2"], _next_version)

        assert upgraded.channel_values == {"x": 1, TASKS: ["s1", "s2"]}
        assert upgraded.channel_versions[TASKS] == 7

    def test_fresh_version_without_siblings(self):
        upgraded = upgrade(Checkpoint(id="c", version=3), ["s1"], _next_version)
        assert upgraded.channel_versions == {TASKS: 1}

    def test_input_not_mutated(self):
        checkpoint = Checkpoint(id="c", version=3, channel_versions={"x": 2})
        upgrade(checkpoint, ["s1"], _next_version)
        assert TASKS not in checkpoint.channel_values
        assert TASKS not in checkpoint.channel_versions

    def test_version_generator_not_called_with_siblings(self):
        calls = []

        def tracking(current):
            calls.append(current)
            return 99

        upgrade(Checkpoint(id="c", version=3, channel_versions={"x": 2}), ["s1"], tracking)
        assert calls == []

    def test_deterministic(self):
        checkpoint = Checkpoint(id="c", version=2, channel_versions={"x": 2})
        assert upgrade(checkpoint, ["s"], _next_version) == upgrade(checkpoint, ["s"], _next_version)
