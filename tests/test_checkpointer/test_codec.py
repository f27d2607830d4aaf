"""Tests for the row codec."""

import pytest

from graphvault.checkpointers import Checkpoint, JsonSerializer
from graphvault.checkpointers._codec import dump_checkpoint, load_checkpoint, load_metadata, load_value, to_bytes
from graphvault.exceptions import SerializationMismatchError


class TestToBytes:
    @pytest.mark.parametrize(
        "value",
        [b"abc", bytearray(b"abc"), memoryview(b"abc"), "abc"],
    )
    def test_normalizes(self, value):
        assert to_bytes(value) == b"abc"

    def test_none(self):
        assert to_bytes(None) == b""

    def test_utf8_text(self):
        assert to_bytes("é") == "é".encode()


class TestDumpCheckpoint:
    def test_shared_type(self):
        type_tag, checkpoint_blob, metadata_blob = dump_checkpoint(JsonSerializer(), Checkpoint(id="c1", ts="t"), {"step": 1})
        assert type_tag == "json"
        assert b'"id":"c1"' in checkpoint_blob
        assert metadata_blob == b'{"step":1}'

    def test_mismatch(self):
        class TaggingSerializer(JsonSerializer):
            def dumps_typed(self, value):
                _, data = super().dumps_typed(value)
                return ("a" if "id" in value else "b"), data

        with pytest.raises(SerializationMismatchError, match="same type"):
            dump_checkpoint(TaggingSerializer(), Checkpoint(id="c1"), {})


class TestLoad:
    def test_checkpoint_from_text(self):
        checkpoint = load_checkpoint(JsonSerializer(), "json", '{"v":4,"id":"c1","ts":"t"}')
        assert checkpoint == Checkpoint(id="c1", ts="t")

    def test_checkpoint_from_blob(self):
        assert load_checkpoint(JsonSerializer(), "json", b'{"v":4,"id":"c1","ts":"t"}').id == "c1"

    def test_metadata_none_type(self):
        assert load_metadata(JsonSerializer(), None, '{"source":"loop"}') == {"source": "loop"}

    def test_empty_metadata(self):
        assert load_metadata(JsonSerializer(), "json", None) == {}

    def test_malformed_blob_propagates(self):
        with pytest.raises(ValueError):
            load_value(JsonSerializer(), "json", b"{not json")
