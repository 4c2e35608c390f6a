"""
Tests for the Snapshot Store

These tests verify SnapshotStore:
- load(): first-run behaviour, corrupt files, I/O failures
- save(): round trips and atomic replacement

Run with: python -m pytest tests/test_snapshot.py -v
"""

import json
import os
import stat
from pathlib import Path

import pytest

from snapkv.errors import SnapshotIOError, SnapshotParseError, SnapshotSerializeError
from snapkv.storage import snapshot
from snapkv.storage.snapshot import SnapshotStore


class TestLoad:
    """Test load() method."""

    def test_load_missing_file_is_empty(self, snapshot_store: SnapshotStore):
        """First run: no file means an empty store, not an error."""
        assert snapshot_store.load() == {}
        assert not snapshot_store.exists()

    def test_load_valid_snapshot(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        snapshot_path.write_text('{"a": "1", "b": "2"}', encoding="utf-8")
        assert snapshot_store.load() == {"a": "1", "b": "2"}

    def test_load_empty_object(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        snapshot_path.write_text("{}", encoding="utf-8")
        assert snapshot_store.load() == {}

    def test_load_invalid_json(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        """Corrupt JSON raises SnapshotParseError."""
        snapshot_path.write_bytes(b"{ this is not valid json }")

        with pytest.raises(SnapshotParseError) as exc_info:
            snapshot_store.load()

        assert exc_info.value.path == snapshot_path
        assert exc_info.value.cause is not None

    def test_load_empty_file(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        """A zero-byte file is corrupt, not a first run."""
        snapshot_path.write_bytes(b"")

        with pytest.raises(SnapshotParseError):
            snapshot_store.load()

    def test_load_truncated_snapshot(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        """A half-written document yields an error, never partial data."""
        snapshot_path.write_text('{"a": "1", "b": "2", "c"', encoding="utf-8")

        with pytest.raises(SnapshotParseError):
            snapshot_store.load()

    def test_load_non_utf8_bytes(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        snapshot_path.write_bytes(b"\xff\xfe\x00garbage")

        with pytest.raises(SnapshotParseError) as exc_info:
            snapshot_store.load()

        assert "utf-8" in exc_info.value.reason

    @pytest.mark.parametrize("document", ['["a", "b"]', '"text"', "42", "null"])
    def test_load_non_object(self, snapshot_path: Path, snapshot_store: SnapshotStore, document):
        """Valid JSON that is not an object is rejected."""
        snapshot_path.write_text(document, encoding="utf-8")

        with pytest.raises(SnapshotParseError) as exc_info:
            snapshot_store.load()

        assert "expected a JSON object" in exc_info.value.reason

    def test_load_non_string_value(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        snapshot_path.write_text('{"a": "1", "b": 2}', encoding="utf-8")

        with pytest.raises(SnapshotParseError) as exc_info:
            snapshot_store.load()

        assert "'b'" in exc_info.value.reason

    def test_load_nested_value(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        snapshot_path.write_text('{"a": {"b": "c"}}', encoding="utf-8")

        with pytest.raises(SnapshotParseError):
            snapshot_store.load()

    def test_load_deeply_nested_json(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        """Nesting past the decoder's recursion limit is a parse error."""
        snapshot_path.write_text("[" * 200000, encoding="utf-8")

        with pytest.raises(SnapshotParseError) as exc_info:
            snapshot_store.load()

        assert exc_info.value.reason == "snapshot nested too deeply"
        assert isinstance(exc_info.value.cause, RecursionError)

    def test_load_directory_is_io_error(self, tmp_path: Path):
        """A path that exists but is not readable as a file is an I/O error."""
        store = SnapshotStore(tmp_path)

        with pytest.raises(SnapshotIOError) as exc_info:
            store.load()

        assert isinstance(exc_info.value.cause, OSError)

    def test_load_leaves_corrupt_file_intact(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        """Loading never rewrites a corrupt snapshot."""
        snapshot_path.write_bytes(b"not json")

        with pytest.raises(SnapshotParseError):
            snapshot_store.load()

        assert snapshot_path.read_bytes() == b"not json"


class TestSave:
    """Test save() method."""

    def test_round_trip(self, snapshot_store: SnapshotStore):
        original = {"key1": "value1", "key2": "value2", "foo": "bar"}

        snapshot_store.save(original)

        assert snapshot_store.load() == original

    def test_round_trip_empty(self, snapshot_store: SnapshotStore):
        snapshot_store.save({})

        assert snapshot_store.exists()
        assert snapshot_store.load() == {}

    def test_round_trip_preserves_text(self, snapshot_store: SnapshotStore):
        """Unicode, case, quotes and whitespace survive byte-for-byte."""
        original = {
            "Key": "UPPER",
            "key": "lower",
            "emoji": "\U0001F600",
            "quote": 'say "hi"',
            "spaces": "  a b\tc\n",
            "": "empty key",
        }

        snapshot_store.save(original)

        assert snapshot_store.load() == original

    def test_save_writes_json_object(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        snapshot_store.save({"b": "2", "a": "1"})

        document = json.loads(snapshot_path.read_text(encoding="utf-8"))
        assert document == {"a": "1", "b": "2"}

    def test_save_overwrites_wholesale(self, snapshot_store: SnapshotStore):
        snapshot_store.save({"a": "1", "b": "2"})
        snapshot_store.save({"c": "3"})

        assert snapshot_store.load() == {"c": "3"}

    def test_save_leaves_no_temp_files(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        snapshot_store.save({"a": "1"})
        snapshot_store.save({"a": "2"})

        assert sorted(os.listdir(snapshot_path.parent)) == [snapshot_path.name]

    def test_save_non_string_value(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        with pytest.raises(SnapshotSerializeError):
            snapshot_store.save({"a": 1})

        assert not snapshot_path.exists()

    def test_save_non_string_key(self, snapshot_store: SnapshotStore):
        with pytest.raises(SnapshotSerializeError) as exc_info:
            snapshot_store.save({1: "a"})

        assert "key 1" in exc_info.value.reason

    def test_save_unencodable_text(self, snapshot_store: SnapshotStore):
        """Lone surrogates cannot be written as UTF-8."""
        with pytest.raises(SnapshotSerializeError):
            snapshot_store.save({"a": "\ud800"})

    def test_save_missing_directory(self, tmp_path: Path):
        store = SnapshotStore(tmp_path / "missing" / "snapshot.json", fsync=False)

        with pytest.raises(SnapshotIOError) as exc_info:
            store.save({"a": "1"})

        assert exc_info.value.path == tmp_path / "missing" / "snapshot.json"

    def test_failed_save_keeps_previous_snapshot(self, snapshot_store: SnapshotStore):
        """A save that fails to encode leaves the old file untouched."""
        snapshot_store.save({"a": "1"})

        with pytest.raises(SnapshotSerializeError):
            snapshot_store.save({"a": 2})

        assert snapshot_store.load() == {"a": "1"}

    def test_failed_replace_keeps_previous_snapshot(
            self, snapshot_path: Path, snapshot_store: SnapshotStore, monkeypatch
    ):
        """If the swap fails the old file survives and the temp file is removed."""
        snapshot_store.save({"a": "1"})

        def failing_replace(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(snapshot.os, "replace", failing_replace)

        with pytest.raises(SnapshotIOError) as exc_info:
            snapshot_store.save({"a": "2"})

        assert "No space left" in str(exc_info.value)
        monkeypatch.undo()
        assert snapshot_store.load() == {"a": "1"}
        assert sorted(os.listdir(snapshot_path.parent)) == [snapshot_path.name]

    def test_save_keeps_existing_mode(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        """Replacing a snapshot does not reset its permissions."""
        snapshot_store.save({"a": "0"})
        os.chmod(snapshot_path, 0o644)

        snapshot_store.save({"a": "1"})

        assert stat.S_IMODE(os.stat(snapshot_path).st_mode) == 0o644
        assert snapshot_store.load() == {"a": "1"}

    def test_save_new_file_honours_umask(self, snapshot_path: Path, snapshot_store: SnapshotStore):
        old_umask = os.umask(0o027)
        try:
            snapshot_store.save({"a": "1"})
        finally:
            os.umask(old_umask)

        assert stat.S_IMODE(os.stat(snapshot_path).st_mode) == 0o640

    def test_save_with_fsync(self, snapshot_path: Path):
        store = SnapshotStore(snapshot_path, fsync=True)
        store.save({"a": "1"})

        assert store.load() == {"a": "1"}


class TestModuleFunctions:
    """Test the load()/save() conveniences."""

    def test_save_then_load(self, snapshot_path: Path):
        snapshot.save(snapshot_path, {"x": "y"})
        assert snapshot.load(snapshot_path) == {"x": "y"}

    def test_load_accepts_str_path(self, snapshot_path: Path):
        assert snapshot.load(str(snapshot_path)) == {}
