"""
Snapshot Store Module

Loads and saves the entire key-value mapping as one JSON document.

Snapshot format:
    A single JSON object mapping key strings to value strings, e.g.
    {"name": "aaron", "lang": "python"}

Guarantees:
    - A missing snapshot file loads as an empty store (first run)
    - Saves go to a temporary file in the target directory which is then
      swapped in with os.replace(), so readers never see a half-written file
    - A load failure never yields partial data
"""

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Dict, Mapping, Union

from ..config.settings import settings
from ..errors import SnapshotIOError, SnapshotParseError, SnapshotSerializeError

logger = logging.getLogger(__name__)


class SnapshotStore:
    """
    Whole-file snapshot persistence for a str -> str mapping.

    Usage:
        snapshots = SnapshotStore("data/snapkv.json")
        data = snapshots.load()       # {} on first run
        data["key"] = "value"
        snapshots.save(data)

    Attributes:
        path: Location of the snapshot file
        encoding: Text encoding used on disk
        fsync: Whether to fsync the temporary file before the swap
    """

    def __init__(
            self,
            path: Union[str, Path],
            encoding: str = None,
            fsync: bool = None,
    ):
        self.path = Path(path)
        self.encoding = encoding if encoding is not None else settings.SNAPSHOT_ENCODING
        self.fsync = fsync if fsync is not None else settings.FSYNC_ON_SAVE

    def exists(self) -> bool:
        """Check whether a snapshot file is present at the path."""
        return self.path.is_file()

    def load(self) -> Dict[str, str]:
        """
        Read the snapshot into a new dict.

        Returns:
            The stored mapping, or an empty dict if no file exists.

        Raises:
            SnapshotIOError: The file exists but could not be read.
            SnapshotParseError: The contents are not a JSON object of strings.
        """
        logger.debug(f"Loading snapshot from {self.path}")
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            logger.info(f"No snapshot at {self.path}, starting empty")
            return {}
        except OSError as exc:
            raise SnapshotIOError(self.path, exc) from exc

        try:
            text = raw.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise SnapshotParseError(self.path, f"not valid {self.encoding} text", exc) from exc

        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SnapshotParseError(self.path, f"invalid JSON ({exc.msg} at line {exc.lineno})", exc) from exc
        except RecursionError as exc:
            raise SnapshotParseError(self.path, "snapshot nested too deeply", exc) from exc

        data = self._validate(document)
        logger.info(f"Loaded {len(data)} keys from {self.path}")
        return data

    def save(self, mapping: Mapping[str, str]) -> None:
        """
        Atomically replace the snapshot with the given mapping.

        Args:
            mapping: The full store to persist

        Raises:
            SnapshotSerializeError: A key or value is not a string.
            SnapshotIOError: Writing or swapping in the file failed. The
                previous snapshot, if any, is left untouched.
        """
        logger.debug(f"Saving {len(mapping)} keys to {self.path}")
        payload = self._encode(mapping)

        directory = self.path.parent
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                dir=directory,
            )
        except OSError as exc:
            raise SnapshotIOError(self.path, exc) from exc

        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
                handle.flush()
                if self.fsync:
                    os.fsync(handle.fileno())
            # mkstemp creates 0600; keep the target's mode (or the umask default)
            os.chmod(tmp_name, self._target_mode())
            os.replace(tmp_name, self.path)
        except OSError as exc:
            self._discard(tmp_name)
            raise SnapshotIOError(self.path, exc) from exc

        logger.info(f"Saved {len(mapping)} keys to {self.path}")

    def _encode(self, mapping: Mapping[str, str]) -> bytes:
        """Serialize the mapping to bytes, rejecting non-string entries."""
        for key, value in mapping.items():
            if not isinstance(key, str):
                raise SnapshotSerializeError(self.path, f"key {key!r} is not a string")
            if not isinstance(value, str):
                raise SnapshotSerializeError(self.path, f"value for key {key!r} is not a string")

        try:
            text = json.dumps(dict(mapping), ensure_ascii=False, indent=2, sort_keys=True)
            return (text + "\n").encode(self.encoding)
        except (TypeError, ValueError) as exc:
            # UnicodeEncodeError is a ValueError (e.g. lone surrogates)
            raise SnapshotSerializeError(self.path, str(exc), exc) from exc

    def _validate(self, document) -> Dict[str, str]:
        """Check that a decoded document is a flat str -> str object."""
        if not isinstance(document, dict):
            raise SnapshotParseError(
                self.path,
                f"expected a JSON object, got {type(document).__name__}",
            )

        for key, value in document.items():
            if not isinstance(value, str):
                raise SnapshotParseError(
                    self.path,
                    f"value for key {key!r} is {type(value).__name__}, expected string",
                )
        return document

    def _target_mode(self) -> int:
        """Permission bits the saved snapshot should end up with."""
        try:
            return stat.S_IMODE(os.stat(self.path).st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    @staticmethod
    def _discard(tmp_name: str) -> None:
        """Remove a leftover temporary file."""
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning(f"Could not remove temporary snapshot {tmp_name}: {exc}")


def load(path: Union[str, Path]) -> Dict[str, str]:
    """
    Convenience function to load a snapshot.

    Usage:
        data = load("snapkv.json")
    """
    return SnapshotStore(path).load()


def save(path: Union[str, Path], mapping: Mapping[str, str]) -> None:
    """
    Convenience function to save a snapshot.

    Usage:
        save("snapkv.json", {"key": "value"})
    """
    SnapshotStore(path).save(mapping)
