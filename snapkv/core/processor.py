"""
Command Processor Module

This module holds the in-memory key-value store and applies parsed
commands to it.

Applying a command and persisting the store are separate operations:
apply() never touches the disk. Callers decide when to call save(),
e.g. after every mutation (write-through) or only on exit.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ..errors import KeyNotFoundError
from ..protocol.commands import Command, CommandType, Response
from ..storage.snapshot import SnapshotStore

logger = logging.getLogger(__name__)


class CommandProcessor:
    """
    In-memory key-value store driven by Command objects.

    This class provides O(1) average-case time complexity for:
    - get: Retrieve a value by key
    - set: Insert or update a key-value pair
    - delete: Remove a key-value pair

    A command either succeeds completely or raises without touching the
    store. The processor is not thread-safe; embedders that share it
    across threads must serialize access themselves.

    Attributes:
        dirty: True when the store has changed since the last load or save
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        """
        Initialize the processor.

        Args:
            initial: Mapping to start from (copied, never aliased)
        """
        self._store: Dict[str, str] = dict(initial) if initial else {}
        self.dirty = False

        self._handlers = {
            CommandType.GET: self._apply_get,
            CommandType.SET: self._apply_set,
            CommandType.DELETE: self._apply_delete,
            CommandType.LIST: self._apply_list,
            CommandType.EXIT: self._apply_exit,
        }

    @classmethod
    def from_snapshot(cls, path: Union[str, Path]) -> "CommandProcessor":
        """
        Create a processor from the snapshot at path.

        A missing file gives an empty store. Snapshot errors propagate.
        """
        return cls(SnapshotStore(path).load())

    def save(self, path: Union[str, Path]) -> None:
        """
        Persist the whole store to path.

        The dirty flag is only cleared if the save succeeds.
        """
        SnapshotStore(path).save(self._store)
        self.dirty = False

    def apply(self, command: Command) -> Response:
        """
        Apply a parsed command to the store.

        Args:
            command: The Command to execute

        Returns:
            Response describing the result

        Raises:
            KeyNotFoundError: GET or DELETE of an absent key.
        """
        logger.debug(f"Applying {command.type.name} {command.key}".rstrip())
        return self._handlers[command.type](command)

    def _apply_get(self, command: Command) -> Response:
        return Response.value_response(self.get(command.key))

    def _apply_set(self, command: Command) -> Response:
        return Response.stored(self.set(command.key, command.value))

    def _apply_delete(self, command: Command) -> Response:
        return Response.deleted(self.delete(command.key))

    def _apply_list(self, command: Command) -> Response:
        return Response.listing(self.items())

    def _apply_exit(self, command: Command) -> Response:
        return Response.goodbye()

    def get(self, key: str) -> str:
        """
        Retrieve the value for a given key.

        Raises:
            KeyNotFoundError: The key is not in the store.
        """
        try:
            return self._store[key]
        except KeyError:
            raise KeyNotFoundError(key) from None

    def set(self, key: str, value: str) -> Optional[str]:
        """
        Insert or update a key-value pair.

        Returns:
            The previous value, or None if the key was absent
        """
        previous = self._store.get(key)
        self._store[key] = value
        self.dirty = True
        return previous

    def delete(self, key: str) -> str:
        """
        Delete a key-value pair.

        Returns:
            The removed value

        Raises:
            KeyNotFoundError: The key is not in the store.
        """
        try:
            removed = self._store.pop(key)
        except KeyError:
            raise KeyNotFoundError(key) from None
        self.dirty = True
        return removed

    def items(self) -> List[Tuple[str, str]]:
        """Return a sorted copy of all (key, value) pairs."""
        return sorted(self._store.items())

    def keys(self) -> List[str]:
        """Return a sorted copy of all keys."""
        return sorted(self._store)

    def to_dict(self) -> Dict[str, str]:
        """Return a copy of the underlying mapping."""
        return dict(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())
