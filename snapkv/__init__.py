"""
snapkv: Persistent Key-Value Store

A small in-memory key-value store driven by a line-oriented command
interface and persisted to a JSON snapshot file.
"""

__version__ = "1.0.0"

from .core.processor import CommandProcessor
from .protocol.parser import ProtocolParser, parse
from .storage.snapshot import SnapshotStore, load, save

__all__ = [
    "CommandProcessor",
    "ProtocolParser",
    "SnapshotStore",
    "load",
    "parse",
    "save",
]
