"""Storage module for snapkv."""

from .snapshot import SnapshotStore, load, save

__all__ = ["SnapshotStore", "load", "save"]
