"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

from pathlib import Path

import pytest

from snapkv.core.processor import CommandProcessor
from snapkv.protocol.parser import ProtocolParser
from snapkv.repl import Repl
from snapkv.storage.snapshot import SnapshotStore


# ============================================================================
# Processor Fixtures
# ============================================================================

@pytest.fixture
def processor() -> CommandProcessor:
    """Create an empty CommandProcessor."""
    return CommandProcessor()


@pytest.fixture
def populated_processor() -> CommandProcessor:
    """Create a CommandProcessor holding a few keys."""
    return CommandProcessor({"name": "aaron", "lang": "python", "editor": "vim"})


# ============================================================================
# Protocol Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


# ============================================================================
# Snapshot Fixtures
# ============================================================================

@pytest.fixture
def snapshot_path(tmp_path: Path) -> Path:
    """Path for a snapshot file that does not exist yet."""
    return tmp_path / "snapshot.json"


@pytest.fixture
def snapshot_store(snapshot_path: Path) -> SnapshotStore:
    """SnapshotStore without fsync, to keep tests fast."""
    return SnapshotStore(snapshot_path, fsync=False)


# ============================================================================
# Front-end Fixtures
# ============================================================================

@pytest.fixture
def repl_factory(snapshot_path: Path):
    """
    Factory fixture to create a Repl bound to the test snapshot.

    Usage:
        def test_something(repl_factory):
            repl = repl_factory(save_policy="write-through")
    """
    def factory(processor: CommandProcessor = None, save_policy: str = "on-exit") -> Repl:
        return Repl(
            processor if processor is not None else CommandProcessor(),
            snapshot_path=snapshot_path,
            save_policy=save_policy,
        )
    return factory


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
