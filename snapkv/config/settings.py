"""
snapkv Configuration Settings

This module contains all configuration constants for snapkv.
Values can be overridden through environment variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Store and front-end configuration settings."""

    # Snapshot settings
    SNAPSHOT_PATH: str = os.environ.get("SNAPKV_SNAPSHOT_PATH", "snapkv.json")
    SNAPSHOT_ENCODING: str = "utf-8"
    FSYNC_ON_SAVE: bool = os.environ.get("SNAPKV_FSYNC", "true").lower() == "true"

    # Persistence policy: "on-exit" or "write-through"
    SAVE_POLICY: str = os.environ.get("SNAPKV_SAVE_POLICY", "on-exit")

    # Front-end settings
    PROMPT: str = "> "

    # Logging settings
    DEBUG: bool = os.environ.get("SNAPKV_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("SNAPKV_LOG_LEVEL", "INFO")


SAVE_POLICIES = ("on-exit", "write-through")

# Global settings instance
settings = Settings()
