"""Configuration module for snapkv."""

from .settings import SAVE_POLICIES, Settings, settings

__all__ = ["SAVE_POLICIES", "Settings", "settings"]
