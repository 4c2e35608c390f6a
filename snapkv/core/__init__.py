"""Core module for snapkv."""

from .processor import CommandProcessor

__all__ = ["CommandProcessor"]
