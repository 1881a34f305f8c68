"""Core module for configuration and logging."""

from videonote.core.config import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
