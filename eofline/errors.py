"""Error taxonomy for configuration and traversal failures.

Per-file failures are plain ``OSError`` values raised by the inspector and
carried inside ``FileError`` outcomes. Only ``ConfigurationError`` is fatal.
"""

from __future__ import annotations

from pathlib import Path


class ConfigurationError(Exception):
    """Invalid user intent detected before any traversal starts."""


class TraversalError(Exception):
    """A directory or root that the walker could not read."""

    def __init__(self, path: Path, cause: BaseException) -> None:
        super().__init__(path, cause)
        self.path = path
        self.cause = cause

    def __str__(self) -> str:
        reason = self.cause.strerror if isinstance(self.cause, OSError) and self.cause.strerror else str(self.cause)
        return f"{self.path}: {reason}"


class ChannelClosed(RuntimeError):
    """Raised when a producer sends on a channel that was already closed."""


__all__ = [
    "ConfigurationError",
    "TraversalError",
    "ChannelClosed",
]
