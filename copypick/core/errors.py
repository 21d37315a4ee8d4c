"""
Error kinds raised by the copypick core.

None of these are fatal: the state machine turns a DirectoryReadError into an
empty listing plus a surfaced error, and a SymlinkResolutionError into a
fallback classification.
"""

from __future__ import annotations


class CopypickError(Exception):
    """Base class for all copypick errors."""


class DirectoryReadError(CopypickError):
    """A directory could not be listed (permission denied, vanished, I/O failure).

    Attributes:
        path: Directory that failed to list
        reason: Short human-readable cause
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read directory {path}: {reason}")
        self.path = path
        self.reason = reason


class SymlinkResolutionError(CopypickError):
    """A symlink target could not be resolved (dangling link, loop, permissions)."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot resolve symlink {path}: {reason}")
        self.path = path
        self.reason = reason


class ConfigError(CopypickError, ValueError):
    """Configuration file is unreadable or holds values of the wrong type."""


__all__ = [
    "CopypickError",
    "DirectoryReadError",
    "SymlinkResolutionError",
    "ConfigError",
]
