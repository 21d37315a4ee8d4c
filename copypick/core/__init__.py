"""Core browsing modules for copypick."""

__all__ = [
    "errors",
    "listing",
    "viewport",
    "history",
    "selection",
    "machine",
    "snapshot",
    "config",
]
