"""
Utility functions for copypick: size formatting and start-path resolution.
"""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Optional


_SI_SUFFIXES = ("B", "kB", "MB", "GB", "TB", "PB", "EB")


def format_bytes(size_bytes: int) -> str:
    """
    Format a byte count with SI (1000-based) units.

    Args:
        size_bytes: Size in bytes (negative values are treated as 0)

    Returns:
        Formatted string (e.g., "999 B", "1.5 kB", "12 MB")

    Examples:
        >>> format_bytes(0)
        '0 B'
        >>> format_bytes(1500)
        '1.5 kB'
        >>> format_bytes(12_000_000)
        '12 MB'
    """
    size = max(int(size_bytes or 0), 0)
    if size < 10:
        return f"{size} B"
    exp = 0
    while exp < len(_SI_SUFFIXES) - 1 and size >= 1000 ** (exp + 1):
        exp += 1
    value = math.floor(size / (1000 ** exp) * 10 + 0.5) / 10
    if value < 10:
        return f"{value:.1f} {_SI_SUFFIXES[exp]}"
    return f"{value:.0f} {_SI_SUFFIXES[exp]}"


def resolve_start_path(raw: Optional[str], *, cwd: Optional[Path] = None) -> Path:
    """
    Turn a user-supplied start path into an absolute path.

    - None/empty -> the current working directory
    - `~` / `~user` prefixes are expanded
    - relative paths are joined onto `cwd` and normalized

    The path is not required to exist; callers validate that.
    """
    base = Path(cwd) if cwd is not None else Path.cwd()
    if not raw or not raw.strip():
        return base.absolute()
    p = Path(raw.strip()).expanduser()
    if not p.is_absolute():
        p = base / p
    return Path(os.path.normpath(str(p)))
