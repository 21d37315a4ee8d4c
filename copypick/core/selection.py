"""
Selection policy: what an entry effectively is, and whether it may be chosen.

Entries are classified exactly once into an EffectiveType; everything
downstream (descend vs. select, rendering attributes) works from that instead
of re-checking directory/symlink flags.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Iterable, Optional

from copypick.core.errors import SymlinkResolutionError
from copypick.core.listing import DirectoryEntry


logger = logging.getLogger(__name__)


class EffectiveType(str, Enum):
    """Selection-relevant type of an entry after symlink resolution.

    Attributes:
        FILE: Regular file, or a symlink that is not a reachable directory.
        DIRECTORY: Directory, or a symlink whose target is a reachable directory.
    """

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class Classification:
    effective_type: EffectiveType
    resolved_path: Optional[str] = None

    @property
    def is_directory(self) -> bool:
        return self.effective_type is EffectiveType.DIRECTORY


def resolve_symlink(path: str) -> str:
    """
    Resolve a symlink to the absolute path it ultimately points at.

    Raises:
        SymlinkResolutionError: If the link is dangling, loops, or can't be read
    """
    try:
        return str(Path(path).resolve(strict=True))
    except (OSError, RuntimeError) as e:
        raise SymlinkResolutionError(path, str(e)) from e


def normalize_extensions(extensions: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Strip whitespace and drop empty suffixes."""
    return frozenset(s.strip() for s in (extensions or ()) if s and s.strip())


@dataclass(frozen=True)
class SelectionPolicy:
    """Which entries a session allows the user to choose.

    Attributes:
        allowed_extensions: Name suffixes a file must end with; empty = any file
        allow_files: Files may be chosen
        allow_directories: Directories may be chosen (instead of only entered)
    """

    allowed_extensions: FrozenSet[str] = field(default_factory=frozenset)
    allow_files: bool = True
    allow_directories: bool = False

    def classify(self, entry: DirectoryEntry, current_directory: str) -> Classification:
        """
        Determine the effective type of `entry`.

        A symlink counts as a directory only when its target resolves and is a
        directory. Any resolution failure falls back to FILE; it is never fatal.
        """
        if not entry.is_symlink:
            kind = EffectiveType.DIRECTORY if entry.is_directory else EffectiveType.FILE
            return Classification(kind)

        link_path = os.path.join(current_directory, entry.name)
        try:
            target = resolve_symlink(link_path)
        except SymlinkResolutionError as e:
            logger.debug("Treating %s as a file: %s", link_path, e.reason)
            return Classification(EffectiveType.FILE)

        try:
            target_mode = os.stat(target).st_mode
        except OSError as e:
            logger.debug("Treating %s as a file: %s", link_path, e)
            return Classification(EffectiveType.FILE, target)

        if stat.S_ISDIR(target_mode):
            return Classification(EffectiveType.DIRECTORY, target)
        return Classification(EffectiveType.FILE, target)

    def can_select(self, entry: DirectoryEntry) -> bool:
        """Extension filter. Directories are never extension-filtered."""
        if entry.is_directory or not self.allowed_extensions:
            return True
        return any(entry.name.endswith(ext) for ext in self.allowed_extensions)

    def is_chooseable(self, effective_type: EffectiveType) -> bool:
        if effective_type is EffectiveType.DIRECTORY:
            return self.allow_directories
        return self.allow_files

    def accepts(self, entry: DirectoryEntry, classification: Classification) -> bool:
        """True when confirming on `entry` should end the session with it."""
        if not self.is_chooseable(classification.effective_type):
            return False
        if classification.is_directory:
            return True
        return self.can_select(entry)


__all__ = [
    "EffectiveType",
    "Classification",
    "SelectionPolicy",
    "resolve_symlink",
    "normalize_extensions",
]
