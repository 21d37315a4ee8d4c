"""
Directory listing for the browser.

Reads the direct children of one directory, drops hidden entries unless asked
not to, and returns them as an immutable Listing: directories first, then
files, each group ordered by name.

Listing may be slow on network or removable filesystems, so the TUI calls it
from a worker thread. Nothing here touches shared state.
"""

from __future__ import annotations

import logging
import os
import stat
import sys
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional, Protocol, Tuple

from copypick.core.errors import DirectoryReadError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryEntry:
    """Snapshot of one filesystem item inside a listed directory.

    `is_directory` is the nominal type: symlinks are not followed here.
    `symlink_target` is only filled in when something needs it (rendering or
    selection), via `with_symlink_target`.
    """

    name: str
    is_directory: bool
    is_symlink: bool = False
    mode: int = 0
    size: int = 0
    symlink_target: Optional[str] = None

    @property
    def permissions(self) -> str:
        """ls-style permission string, e.g. `drwxr-xr-x`."""
        return stat.filemode(self.mode)

    def with_symlink_target(self, target: Optional[str]) -> "DirectoryEntry":
        return replace(self, symlink_target=target)


@dataclass(frozen=True)
class Listing:
    """Sorted, filtered children of exactly one directory."""

    directory: str
    entries: Tuple[DirectoryEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> DirectoryEntry:
        return self.entries[index]

    def __iter__(self) -> Iterator[DirectoryEntry]:
        return iter(self.entries)

    def names(self) -> List[str]:
        return [e.name for e in self.entries]


def is_hidden(name: str, attributes: int = 0) -> bool:
    """
    Check whether an entry is hidden by platform convention.

    Dot-prefixed names are hidden everywhere. On Windows the
    FILE_ATTRIBUTE_HIDDEN bit (from `st_file_attributes`) also counts.

    Args:
        name: Entry name (not a path)
        attributes: Windows file attribute bits, 0 elsewhere

    Returns:
        True if the entry should be filtered out of a default listing
    """
    if name.startswith("."):
        return True
    if sys.platform.startswith("win") and attributes & stat.FILE_ATTRIBUTE_HIDDEN:
        return True
    return False


def sort_entries(entries: Iterable[DirectoryEntry]) -> List[DirectoryEntry]:
    """Directories before files; lexicographic by name within each group."""
    return sorted(entries, key=lambda e: (not e.is_directory, e.name))


def _read_entry(dir_entry: os.DirEntry) -> Tuple[DirectoryEntry, int]:
    st = dir_entry.stat(follow_symlinks=False)
    entry = DirectoryEntry(
        name=dir_entry.name,
        is_directory=stat.S_ISDIR(st.st_mode),
        is_symlink=stat.S_ISLNK(st.st_mode),
        mode=st.st_mode,
        size=max(int(st.st_size), 0),
    )
    return entry, int(getattr(st, "st_file_attributes", 0) or 0)


def list_directory(directory: str, show_hidden: bool = False) -> Listing:
    """
    List the direct children of a directory.

    Args:
        directory: Absolute path of the directory to read
        show_hidden: Keep hidden entries instead of filtering them out

    Returns:
        Listing for `directory`

    Raises:
        DirectoryReadError: If the directory itself cannot be read. An empty
            directory is a valid empty Listing, never an error.
    """
    entries: List[DirectoryEntry] = []
    try:
        with os.scandir(directory) as it:
            for dir_entry in it:
                try:
                    entry, attributes = _read_entry(dir_entry)
                except OSError as e:
                    # Entry vanished (or became unreadable) between scan and stat.
                    logger.debug("Skipping %s in %s: %s", dir_entry.name, directory, e)
                    continue
                if not show_hidden and is_hidden(entry.name, attributes):
                    continue
                entries.append(entry)
    except OSError as e:
        reason = e.strerror or str(e)
        logger.warning("Failed to list %s: %s", directory, reason)
        raise DirectoryReadError(directory, reason) from e

    return Listing(directory=directory, entries=tuple(sort_entries(entries)))


class EntryLister(Protocol):
    """Anything that can produce a Listing for a directory."""

    def list(self, directory: str, show_hidden: bool = False) -> Listing:
        ...


class FilesystemLister:
    """EntryLister bound to the real filesystem."""

    def list(self, directory: str, show_hidden: bool = False) -> Listing:
        return list_directory(directory, show_hidden=show_hidden)


__all__ = [
    "DirectoryEntry",
    "Listing",
    "EntryLister",
    "FilesystemLister",
    "is_hidden",
    "sort_entries",
    "list_directory",
]
