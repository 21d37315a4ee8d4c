"""
Renderable snapshot of the browser.

The TUI never reads BrowserState directly; it asks for a BrowserSnapshot after
each event and renders that. Only the visible window is classified, so symlink
resolution stays proportional to the screen, not the directory.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from copypick.core.listing import DirectoryEntry
from copypick.core.machine import Browsing, Loading, NavigationStateMachine, Selected
from copypick.core.selection import Classification, EffectiveType, SelectionPolicy
from copypick.utils.utils import format_bytes


@dataclass(frozen=True)
class EntryRow:
    """One visible line of the listing with its rendering attributes."""

    index: int
    entry: DirectoryEntry
    is_cursor: bool
    is_selectable: bool
    effective_type: EffectiveType
    symlink_target: Optional[str]
    permissions: str
    size_label: str

    @property
    def name(self) -> str:
        return self.entry.name


@dataclass(frozen=True)
class BrowserSnapshot:
    phase: str
    current_directory: str
    display_path: str
    rows: Tuple[EntryRow, ...] = ()
    total: int = 0
    error: Optional[str] = None
    selected_path: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.phase == "browsing" and self.total == 0


def _is_selectable(policy: SelectionPolicy, entry: DirectoryEntry, classification: Classification) -> bool:
    # Directories can always be opened; files only if confirming would accept them.
    if classification.is_directory:
        return True
    return policy.accepts(entry, classification)


def build_snapshot(machine: NavigationStateMachine) -> BrowserSnapshot:
    """Collect what the screen should show for the machine's current state."""
    b = machine.browser
    state = machine.state

    if isinstance(state, Loading):
        return BrowserSnapshot(
            phase="loading",
            current_directory=b.current_directory,
            display_path=b.display_path,
        )
    if isinstance(state, Selected):
        return BrowserSnapshot(
            phase="selected",
            current_directory=b.current_directory,
            display_path=b.display_path,
            total=len(b.listing),
            selected_path=state.path,
        )
    if not isinstance(state, Browsing):
        return BrowserSnapshot(
            phase="cancelled",
            current_directory=b.current_directory,
            display_path=b.display_path,
        )

    policy = b.policy
    vs = b.viewport
    rows = []
    for index in range(max(vs.min, 0), min(vs.max, len(b.listing) - 1) + 1):
        entry = b.listing[index]
        classification = policy.classify(entry, b.current_directory)
        target = classification.resolved_path if entry.is_symlink else None
        if target is not None:
            entry = entry.with_symlink_target(target)
        rows.append(
            EntryRow(
                index=index,
                entry=entry,
                is_cursor=index == vs.cursor,
                is_selectable=_is_selectable(policy, entry, classification),
                effective_type=classification.effective_type,
                symlink_target=target,
                permissions=entry.permissions,
                size_label=format_bytes(entry.size),
            )
        )

    return BrowserSnapshot(
        phase="browsing",
        current_directory=b.current_directory,
        display_path=b.display_path,
        rows=tuple(rows),
        total=len(b.listing),
        error=str(b.last_error) if b.last_error is not None else None,
    )


__all__ = ["EntryRow", "BrowserSnapshot", "build_snapshot"]
