"""Custom Textual widgets for the browser.

Every widget renders from a BrowserSnapshot pushed in by the app; none of
them reads the state machine directly.
"""

from __future__ import annotations

from typing import Optional

from rich.text import Text
from textual.widgets import Static

from copypick.core.config import DEFAULT_CURSOR
from copypick.core.selection import EffectiveType
from copypick.core.snapshot import BrowserSnapshot, EntryRow
from copypick.tui.keys import KEY_HINTS
from copypick.tui.models import EMPTY_LISTING_TEXT


# 256-colour palette of the classic picker look.
CURSOR_STYLE = "color(212)"
SELECTED_STYLE = "bold color(212)"
DIRECTORY_STYLE = "color(99)"
SYMLINK_STYLE = "color(36)"
FILE_STYLE = ""
PERMISSION_STYLE = "color(244)"
SIZE_STYLE = "color(240)"
DISABLED_STYLE = "color(243)"
DISABLED_SELECTED_STYLE = "color(247)"

SIZE_WIDTH = 7


class PromptLine(Static):
    """Top line: what to do, or what was chosen."""

    plain_text: str = "Pick a file:"

    def set_selected(self, path: Optional[str]) -> None:
        if path:
            self.plain_text = f"Selected file: {path}"
            self.update(Text.assemble("Selected file: ", (path, SELECTED_STYLE)))
        else:
            self.plain_text = "Pick a file:"
            self.update(Text(self.plain_text))


class PathBanner(Static):
    """Bordered banner with the display path."""

    plain_text: str = ""

    def set_path(self, path: str) -> None:
        self.plain_text = path
        self.update(Text(path, overflow="ellipsis", no_wrap=True))


class EntryList(Static):
    """The visible window of the listing, one entry per line."""

    def __init__(self, *, cursor: str = DEFAULT_CURSOR, **kwargs) -> None:
        super().__init__(**kwargs)
        self.cursor_marker = cursor
        self.snapshot: Optional[BrowserSnapshot] = None

    def set_snapshot(self, snapshot: BrowserSnapshot) -> None:
        self.snapshot = snapshot
        self.refresh()

    def _name_style(self, row: EntryRow) -> str:
        if not row.is_selectable:
            return DISABLED_STYLE
        if row.entry.is_symlink:
            return SYMLINK_STYLE
        if row.effective_type is EffectiveType.DIRECTORY:
            return DIRECTORY_STYLE
        return FILE_STYLE

    def render_row(self, row: EntryRow) -> Text:
        name = row.name
        if row.symlink_target:
            name = f"{name} → {row.symlink_target}"
        size = row.size_label.rjust(SIZE_WIDTH)

        if row.is_cursor:
            style = SELECTED_STYLE if row.is_selectable else DISABLED_SELECTED_STYLE
            cursor_style = CURSOR_STYLE if row.is_selectable else DISABLED_SELECTED_STYLE
            return Text.assemble(
                (self.cursor_marker, cursor_style),
                (f" {row.permissions} {size} {name}", style),
            )

        return Text.assemble(
            " " * len(self.cursor_marker),
            (f" {row.permissions}", PERMISSION_STYLE),
            (f" {size}", SIZE_STYLE),
            " ",
            (name, self._name_style(row)),
        )

    def render(self) -> Text:
        snap = self.snapshot
        if snap is None or snap.phase == "loading":
            return Text("Loading…", style="dim")
        if snap.is_empty:
            return Text(EMPTY_LISTING_TEXT, style=DISABLED_STYLE)
        return Text("\n").join(self.render_row(row) for row in snap.rows)


class StatusLine(Static):
    """Listing errors, rejected selections, entry count."""

    plain_text: str = ""

    def set_message(self, message: str, style: str = "") -> None:
        self.plain_text = message
        self.update(Text(message, style=style))


class KeyHintFooter(Static):
    """Footer listing the browser's keyboard shortcuts."""

    def render(self) -> str:
        parts = [f"[bold]{key}[/] {desc}" for key, desc in KEY_HINTS]
        return "  ".join(parts)


__all__ = [
    "PromptLine",
    "PathBanner",
    "EntryList",
    "StatusLine",
    "KeyHintFooter",
]
