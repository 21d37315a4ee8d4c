"""Data models and constants for the TUI module.

This module contains:
- Widget ID constants (for stable test API)
- The result handed back when the app exits
- Layout constants shared by the app and its widgets
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class WidgetIds:
    """Widget ID constants for stable test API.

    All widget IDs used in the TUI are defined here to prevent test breakage
    when refactoring UI structure.
    """

    PROMPT = "prompt"
    PATH_BANNER = "path_banner"
    ENTRY_LIST = "entry_list"
    STATUS = "status"
    FOOTER = "footer"


# Rows taken by everything except the entry list (prompt, bordered banner,
# status line, footer, spacing). Used when the height follows the terminal.
CHROME_ROWS = 8

DEFAULT_VIEWPORT_HEIGHT = 10

EMPTY_LISTING_TEXT = "Bummer. No Files Found."

# Seconds a "not valid" notice stays on the status line.
NOTICE_SECONDS = 2.0


@dataclass(frozen=True)
class BrowseResult:
    """What the browser returns from App.run().

    Attributes:
        path: Absolute path the user confirmed (None when cancelled)
        cancelled: The session ended without a selection
    """

    path: Optional[str] = None
    cancelled: bool = False


def viewport_height_for(terminal_height: int) -> int:
    """Entry rows available when the list follows the terminal height."""
    return max(int(terminal_height) - CHROME_ROWS, 1)


__all__ = [
    "WidgetIds",
    "CHROME_ROWS",
    "DEFAULT_VIEWPORT_HEIGHT",
    "EMPTY_LISTING_TEXT",
    "NOTICE_SECONDS",
    "BrowseResult",
    "viewport_height_for",
]
