"""Key map for the browser.

Keys are looked up by Textual key name first and by the typed character
second, so `G` works whether the terminal reports it as "G" or "shift+g".
Quitting (`q`, `ctrl+c`) is an App binding, not part of this table.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple

from copypick.core.machine import (
    Activate,
    Ascend,
    Event,
    GoToLast,
    GoToTop,
    MoveDown,
    MoveUp,
    PageDown,
    PageUp,
)


def _open_and_select() -> Event:
    return Activate(confirm=True)


KEY_EVENTS: Dict[str, Callable[[], Event]] = {
    "g": GoToTop,
    "G": GoToLast,
    "j": MoveDown,
    "down": MoveDown,
    "ctrl+n": MoveDown,
    "k": MoveUp,
    "up": MoveUp,
    "ctrl+p": MoveUp,
    "K": PageUp,
    "pageup": PageUp,
    "J": PageDown,
    "pagedown": PageDown,
    "h": Ascend,
    "backspace": Ascend,
    "left": Ascend,
    "escape": Ascend,
    "l": Activate,
    "right": Activate,
    "enter": _open_and_select,
}


# Shown by the footer, in display order.
KEY_HINTS: List[Tuple[str, str]] = [
    ("↑↓/jk", "Navigate"),
    ("J/K", "Page"),
    ("g/G", "Top/Bottom"),
    ("←/h", "Back"),
    ("→/l", "Open"),
    ("Enter", "Select"),
    ("q", "Quit"),
]


def event_for_key(key: str, character: Optional[str] = None) -> Optional[Event]:
    """Translate a key press into a machine event, or None if unbound."""
    factory = KEY_EVENTS.get(key)
    if factory is None and character:
        factory = KEY_EVENTS.get(character)
    if factory is None:
        return None
    return factory()


__all__ = ["KEY_EVENTS", "KEY_HINTS", "event_for_key"]
