"""
Viewport windowing over a listing.

A ViewportState is the cursor plus the inclusive [min, max] slice of the
listing that is on screen. Every function here is pure: it takes the current
state, the listing length and the viewport height and returns a new state.

Invariants kept by every function, for a non-empty listing:
- 0 <= cursor < length
- min <= cursor <= max
- max - min + 1 == min(height, length)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ViewportState:
    cursor: int = 0
    min: int = 0
    max: int = -1

    def contains(self, index: int) -> bool:
        return self.min <= index <= self.max


EMPTY = ViewportState(0, 0, -1)


def _window(length: int, height: int) -> int:
    return min(max(height, 1), length)


def _contain(cursor: int, low: int, length: int, height: int) -> ViewportState:
    """Build a valid state whose window starts as close to `low` as possible."""
    if length <= 0:
        return EMPTY
    w = _window(length, height)
    cursor = max(0, min(cursor, length - 1))
    low = max(cursor - w + 1, min(low, cursor))
    low = max(0, min(low, length - w))
    return ViewportState(cursor=cursor, min=low, max=low + w - 1)


def reset_for_new_listing(length: int, height: int) -> ViewportState:
    """Cursor on the first entry, window at the top."""
    return _contain(0, 0, length, height)


def move_by(state: ViewportState, delta: int, length: int, height: int) -> ViewportState:
    """
    Move the cursor by `delta` entries.

    When the cursor leaves the window, the window slides by the minimal amount
    that brings it back into view; it never re-centers.
    """
    if length <= 0:
        return state
    cursor = max(0, min(state.cursor + delta, length - 1))
    return _contain(cursor, state.min, length, height)


def move_to_start(state: ViewportState, length: int, height: int) -> ViewportState:
    if length <= 0:
        return state
    return _contain(0, 0, length, height)


def move_to_end(state: ViewportState, length: int, height: int) -> ViewportState:
    if length <= 0:
        return state
    return _contain(length - 1, length, length, height)


def page_by(state: ViewportState, delta: int, length: int, height: int) -> ViewportState:
    """
    Shift cursor and window together by `delta` (normally +/- height).

    Past the end, max sticks to the last entry and min = max - height + 1;
    past the top, min sticks to 0.
    """
    if length <= 0:
        return state
    cursor = max(0, min(state.cursor + delta, length - 1))
    return _contain(cursor, state.min + delta, length, height)


def resize(state: ViewportState, length: int, height: int) -> ViewportState:
    """Recompute max from min for a new height, keeping the cursor where it is."""
    if length <= 0:
        return state
    return _contain(state.cursor, state.min, length, height)


def restore(state: ViewportState, length: int, height: int) -> ViewportState:
    """Fit a remembered state onto a listing that may have changed size."""
    if length <= 0:
        return EMPTY
    return _contain(state.cursor, state.min, length, height)


__all__ = [
    "ViewportState",
    "EMPTY",
    "reset_for_new_listing",
    "move_by",
    "move_to_start",
    "move_to_end",
    "page_by",
    "resize",
    "restore",
]
