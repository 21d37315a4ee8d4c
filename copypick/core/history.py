"""Back-navigation history: one saved viewport per directory level descended."""

from __future__ import annotations

from typing import List, Optional

from copypick.core.viewport import ViewportState


class NavigationStack:
    """LIFO of ViewportState snapshots.

    Depth equals how many directories the user has descended from the session's
    starting directory. Popping an empty stack is not an error: the caller gets
    `default` back and resets its viewport.
    """

    def __init__(self) -> None:
        self._items: List[ViewportState] = []

    def push(self, state: ViewportState) -> None:
        self._items.append(state)

    def pop(self, default: Optional[ViewportState] = None) -> Optional[ViewportState]:
        if not self._items:
            return default
        return self._items.pop()

    def peek(self) -> Optional[ViewportState]:
        return self._items[-1] if self._items else None

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)


__all__ = ["NavigationStack"]
