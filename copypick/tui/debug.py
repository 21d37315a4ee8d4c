"""Debug event logging for the TUI.

Events are kept in memory when COPYPICK_TUI_DEBUG is set, and additionally
streamed as NDJSON to COPYPICK_TUI_DEBUG_FILE when that is set too.
"""

import json
import os
import threading
import time
from typing import Optional, TextIO


DEBUG_ENV = "COPYPICK_TUI_DEBUG"
DEBUG_FILE_ENV = "COPYPICK_TUI_DEBUG_FILE"

_MAX_EVENTS = 500
_KEEP_EVENTS = 250


class DebugLogger:
    """Thread-safe debug event logger with optional file streaming.

    Handles in-memory event storage and optional file-based logging for
    reproducible traces of a browsing session.
    """

    def __init__(self, app) -> None:
        """Initialize debug logger.

        Args:
            app: The CopyPickApp instance (used for reading the machine phase)
        """
        self.app = app
        self._debug_events: list[dict[str, object]] = []
        self._debug_file_path: Optional[str] = None
        self._debug_file: Optional[TextIO] = None
        self._debug_file_lock = threading.Lock()

    def _phase(self) -> str:
        machine = getattr(self.app, "machine", None)
        state = getattr(machine, "state", None)
        return type(state).__name__ if state is not None else ""

    def log(self, *, event: str, data: Optional[dict[str, object]] = None) -> None:
        """Log a debug event.

        Never crashes the UI if debug logging isn't configured or the trace
        file can't be written.

        Args:
            event: Event name/type
            data: Optional event data dictionary
        """
        if not os.getenv(DEBUG_ENV):
            return
        payload: dict[str, object] = {
            "t": float(time.time()),
            "event": str(event),
            "phase": self._phase(),
            "data": data or {},
        }
        self._debug_events.append(payload)
        # Prevent unbounded growth during long sessions/tests.
        if len(self._debug_events) > _MAX_EVENTS:
            self._debug_events = self._debug_events[-_KEEP_EVENTS:]

        debug_file_path = os.getenv(DEBUG_FILE_ENV)
        if not debug_file_path:
            return
        with self._debug_file_lock:
            try:
                if self._debug_file is None or self._debug_file_path != debug_file_path:
                    self._close_locked()
                    self._debug_file_path = debug_file_path
                    self._debug_file = open(debug_file_path, "a", encoding="utf-8", buffering=1)
                line = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)
                self._debug_file.write(line + "\n")
                self._debug_file.flush()
            except OSError:
                # Never let debug logging break the UI.
                self._debug_file = None
                self._debug_file_path = None

    def _close_locked(self) -> None:
        try:
            if self._debug_file is not None:
                self._debug_file.flush()
                self._debug_file.close()
        except OSError:
            pass
        finally:
            self._debug_file = None
            self._debug_file_path = None

    def close_debug_file(self) -> None:
        """Flush/close the debug file handle (if open)."""
        with self._debug_file_lock:
            self._close_locked()

    @property
    def debug_events(self) -> list[dict[str, object]]:
        """Get the list of debug events (read-only)."""
        return self._debug_events.copy()


__all__ = ["DEBUG_ENV", "DEBUG_FILE_ENV", "DebugLogger"]
