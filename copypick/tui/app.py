from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional, Union

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding

from copypick.core.config import BrowserConfig
from copypick.core.errors import DirectoryReadError
from copypick.core.listing import EntryLister, FilesystemLister
from copypick.core.machine import (
    Event,
    ListingFailed,
    ListingReady,
    ListingRequest,
    NavigationStateMachine,
    Quit,
    Resize,
    Selected,
    Step,
)
from copypick.core.snapshot import build_snapshot
from copypick.tui.debug import DebugLogger
from copypick.tui.keys import event_for_key
from copypick.tui.models import (
    DEFAULT_VIEWPORT_HEIGHT,
    NOTICE_SECONDS,
    BrowseResult,
    WidgetIds,
    viewport_height_for,
)
from copypick.tui.widgets import EntryList, KeyHintFooter, PathBanner, PromptLine, StatusLine


logger = logging.getLogger(__name__)


class CopyPickApp(App):
    """
    Full-screen directory browser.

    Owns one NavigationStateMachine. Keys become machine events, listings run
    on a background thread and come back via call_from_thread, and every
    widget is re-rendered from a fresh snapshot after each event. `run()`
    returns a BrowseResult.
    """

    CSS_PATH = "theme.tcss"
    TITLE = "copypick"

    BINDINGS = [
        # priority=True so quitting works regardless of focus or loading state.
        Binding("q", "quit", "Quit", priority=True),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        start_dir: Union[str, Path],
        *,
        config: Optional[BrowserConfig] = None,
        lister: Optional[EntryLister] = None,
    ) -> None:
        super().__init__()
        self._browser_config = config or BrowserConfig()
        # None: the list follows the terminal height.
        self._fixed_height: Optional[int] = self._browser_config.height
        self.lister: EntryLister = lister or FilesystemLister()
        self.machine = NavigationStateMachine(
            str(start_dir),
            viewport_height=self._fixed_height or DEFAULT_VIEWPORT_HEIGHT,
            show_hidden=self._browser_config.show_hidden,
            allowed_extensions=self._browser_config.allowed_extensions,
            allow_files=self._browser_config.allow_files,
            allow_directories=self._browser_config.allow_directories,
        )
        self._notice: Optional[str] = None
        self._notice_timer = None
        self._view_ready = False
        self._debug_logger = DebugLogger(self)

    def _dbg(self, *, event: str, data: Optional[dict[str, object]] = None) -> None:
        """Debug event sink (delegates to DebugLogger)."""
        self._debug_logger.log(event=event, data=data)

    # -----------------------
    # Compose
    # -----------------------
    def compose(self) -> ComposeResult:
        yield PromptLine("Pick a file:", id=WidgetIds.PROMPT)
        yield PathBanner("", id=WidgetIds.PATH_BANNER)
        yield EntryList(cursor=self._browser_config.cursor, id=WidgetIds.ENTRY_LIST)
        yield StatusLine("", id=WidgetIds.STATUS, classes="muted")
        yield KeyHintFooter(id=WidgetIds.FOOTER, classes="footer")

    def on_mount(self) -> None:
        self._view_ready = True
        if self._fixed_height is None:
            self.machine.handle(Resize(viewport_height_for(self.size.height)))
        request = self.machine.start()
        self._dbg(event="start", data={"directory": request.directory})
        self._start_listing(request)
        self._refresh_view()

    def on_unmount(self) -> None:
        self._debug_logger.close_debug_file()

    # -----------------------
    # Listing worker
    # -----------------------
    def _start_listing(self, request: ListingRequest) -> None:
        t = threading.Thread(target=self._listing_worker, args=(request,), daemon=True)
        t.start()

    def _listing_worker(self, request: ListingRequest) -> None:
        """Runs off the UI thread; results are delivered back on it."""
        try:
            listing = self.lister.list(request.directory, request.show_hidden)
            event: Event = ListingReady(listing)
        except DirectoryReadError as e:
            event = ListingFailed(request.directory, e)
        try:
            self.call_from_thread(self._send, event)
        except RuntimeError:
            logger.debug("App stopped before listing of %s was delivered", request.directory)

    # -----------------------
    # Events
    # -----------------------
    def _send(self, event: Event) -> Step:
        """Feed one event to the machine and apply its side effects."""
        step = self.machine.handle(event)
        self._dbg(
            event="machine",
            data={
                "event": type(event).__name__,
                "load": step.load.directory if step.load else None,
                "rejected": step.rejected,
                "error": str(step.error) if step.error else None,
                "discarded": step.discarded,
            },
        )

        if step.load is not None:
            self._start_listing(step.load)
        if step.rejected is not None:
            self._show_notice(f"{step.rejected} is not valid.")

        if self.machine.is_finished:
            self.exit(self._browse_result())
        else:
            self._refresh_view()
        return step

    def _browse_result(self) -> BrowseResult:
        state = self.machine.state
        if isinstance(state, Selected):
            return BrowseResult(path=state.path, cancelled=False)
        return BrowseResult(path=None, cancelled=True)

    def on_key(self, event: events.Key) -> None:
        machine_event = event_for_key(str(event.key or ""), event.character)
        self._dbg(event="key", data={"key": event.key, "character": event.character})
        if machine_event is None:
            return
        event.stop()
        event.prevent_default()
        self._send(machine_event)

    def on_resize(self, event: events.Resize) -> None:
        if self._fixed_height is not None:
            return
        self.machine.handle(Resize(viewport_height_for(event.size.height)))
        if self._view_ready:
            self._refresh_view()

    async def action_quit(self) -> None:
        """Cancel the session and exit."""
        self._debug_logger.close_debug_file()
        self._send(Quit())

    # -----------------------
    # Notices
    # -----------------------
    def _show_notice(self, message: str, timeout: Optional[float] = NOTICE_SECONDS) -> None:
        if self._notice_timer is not None:
            self._notice_timer.stop()
            self._notice_timer = None
        self._notice = message
        if timeout is not None:
            self._notice_timer = self.set_timer(timeout, self._clear_notice)

    def _clear_notice(self) -> None:
        self._notice = None
        self._notice_timer = None
        if self.machine.is_finished:
            return
        self._refresh_view()

    @property
    def notice(self) -> Optional[str]:
        return self._notice

    # -----------------------
    # Rendering
    # -----------------------
    def _refresh_view(self) -> None:
        snap = build_snapshot(self.machine)
        self.query_one(f"#{WidgetIds.PROMPT}", PromptLine).set_selected(snap.selected_path)
        self.query_one(f"#{WidgetIds.PATH_BANNER}", PathBanner).set_path(snap.display_path)
        self.query_one(f"#{WidgetIds.ENTRY_LIST}", EntryList).set_snapshot(snap)

        status = self.query_one(f"#{WidgetIds.STATUS}", StatusLine)
        if self._notice:
            status.set_message(self._notice, "bold red")
        elif snap.error:
            status.set_message(snap.error, "bold red")
        elif snap.total:
            status.set_message(f"{snap.total} entries", "dim")
        else:
            status.set_message("")


__all__ = ["CopyPickApp", "BrowseResult"]
