"""
Navigation state machine for the directory browser.

The machine owns one BrowserState and advances it one event at a time. It
never touches the filesystem for listings itself: whenever the current
directory changes it hands back a ListingRequest (inside a Step) and waits for
the caller to feed the outcome in as ListingReady / ListingFailed. That keeps
slow directory reads off the input path. Ascend is honoured while a read is
in flight, and results for a directory that is no longer pending are
discarded.

States:
    Loading(directory) -> Browsing(browser) -> Selected(path) | Cancelled()
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Union

from copypick.core import viewport as vp
from copypick.core.errors import DirectoryReadError
from copypick.core.history import NavigationStack
from copypick.core.listing import DirectoryEntry, EntryLister, Listing
from copypick.core.selection import SelectionPolicy, normalize_extensions
from copypick.core.viewport import ViewportState


logger = logging.getLogger(__name__)


# -----------------------
# Requests / results
# -----------------------
@dataclass(frozen=True)
class ListingRequest:
    """A directory the caller must list and report back on."""

    directory: str
    show_hidden: bool = False


@dataclass
class Step:
    """Side effects of handling one event.

    Attributes:
        load: Listing the caller should start (in the background)
        rejected: Path the user tried to confirm but may not choose
        error: Listing failure surfaced to the caller
        discarded: The event was a stale listing result and was dropped
    """

    load: Optional[ListingRequest] = None
    rejected: Optional[str] = None
    error: Optional[DirectoryReadError] = None
    discarded: bool = False


# -----------------------
# Events
# -----------------------
@dataclass(frozen=True)
class ListingReady:
    listing: Listing


@dataclass(frozen=True)
class ListingFailed:
    directory: str
    error: DirectoryReadError


@dataclass(frozen=True)
class MoveUp:
    pass


@dataclass(frozen=True)
class MoveDown:
    pass


@dataclass(frozen=True)
class PageUp:
    pass


@dataclass(frozen=True)
class PageDown:
    pass


@dataclass(frozen=True)
class GoToTop:
    pass


@dataclass(frozen=True)
class GoToLast:
    pass


@dataclass(frozen=True)
class Ascend:
    pass


@dataclass(frozen=True)
class Activate:
    """Open the highlighted entry; `confirm` also asks to select it."""

    confirm: bool = False


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class Resize:
    height: int


Event = Union[
    ListingReady,
    ListingFailed,
    MoveUp,
    MoveDown,
    PageUp,
    PageDown,
    GoToTop,
    GoToLast,
    Ascend,
    Activate,
    Quit,
    Resize,
]

_MOVES = (MoveUp, MoveDown, PageUp, PageDown, GoToTop, GoToLast)


# -----------------------
# States
# -----------------------
@dataclass
class BrowserState:
    """Everything one browsing session knows. Mutated only by the machine."""

    current_directory: str
    display_path: str
    listing: Listing
    viewport: ViewportState = vp.EMPTY
    navigation_stack: NavigationStack = field(default_factory=NavigationStack)
    allowed_extensions: FrozenSet[str] = frozenset()
    allow_selecting_directories: bool = False
    allow_selecting_files: bool = True
    confirmed_selection: Optional[str] = None
    viewport_height: int = 10
    show_hidden: bool = False
    last_error: Optional[DirectoryReadError] = None
    session_id: Optional[Union[int, str]] = None

    @property
    def policy(self) -> SelectionPolicy:
        return SelectionPolicy(
            allowed_extensions=self.allowed_extensions,
            allow_files=self.allow_selecting_files,
            allow_directories=self.allow_selecting_directories,
        )

    @property
    def highlighted(self) -> Optional[DirectoryEntry]:
        if not len(self.listing):
            return None
        return self.listing[self.viewport.cursor]


@dataclass(frozen=True)
class Loading:
    directory: str


@dataclass(frozen=True)
class Browsing:
    browser: BrowserState


@dataclass(frozen=True)
class Selected:
    path: str


@dataclass(frozen=True)
class Cancelled:
    pass


State = Union[Loading, Browsing, Selected, Cancelled]


class _Phase(Enum):
    LOADING = "loading"
    BROWSING = "browsing"
    SELECTED = "selected"
    CANCELLED = "cancelled"


class NavigationStateMachine:
    """Drives listing, viewport, history and selection for one session.

    Usage:
        machine = NavigationStateMachine("/home/me", viewport_height=10)
        request = machine.start()
        ...list request.directory, then...
        machine.handle(ListingReady(listing))
        step = machine.handle(MoveDown())
    """

    def __init__(
        self,
        initial_directory: str,
        *,
        viewport_height: int = 10,
        show_hidden: bool = False,
        allowed_extensions: Optional[Iterable[str]] = None,
        allow_files: bool = True,
        allow_directories: bool = False,
        session_id: Optional[Union[int, str]] = None,
    ) -> None:
        directory = os.path.abspath(initial_directory)
        self.browser = BrowserState(
            current_directory=directory,
            display_path=directory,
            listing=Listing(directory),
            allowed_extensions=normalize_extensions(allowed_extensions),
            allow_selecting_directories=allow_directories,
            allow_selecting_files=allow_files,
            viewport_height=max(int(viewport_height), 1),
            show_hidden=show_hidden,
            session_id=session_id,
        )
        self._phase = _Phase.LOADING
        self._pending: Optional[str] = directory
        self._restore: Optional[ViewportState] = None

    # -----------------------
    # Introspection
    # -----------------------
    @property
    def state(self) -> State:
        if self._phase is _Phase.LOADING:
            return Loading(self._pending or self.browser.current_directory)
        if self._phase is _Phase.BROWSING:
            return Browsing(self.browser)
        if self._phase is _Phase.SELECTED:
            return Selected(self.browser.confirmed_selection or "")
        return Cancelled()

    @property
    def is_loading(self) -> bool:
        return self._phase is _Phase.LOADING

    @property
    def is_finished(self) -> bool:
        return self._phase in (_Phase.SELECTED, _Phase.CANCELLED)

    @property
    def pending_directory(self) -> Optional[str]:
        return self._pending

    def start(self) -> ListingRequest:
        """Request the listing for the initial directory."""
        return ListingRequest(self.browser.current_directory, self.browser.show_hidden)

    # -----------------------
    # Event handling
    # -----------------------
    def handle(self, event: Event) -> Step:
        """Advance the machine by one event and report any side effects."""
        if self.is_finished:
            return Step()

        if isinstance(event, Quit):
            self._phase = _Phase.CANCELLED
            self._pending = None
            return Step()
        if isinstance(event, Resize):
            self._resize(event.height)
            return Step()
        if isinstance(event, ListingReady):
            return self._on_listing_ready(event.listing)
        if isinstance(event, ListingFailed):
            return self._on_listing_failed(event.directory, event.error)
        if isinstance(event, Ascend):
            # Also allowed while loading; the superseded read's result is discarded.
            return self._ascend()

        if self._phase is not _Phase.BROWSING:
            logger.debug("Ignoring %s while loading %s", type(event).__name__, self._pending)
            return Step()

        if isinstance(event, _MOVES):
            self._move(event)
            return Step()
        if isinstance(event, Activate):
            return self._activate(event.confirm)
        return Step()

    def _on_listing_ready(self, listing: Listing) -> Step:
        if self._phase is not _Phase.LOADING or listing.directory != self._pending:
            logger.debug("Discarding stale listing for %s", listing.directory)
            return Step(discarded=True)

        b = self.browser
        b.listing = listing
        b.last_error = None
        if self._restore is not None:
            b.viewport = vp.restore(self._restore, len(listing), b.viewport_height)
        else:
            b.viewport = vp.reset_for_new_listing(len(listing), b.viewport_height)
        self._finish_loading()
        return Step()

    def _on_listing_failed(self, directory: str, error: DirectoryReadError) -> Step:
        if self._phase is not _Phase.LOADING or directory != self._pending:
            logger.debug("Discarding stale listing failure for %s", directory)
            return Step(discarded=True)

        b = self.browser
        b.listing = Listing(directory)
        b.viewport = vp.EMPTY
        b.last_error = error
        self._finish_loading()
        return Step(error=error)

    def _finish_loading(self) -> None:
        self._phase = _Phase.BROWSING
        self._pending = None
        self._restore = None

    def _enter_loading(self, directory: str, restore: Optional[ViewportState]) -> Step:
        b = self.browser
        b.current_directory = directory
        b.display_path = directory
        self._pending = directory
        self._restore = restore
        self._phase = _Phase.LOADING
        return Step(load=ListingRequest(directory, b.show_hidden))

    def _move(self, event: Event) -> None:
        b = self.browser
        n = len(b.listing)
        if n == 0:
            return
        h = b.viewport_height
        if isinstance(event, MoveDown):
            b.viewport = vp.move_by(b.viewport, 1, n, h)
        elif isinstance(event, MoveUp):
            b.viewport = vp.move_by(b.viewport, -1, n, h)
        elif isinstance(event, PageDown):
            b.viewport = vp.page_by(b.viewport, h, n, h)
        elif isinstance(event, PageUp):
            b.viewport = vp.page_by(b.viewport, -h, n, h)
        elif isinstance(event, GoToTop):
            b.viewport = vp.move_to_start(b.viewport, n, h)
        elif isinstance(event, GoToLast):
            b.viewport = vp.move_to_end(b.viewport, n, h)
        self._sync_display_path()

    def _sync_display_path(self) -> None:
        b = self.browser
        entry = b.highlighted
        if entry is None:
            return
        classification = b.policy.classify(entry, b.current_directory)
        if classification.is_directory:
            b.display_path = b.current_directory
        elif b.allow_selecting_files:
            b.display_path = os.path.join(b.current_directory, entry.name)

    def _ascend(self) -> Step:
        b = self.browser
        parent = os.path.dirname(b.current_directory)
        if not parent or parent == b.current_directory:
            return Step()
        restore = b.navigation_stack.pop(default=None)
        return self._enter_loading(parent, restore)

    def _activate(self, confirm: bool) -> Step:
        b = self.browser
        entry = b.highlighted
        if entry is None:
            return Step()

        policy = b.policy
        classification = policy.classify(entry, b.current_directory)
        path = os.path.join(b.current_directory, entry.name)

        if confirm and policy.accepts(entry, classification):
            b.confirmed_selection = path
            b.display_path = path
            self._phase = _Phase.SELECTED
            return Step()

        if classification.is_directory:
            b.navigation_stack.push(b.viewport)
            return self._enter_loading(path, None)

        if confirm:
            return Step(rejected=path)
        return Step()

    def _resize(self, height: int) -> None:
        b = self.browser
        b.viewport_height = max(int(height), 1)
        if self._phase is _Phase.BROWSING and len(b.listing):
            b.viewport = vp.resize(b.viewport, len(b.listing), b.viewport_height)


def fulfil(machine: NavigationStateMachine, request: ListingRequest, lister: EntryLister) -> Step:
    """
    Run a ListingRequest synchronously and feed the outcome back.

    The TUI does the same thing on a worker thread; this is for callers
    (scripts, tests) that are happy to block.
    """
    try:
        listing = lister.list(request.directory, request.show_hidden)
    except DirectoryReadError as e:
        return machine.handle(ListingFailed(request.directory, e))
    return machine.handle(ListingReady(listing))


__all__ = [
    "ListingRequest",
    "Step",
    "ListingReady",
    "ListingFailed",
    "MoveUp",
    "MoveDown",
    "PageUp",
    "PageDown",
    "GoToTop",
    "GoToLast",
    "Ascend",
    "Activate",
    "Quit",
    "Resize",
    "Event",
    "BrowserState",
    "Loading",
    "Browsing",
    "Selected",
    "Cancelled",
    "State",
    "NavigationStateMachine",
    "fulfil",
]
