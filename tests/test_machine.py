"""Tests for the navigation state machine."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Tuple

import pytest

from copypick.core.errors import DirectoryReadError
from copypick.core.listing import DirectoryEntry, FilesystemLister, Listing
from copypick.core.machine import (
    Activate,
    Ascend,
    Browsing,
    Cancelled,
    GoToLast,
    GoToTop,
    ListingFailed,
    ListingReady,
    Loading,
    MoveDown,
    MoveUp,
    NavigationStateMachine,
    PageDown,
    Quit,
    Resize,
    Selected,
    fulfil,
)
from copypick.core.viewport import ViewportState


ROOT = os.path.abspath(os.sep)


def _p(*parts: str) -> str:
    return os.path.join(ROOT, *parts)


class FakeLister:
    """In-memory lister: {directory: [(name, is_directory), ...]}."""

    def __init__(self, tree: Dict[str, List[Tuple[str, bool]]]) -> None:
        self.tree = tree
        self.calls: List[str] = []

    def list(self, directory: str, show_hidden: bool = False) -> Listing:
        self.calls.append(directory)
        if directory not in self.tree:
            raise DirectoryReadError(directory, "No such file or directory")
        entries = tuple(DirectoryEntry(name, is_dir) for name, is_dir in self.tree[directory])
        return Listing(directory, entries)


def _started(machine: NavigationStateMachine, lister: FakeLister) -> NavigationStateMachine:
    fulfil(machine, machine.start(), lister)
    return machine


def _handle(machine: NavigationStateMachine, lister: FakeLister, event):
    """Handle one event and run any listing it requests."""
    step = machine.handle(event)
    if step.load is not None:
        return fulfil(machine, step.load, lister)
    return step


def _numbers(n: int) -> List[Tuple[str, bool]]:
    return [(f"f{i:02d}.txt", False) for i in range(n)]


# -----------------------
# Lifecycle
# -----------------------
def test_starts_loading_then_browses() -> None:
    lister = FakeLister({_p("home"): [("a", True), ("b.txt", False)]})
    m = NavigationStateMachine(_p("home"))
    assert isinstance(m.state, Loading)
    assert m.state.directory == _p("home")
    assert m.is_loading

    request = m.start()
    assert request.directory == _p("home")
    fulfil(m, request, lister)

    assert isinstance(m.state, Browsing)
    b = m.state.browser
    assert b.listing.names() == ["a", "b.txt"]
    assert b.viewport == ViewportState(0, 0, 1)
    assert b.display_path == _p("home")


def test_navigation_ignored_while_loading() -> None:
    m = NavigationStateMachine(_p("home"))
    step = m.handle(MoveDown())
    assert isinstance(m.state, Loading)
    assert step.load is None


def test_quit_cancels_from_any_non_terminal_state() -> None:
    m = NavigationStateMachine(_p("home"))
    m.handle(Quit())
    assert isinstance(m.state, Cancelled)
    assert m.is_finished

    # Terminal: further events do nothing.
    step = m.handle(MoveDown())
    assert isinstance(m.state, Cancelled)
    assert step.load is None


def test_session_id_is_passed_through() -> None:
    m = NavigationStateMachine(_p("home"), session_id="abc")
    assert m.browser.session_id == "abc"


# -----------------------
# Movement
# -----------------------
def test_move_updates_display_path_for_files_and_directories() -> None:
    lister = FakeLister({_p("home"): [("docs", True), ("readme.md", False)]})
    m = _started(NavigationStateMachine(_p("home")), lister)

    m.handle(MoveDown())
    assert m.browser.display_path == _p("home", "readme.md")
    m.handle(MoveUp())
    assert m.browser.display_path == _p("home")


def test_display_path_stays_on_directory_when_files_not_chooseable() -> None:
    lister = FakeLister({_p("home"): [("docs", True), ("readme.md", False)]})
    m = _started(NavigationStateMachine(_p("home"), allow_files=False, allow_directories=True), lister)
    m.handle(MoveDown())
    assert m.browser.display_path == _p("home")


def test_page_and_goto_events() -> None:
    lister = FakeLister({_p("big"): _numbers(12)})
    m = _started(NavigationStateMachine(_p("big"), viewport_height=5), lister)

    m.handle(PageDown())
    assert m.browser.viewport == ViewportState(5, 5, 9)
    m.handle(GoToLast())
    assert m.browser.viewport == ViewportState(11, 7, 11)
    assert m.browser.display_path == _p("big", "f11.txt")
    m.handle(GoToTop())
    assert m.browser.viewport == ViewportState(0, 0, 4)


def test_movement_on_empty_listing_is_a_no_op() -> None:
    lister = FakeLister({_p("empty"): []})
    m = _started(NavigationStateMachine(_p("empty")), lister)
    for event in (MoveDown(), MoveUp(), PageDown(), GoToLast(), Activate(confirm=True)):
        step = m.handle(event)
        assert step.load is None
        assert step.rejected is None
    assert isinstance(m.state, Browsing)
    assert m.browser.highlighted is None


def test_resize_changes_window() -> None:
    lister = FakeLister({_p("big"): _numbers(12)})
    m = _started(NavigationStateMachine(_p("big"), viewport_height=5), lister)
    m.handle(Resize(3))
    assert m.browser.viewport_height == 3
    assert m.browser.viewport == ViewportState(0, 0, 2)


# -----------------------
# Descend / ascend
# -----------------------
def test_descend_then_ascend_restores_viewport() -> None:
    lister = FakeLister(
        {
            _p("top"): [("d0", True), ("d1", True), ("d2", True), ("d3", True)],
            _p("top", "d2"): [("x", True)],
            _p("top", "d2", "x"): [("leaf.txt", False)],
        }
    )
    m = _started(NavigationStateMachine(_p("top"), viewport_height=2), lister)
    m.handle(MoveDown())
    m.handle(MoveDown())
    before = m.browser.viewport
    assert before == ViewportState(2, 1, 2)

    _handle(m, lister, Activate())
    assert m.browser.current_directory == _p("top", "d2")
    _handle(m, lister, Activate())
    assert m.browser.current_directory == _p("top", "d2", "x")
    assert len(m.browser.navigation_stack) == 2

    _handle(m, lister, Ascend())
    _handle(m, lister, Ascend())
    assert m.browser.current_directory == _p("top")
    assert m.browser.viewport == before
    assert len(m.browser.navigation_stack) == 0


def test_ascend_with_empty_stack_goes_to_parent_with_fresh_viewport() -> None:
    lister = FakeLister(
        {
            _p("top"): [("a", True), ("b", True), ("sub", True)],
            _p("top", "sub"): [("f.txt", False)],
        }
    )
    m = _started(NavigationStateMachine(_p("top", "sub")), lister)
    step = _handle(m, lister, Ascend())
    assert step.error is None
    assert m.browser.current_directory == _p("top")
    assert m.browser.viewport == ViewportState(0, 0, 2)


def test_ascend_at_filesystem_root_is_a_no_op() -> None:
    lister = FakeLister({ROOT: [("etc", True)]})
    m = _started(NavigationStateMachine(ROOT), lister)
    step = m.handle(Ascend())
    assert step.load is None
    assert isinstance(m.state, Browsing)
    assert m.browser.current_directory == ROOT


def test_activate_without_confirm_on_file_is_a_no_op() -> None:
    lister = FakeLister({_p("home"): [("a.txt", False)]})
    m = _started(NavigationStateMachine(_p("home")), lister)
    step = m.handle(Activate())
    assert isinstance(m.state, Browsing)
    assert step.rejected is None
    assert m.browser.confirmed_selection is None


# -----------------------
# Selection
# -----------------------
def test_end_to_end_select_markdown_file() -> None:
    lister = FakeLister({_p("proj"): [("docs", True), ("readme.md", False), ("readme.txt", False)]})
    m = _started(NavigationStateMachine(_p("proj"), viewport_height=2, allowed_extensions=[".md"]), lister)

    m.handle(MoveDown())
    assert m.browser.viewport.cursor == 1
    assert m.browser.display_path == _p("proj", "readme.md")

    m.handle(Activate(confirm=True))
    assert m.state == Selected(_p("proj", "readme.md"))
    assert m.browser.confirmed_selection == _p("proj", "readme.md")


def test_end_to_end_disallowed_extension_stays_browsing() -> None:
    lister = FakeLister({_p("proj"): [("docs", True), ("readme.md", False), ("readme.txt", False)]})
    m = _started(NavigationStateMachine(_p("proj"), viewport_height=2, allowed_extensions=[".md"]), lister)

    m.handle(MoveDown())
    m.handle(MoveDown())
    assert m.browser.viewport == ViewportState(2, 1, 2)

    step = m.handle(Activate(confirm=True))
    assert isinstance(m.state, Browsing)
    assert step.rejected == _p("proj", "readme.txt")
    assert m.browser.confirmed_selection is None


def test_confirm_on_directory_descends_when_directories_not_chooseable() -> None:
    lister = FakeLister({_p("proj"): [("docs", True)], _p("proj", "docs"): []})
    m = _started(NavigationStateMachine(_p("proj")), lister)
    _handle(m, lister, Activate(confirm=True))
    assert isinstance(m.state, Browsing)
    assert m.browser.current_directory == _p("proj", "docs")


def test_confirm_on_directory_selects_when_directories_chooseable() -> None:
    lister = FakeLister({_p("proj"): [("docs", True)]})
    m = _started(NavigationStateMachine(_p("proj"), allow_directories=True), lister)

    step = m.handle(Activate(confirm=True))
    assert step.load is None
    assert m.state == Selected(_p("proj", "docs"))

    # Open without confirm still descends.
    m2 = _started(NavigationStateMachine(_p("proj"), allow_directories=True), lister)
    step = m2.handle(Activate())
    assert step.load is not None
    assert step.load.directory == _p("proj", "docs")


def test_confirm_on_file_when_files_not_chooseable_is_rejected() -> None:
    lister = FakeLister({_p("proj"): [("a.md", False)]})
    m = _started(NavigationStateMachine(_p("proj"), allow_files=False, allow_directories=True), lister)
    step = m.handle(Activate(confirm=True))
    assert step.rejected == _p("proj", "a.md")
    assert isinstance(m.state, Browsing)


# -----------------------
# Listing results
# -----------------------
def test_ascend_while_loading_discards_late_listing() -> None:
    lister = FakeLister(
        {
            _p("r"): [("a", True), ("slow", True)],
            _p("r", "slow"): [("deep.txt", False)],
        }
    )
    m = _started(NavigationStateMachine(_p("r"), viewport_height=1), lister)
    m.handle(MoveDown())
    before = m.browser.viewport
    assert before == ViewportState(1, 1, 1)

    request_slow = m.handle(Activate()).load
    assert request_slow.directory == _p("r", "slow")
    assert len(m.browser.navigation_stack) == 1

    # Back out before the read of "slow" completes.
    step = m.handle(Ascend())
    assert step.load is not None
    assert step.load.directory == _p("r")
    assert m.pending_directory == _p("r")
    assert isinstance(m.state, Loading)
    assert len(m.browser.navigation_stack) == 0

    late = m.handle(ListingReady(lister.list(request_slow.directory)))
    assert late.discarded is True
    assert isinstance(m.state, Loading)

    fulfil(m, step.load, lister)
    assert isinstance(m.state, Browsing)
    assert m.browser.current_directory == _p("r")
    assert m.browser.listing.names() == ["a", "slow"]
    assert m.browser.viewport == before
    assert len(m.browser.navigation_stack) == 0


def test_redelivered_listing_is_discarded() -> None:
    tree = {
        _p("r"): [("a", True), ("b", True)],
        _p("r", "a"): [("b", True), ("in_a.txt", False)],
        _p("r", "a", "b"): [("in_b.txt", False)],
    }
    lister = FakeLister(tree)
    m = _started(NavigationStateMachine(_p("r")), lister)

    step = m.handle(Activate())
    request_a = step.load
    listing_a = lister.list(request_a.directory)
    m.handle(ListingReady(listing_a))

    step = m.handle(Activate())
    assert step.load.directory == _p("r", "a", "b")

    # A's result delivered again while B is pending.
    late = m.handle(ListingReady(listing_a))
    assert late.discarded is True
    assert isinstance(m.state, Loading)
    assert m.state.directory == _p("r", "a", "b")

    fulfil(m, step.load, lister)
    assert m.browser.listing.names() == ["in_b.txt"]

    # And once more after B is shown.
    late = m.handle(ListingReady(listing_a))
    assert late.discarded is True
    assert m.browser.listing.names() == ["in_b.txt"]
    assert m.browser.current_directory == _p("r", "a", "b")


def test_failed_listing_browses_empty_with_error() -> None:
    lister = FakeLister({_p("r"): [("locked", True)]})
    m = _started(NavigationStateMachine(_p("r")), lister)

    step = _handle(m, lister, Activate())
    assert step.error is not None
    assert step.error.path == _p("r", "locked")
    assert isinstance(m.state, Browsing)
    assert len(m.browser.listing) == 0
    assert m.browser.last_error is step.error

    # Ascending back out clears the error.
    _handle(m, lister, Ascend())
    assert m.browser.current_directory == _p("r")
    assert m.browser.last_error is None


def test_stale_failure_is_discarded() -> None:
    lister = FakeLister({_p("r"): []})
    m = _started(NavigationStateMachine(_p("r")), lister)
    step = m.handle(ListingFailed(_p("elsewhere"), DirectoryReadError(_p("elsewhere"), "gone")))
    assert step.discarded is True
    assert m.browser.last_error is None


def test_fulfil_against_real_filesystem(tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    (tmp_path / "file.txt").write_text("x", encoding="utf-8")
    m = NavigationStateMachine(str(tmp_path))
    fulfil(m, m.start(), FilesystemLister())
    assert m.browser.listing.names() == ["sub", "file.txt"]


def _symlink(target: Path, link: Path, is_dir: bool = False) -> None:
    try:
        os.symlink(target, link, target_is_directory=is_dir)
    except (OSError, NotImplementedError) as e:
        pytest.skip(f"symlinks unavailable: {e}")


def test_symlink_to_directory_descends_and_ascends(tmp_path: Path) -> None:
    start = tmp_path / "start"
    for name in ("a_dir", "b_dir", "c_dir"):
        (start / name).mkdir(parents=True)
    target = tmp_path / "target"
    target.mkdir()
    (target / "inner.txt").write_text("x", encoding="utf-8")
    _symlink(target, start / "link", is_dir=True)

    lister = FilesystemLister()
    m = NavigationStateMachine(str(start), viewport_height=2)
    fulfil(m, m.start(), lister)
    assert m.browser.listing.names() == ["a_dir", "b_dir", "c_dir", "link"]
    for _ in range(3):
        m.handle(MoveDown())
    before = m.browser.viewport
    assert before == ViewportState(3, 2, 3)

    step = m.handle(Activate())
    assert step.load is not None
    fulfil(m, step.load, lister)
    assert m.browser.current_directory == os.path.join(str(start), "link")
    assert m.browser.listing.names() == ["inner.txt"]

    fulfil(m, m.handle(Ascend()).load, lister)
    assert m.browser.current_directory == str(start)
    assert m.browser.viewport == before
    assert len(m.browser.navigation_stack) == 0


def test_dangling_symlink_is_selected_as_a_file(tmp_path: Path) -> None:
    _symlink(tmp_path / "gone.txt", tmp_path / "broken.txt")

    m = NavigationStateMachine(str(tmp_path))
    fulfil(m, m.start(), FilesystemLister())
    assert m.browser.listing.names() == ["broken.txt"]

    # Opening does not descend.
    assert m.handle(Activate()).load is None

    step = m.handle(Activate(confirm=True))
    assert step.load is None
    assert m.state == Selected(os.path.join(str(tmp_path), "broken.txt"))


def test_dangling_symlink_is_rejected_by_extension_filter(tmp_path: Path) -> None:
    _symlink(tmp_path / "gone.txt", tmp_path / "broken.txt")

    m = NavigationStateMachine(str(tmp_path), allowed_extensions=[".md"])
    fulfil(m, m.start(), FilesystemLister())

    step = m.handle(Activate(confirm=True))
    assert step.load is None
    assert step.rejected == os.path.join(str(tmp_path), "broken.txt")
    assert isinstance(m.state, Browsing)


@pytest.mark.parametrize("height", [0, -3])
def test_viewport_height_is_at_least_one(height: int) -> None:
    m = NavigationStateMachine(_p("x"), viewport_height=height)
    assert m.browser.viewport_height == 1
