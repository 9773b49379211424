"""Picker state machine — immutable state plus pure transition functions.

Every transition takes the current ``PickerState`` and returns a new state
together with the side effects the caller must perform. Fetch effects
carry a request token drawn from ``PickerState.generation``; a response is
applied only while its token is still the latest one issued, so results
for an abandoned folder or an outdated query never overwrite newer state.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum

from drive_picker.drive.models import DriveEntry, dedupe_entries


class Mode(str, Enum):
    BROWSE = "browse"
    SEARCH = "search"


class Status(str, Enum):
    CLOSED = "closed"
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


@dataclass(frozen=True)
class BreadcrumbEntry:
    """One folder on the path from the drive root to the current folder."""

    id: str
    name: str


@dataclass(frozen=True)
class PickerState:
    is_open: bool = False
    mode: Mode = Mode.BROWSE
    breadcrumb: tuple[BreadcrumbEntry, ...] = ()
    files: tuple[DriveEntry, ...] = ()
    query: str = ""
    loading: bool = False
    error: str = ""
    uploading_id: str | None = None
    generation: int = 0

    @property
    def status(self) -> Status:
        if not self.is_open:
            return Status.CLOSED
        if self.loading:
            return Status.LOADING
        if self.error:
            return Status.ERROR
        return Status.IDLE

    @property
    def current_folder_id(self) -> str | None:
        """ID of the folder being browsed, or None for the root."""
        return self.breadcrumb[-1].id if self.breadcrumb else None

    @property
    def folders(self) -> list[DriveEntry]:
        return [entry for entry in self.files if entry.is_folder]

    @property
    def images(self) -> list[DriveEntry]:
        return [entry for entry in self.files if not entry.is_folder]

    def is_selectable(self, entry: DriveEntry) -> bool:
        """Whether an image row accepts a click (listing resolved, no upload in progress)."""
        return (
            self.is_open
            and not self.loading
            and self.uploading_id is None
            and not entry.is_folder
        )


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FetchListing:
    token: int
    folder_id: str | None


@dataclass(frozen=True)
class FetchSearch:
    token: int
    query: str


@dataclass(frozen=True)
class ScheduleSearch:
    """Restart the quiet-period timer for ``query``."""

    query: str


@dataclass(frozen=True)
class CancelSearch:
    """Drop any pending quiet-period timer."""


@dataclass(frozen=True)
class StartUpload:
    file_id: str


@dataclass(frozen=True)
class DeliverSelection:
    """Hand the uploaded image URL to the caller and close the picker."""

    url: str


Effect = FetchListing | FetchSearch | ScheduleSearch | CancelSearch | StartUpload | DeliverSelection
Transition = tuple[PickerState, tuple[Effect, ...]]


def _unchanged(state: PickerState) -> Transition:
    return state, ()


def _fetch_current_folder(state: PickerState) -> Transition:
    token = state.generation + 1
    new_state = replace(state, generation=token, loading=True, error="")
    return new_state, (FetchListing(token=token, folder_id=state.current_folder_id),)


# ---------------------------------------------------------------------------
# Open / close / mode
# ---------------------------------------------------------------------------


def open_picker(state: PickerState) -> Transition:
    """Open in browse mode at the root."""
    if state.is_open:
        return _unchanged(state)
    return _fetch_current_folder(PickerState(is_open=True, generation=state.generation))


def close_picker(state: PickerState) -> Transition:
    """Discard all transient state; outstanding responses become stale."""
    if not state.is_open:
        return _unchanged(state)
    return PickerState(generation=state.generation + 1), (CancelSearch(),)


def switch_mode(state: PickerState, mode: Mode) -> Transition:
    """Switch between browse and search.

    Entering browse re-lists the current folder. Entering search clears
    results, errors and query text and waits for input.
    """
    if not state.is_open or state.mode == mode:
        return _unchanged(state)
    cleared = replace(state, mode=mode, files=(), error="", query="", loading=False)
    if mode == Mode.BROWSE:
        new_state, effects = _fetch_current_folder(cleared)
        return new_state, (CancelSearch(), *effects)
    return replace(cleared, generation=state.generation + 1), ()


# ---------------------------------------------------------------------------
# Search input
# ---------------------------------------------------------------------------


def type_query(state: PickerState, text: str) -> Transition:
    """Record search input and restart the quiet period.

    Blank input never fetches: results are cleared immediately and any
    in-flight search is invalidated.
    """
    if not state.is_open or state.mode != Mode.SEARCH:
        return _unchanged(state)
    if not text.strip():
        cleared = replace(
            state,
            query=text,
            files=(),
            loading=False,
            error="",
            generation=state.generation + 1,
        )
        return cleared, (CancelSearch(),)
    return replace(state, query=text), (ScheduleSearch(query=text),)


def run_search(state: PickerState, text: str) -> Transition:
    """Issue the search once the quiet period has elapsed for ``text``."""
    if not state.is_open or state.mode != Mode.SEARCH or text != state.query:
        return _unchanged(state)
    if not text.strip():
        return _unchanged(state)
    token = state.generation + 1
    new_state = replace(state, generation=token, loading=True, error="")
    return new_state, (FetchSearch(token=token, query=text),)


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


def enter_folder(state: PickerState, entry: DriveEntry) -> Transition:
    """Descend into a folder row of the current listing.

    Rows are inert while a listing is loading, so only children of the
    folder actually on screen can be appended to the breadcrumb.
    """
    if not state.is_open or state.loading or state.mode != Mode.BROWSE or not entry.is_folder:
        return _unchanged(state)
    if entry not in state.files:
        return _unchanged(state)
    crumb = BreadcrumbEntry(id=entry.id, name=entry.name)
    return _fetch_current_folder(replace(state, breadcrumb=(*state.breadcrumb, crumb)))


def navigate_to(state: PickerState, index: int) -> Transition:
    """Truncate the breadcrumb to ``index`` entries (0 is the root) and re-list.

    Raises:
        IndexError: If ``index`` is outside ``0..len(breadcrumb)``.
    """
    if not state.is_open or state.mode != Mode.BROWSE:
        return _unchanged(state)
    if index < 0 or index > len(state.breadcrumb):
        raise IndexError(f"breadcrumb index {index} out of range")
    return _fetch_current_folder(replace(state, breadcrumb=state.breadcrumb[:index]))


# ---------------------------------------------------------------------------
# Fetch responses
# ---------------------------------------------------------------------------


def apply_results(state: PickerState, token: int, files: Iterable[DriveEntry]) -> Transition:
    """Show a listing or search response unless a newer request superseded it."""
    if not state.is_open or token != state.generation:
        return _unchanged(state)
    return replace(state, files=tuple(dedupe_entries(files)), loading=False, error=""), ()


def apply_failure(state: PickerState, token: int, message: str) -> Transition:
    if not state.is_open or token != state.generation:
        return _unchanged(state)
    return replace(state, loading=False, error=message), ()


def dismiss_error(state: PickerState) -> Transition:
    if not state.error:
        return _unchanged(state)
    return replace(state, error=""), ()


# ---------------------------------------------------------------------------
# Selection and upload
# ---------------------------------------------------------------------------


def select_image(state: PickerState, entry: DriveEntry) -> Transition:
    """Start copying an image; inert while loading or while another upload is in progress."""
    if not state.is_selectable(entry) or entry not in state.files:
        return _unchanged(state)
    return replace(state, uploading_id=entry.id, error=""), (StartUpload(file_id=entry.id),)


def upload_succeeded(state: PickerState, file_id: str, url: str) -> Transition:
    if not state.is_open or state.uploading_id != file_id:
        return _unchanged(state)
    return PickerState(generation=state.generation + 1), (CancelSearch(), DeliverSelection(url=url))


def upload_failed(state: PickerState, file_id: str, message: str) -> Transition:
    if not state.is_open or state.uploading_id != file_id:
        return _unchanged(state)
    return replace(state, uploading_id=None, error=message), ()
