"""Drive picker controller — runs the state machine against the picker API."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

from drive_picker.drive.models import DriveEntry
from drive_picker.picker import state as sm
from drive_picker.picker.api_client import PickerApiError
from drive_picker.picker.debounce import SEARCH_DEBOUNCE_SECONDS, Debouncer

logger = logging.getLogger(__name__)


class PickerApi(Protocol):
    """The picker endpoints, as called by PickerApiClient.

    Implementations report every failure as PickerApiError.
    """

    def list_files(self, folder_id: str | None = None) -> list[DriveEntry]: ...

    def search_files(self, query: str) -> list[DriveEntry]: ...

    def upload(self, file_id: str, property_id: str) -> str: ...


class DrivePicker:
    """Modal image picker for a single property.

    User events are fed in through the public methods; each one applies a
    transition from ``drive_picker.picker.state`` and then performs the
    resulting effects. Fetches run on the calling thread (or the debounce
    timer's thread for searches) outside the state lock, and their results
    are applied through the same token-checked transitions, so a slow
    response can never overwrite newer state.
    """

    def __init__(
        self,
        api: PickerApi,
        property_id: str,
        on_select: Callable[[str], None],
        on_close: Callable[[], None] | None = None,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
        timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        """Initialise the picker in the closed state.

        Args:
            api: Client for the list, search and upload endpoints.
            property_id: Property that selected images are stored under.
            on_select: Receives the public URL of the selected image.
            on_close: Called whenever the picker closes.
            debounce_seconds: Quiet period before a search is issued.
            timer_factory: ``threading.Timer``-compatible constructor for the debounce timer.
        """
        self._api = api
        self._property_id = property_id
        self._on_select = on_select
        self._on_close = on_close
        self._state = sm.PickerState()
        self._lock = threading.RLock()
        self._debouncer = Debouncer(debounce_seconds, self._search_elapsed, timer_factory)

    @property
    def state(self) -> sm.PickerState:
        return self._state

    @property
    def folders(self) -> list[DriveEntry]:
        return self._state.folders

    @property
    def images(self) -> list[DriveEntry]:
        return self._state.images

    # ----------------------------
    # User events
    # ----------------------------
    def open(self) -> None:
        self._dispatch(sm.open_picker)

    def close(self) -> None:
        was_open = self._state.is_open
        self._dispatch(sm.close_picker)
        if was_open and self._on_close is not None:
            self._on_close()

    def switch_mode(self, mode: sm.Mode) -> None:
        self._dispatch(sm.switch_mode, mode)

    def type_query(self, text: str) -> None:
        self._dispatch(sm.type_query, text)

    def enter_folder(self, entry: DriveEntry) -> None:
        self._dispatch(sm.enter_folder, entry)

    def navigate_to(self, index: int) -> None:
        self._dispatch(sm.navigate_to, index)

    def select_image(self, entry: DriveEntry) -> None:
        self._dispatch(sm.select_image, entry)

    def dismiss_error(self) -> None:
        self._dispatch(sm.dismiss_error)

    # ----------------------------
    # Internals
    # ----------------------------
    def _search_elapsed(self, text: str) -> None:
        self._dispatch(sm.run_search, text)

    def _dispatch(self, transition: Callable[..., sm.Transition], *args: Any) -> None:
        with self._lock:
            self._state, effects = transition(self._state, *args)
        for effect in effects:
            self._perform(effect)

    def _perform(self, effect: sm.Effect) -> None:
        if isinstance(effect, sm.ScheduleSearch):
            self._debouncer.trigger(effect.query)
        elif isinstance(effect, sm.CancelSearch):
            self._debouncer.cancel()
        elif isinstance(effect, sm.FetchListing):
            self._fetch(effect.token, lambda: self._api.list_files(effect.folder_id))
        elif isinstance(effect, sm.FetchSearch):
            self._fetch(effect.token, lambda: self._api.search_files(effect.query))
        elif isinstance(effect, sm.StartUpload):
            self._upload(effect.file_id)
        elif isinstance(effect, sm.DeliverSelection):
            logger.info("[drive_picker] image selected; property_id:%s", self._property_id)
            self._on_select(effect.url)
            if self._on_close is not None:
                self._on_close()

    def _fetch(self, token: int, call: Callable[[], list[DriveEntry]]) -> None:
        try:
            files = call()
        except PickerApiError as exc:
            logger.warning("[drive_picker] fetch failed; token:%d;error:%s", token, exc.message)
            self._dispatch(sm.apply_failure, token, exc.message)
            return
        self._dispatch(sm.apply_results, token, files)

    def _upload(self, file_id: str) -> None:
        try:
            url = self._api.upload(file_id, self._property_id)
        except PickerApiError as exc:
            logger.warning("[drive_picker] upload failed; file_id:%s;error:%s", file_id, exc.message)
            self._dispatch(sm.upload_failed, file_id, exc.message)
            return
        self._dispatch(sm.upload_succeeded, file_id, url)
