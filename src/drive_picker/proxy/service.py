"""Drive picker service — listing, search and upload over injected collaborators."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from drive_picker.drive.client import drive_client_from_config
from drive_picker.drive.models import (
    ENTRY_FIELDS,
    FIELD_MIME_TYPE,
    FIELD_NAME,
    DriveEntry,
    dedupe_entries,
)
from drive_picker.proxy.errors import MissingParameterError, UpstreamError
from drive_picker.proxy.queries import (
    LISTING_ORDER_BY,
    SEARCH_ORDER_BY,
    listing_query,
    search_query,
)
from drive_picker.storage.blob_store import blob_image_store_from_config

if TYPE_CHECKING:
    from drive_picker.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "image.jpg"
DEFAULT_MIME_TYPE = "image/jpeg"


class DriveReader(Protocol):
    """Read access to the shared drive, as provided by DriveClient."""

    def list_files(
        self, query: str, order_by: str, page_size: int, fields: str
    ) -> list[dict[str, Any]]: ...

    def get_metadata(self, file_id: str, fields: str = ...) -> dict[str, Any]: ...

    def download(self, file_id: str) -> bytes: ...


class ImageStore(Protocol):
    """Write access to public object storage, as provided by BlobImageStore."""

    def put(self, path: str, content: bytes, content_type: str) -> None: ...

    def public_url(self, path: str) -> str: ...


@dataclass(frozen=True)
class UploadResult:
    """Public location of an image copied into storage."""

    url: str
    path: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url}


class MonotonicMillis:
    """Wall-clock milliseconds, bumped so that successive values strictly increase."""

    def __init__(self, time_fn: Callable[[], float] = time.time) -> None:
        self._time_fn = time_fn
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            now = int(self._time_fn() * 1000)
            self._last = max(now, self._last + 1)
            return self._last


def require_search_text(query: str | None) -> str:
    """Return ``query`` or raise MissingParameterError if it is absent or blank."""
    if not query or not query.strip():
        raise MissingParameterError("Missing search query")
    return query


def require_upload_target(file_id: Any, property_id: Any) -> tuple[str, str]:
    """Return both identifiers or raise MissingParameterError if either is absent.

    Values taken from a JSON body must be non-empty strings.
    """
    if not (isinstance(file_id, str) and file_id and isinstance(property_id, str) and property_id):
        raise MissingParameterError("Missing fileId or propertyId")
    return file_id, property_id


def storage_path(prefix: str, property_id: str, millis: int, filename: str) -> str:
    """Build ``{prefix}/{property_id}/{millis}-{filename}``."""
    return f"{prefix}/{property_id}/{millis}-{filename}"


class DrivePickerService:
    """Stateless proxy operations between the picker and the external services.

    Collaborators are owned by the caller and shared across requests.
    Every collaborator failure is re-raised as UpstreamError carrying the
    collaborator's message.
    """

    def __init__(
        self,
        drive: DriveReader,
        store: ImageStore,
        root_folder_id: str,
        storage_path_prefix: str = "properties",
        list_page_size: int = 100,
        search_page_size: int = 50,
        clock: Callable[[], int] | None = None,
    ) -> None:
        """Initialise the service.

        Args:
            drive: Read access to the shared drive.
            store: Write access to public object storage.
            root_folder_id: Folder listed when no folder ID is given.
            storage_path_prefix: Leading segment of every storage path.
            list_page_size: Result cap for folder listings.
            search_page_size: Result cap for searches.
            clock: Millisecond timestamp source for storage paths.
        """
        self._drive = drive
        self._store = store
        self._root_folder_id = root_folder_id
        self._storage_path_prefix = storage_path_prefix
        self._list_page_size = list_page_size
        self._search_page_size = search_page_size
        self._clock = clock or MonotonicMillis()

    def list_folder(self, folder_id: str | None = None) -> list[DriveEntry]:
        """List the folders and images directly inside a folder.

        Args:
            folder_id: Folder to list; the configured root when None or empty.

        Returns:
            Entries with folders first, then by name, unique by ID.

        Raises:
            UpstreamError: If the Drive call fails.
        """
        parent = folder_id or self._root_folder_id
        try:
            raw = self._drive.list_files(
                listing_query(parent),
                order_by=LISTING_ORDER_BY,
                page_size=self._list_page_size,
                fields=ENTRY_FIELDS,
            )
        except Exception as exc:
            logger.warning("[list_folder] drive listing failed; folder_id:%s", parent)
            raise UpstreamError(str(exc)) from exc
        entries = dedupe_entries(DriveEntry.from_api(item) for item in raw)
        logger.info("[list_folder] listed folder; folder_id:%s;count:%d", parent, len(entries))
        return entries

    def search(self, query: str | None) -> list[DriveEntry]:
        """Search the whole shared drive for images by name.

        Args:
            query: Free text matched against file names.

        Returns:
            Matching images, most recently modified first, unique by ID.

        Raises:
            MissingParameterError: If ``query`` is absent or blank.
            UpstreamError: If the Drive call fails.
        """
        query = require_search_text(query)
        try:
            raw = self._drive.list_files(
                search_query(query),
                order_by=SEARCH_ORDER_BY,
                page_size=self._search_page_size,
                fields=ENTRY_FIELDS,
            )
        except Exception as exc:
            logger.warning("[search] drive search failed")
            raise UpstreamError(str(exc)) from exc
        entries = dedupe_entries(DriveEntry.from_api(item) for item in raw)
        logger.info("[search] searched drive; count:%d", len(entries))
        return entries

    def upload(self, file_id: str | None, property_id: str | None) -> UploadResult:
        """Copy a Drive image into storage under the property's path.

        Steps:
            1. Fetch name and MIME type (defaulting to image.jpg / image/jpeg).
            2. Download the file content.
            3. Build ``{prefix}/{property_id}/{millis}-{name}``.
            4. Write the object with the resolved content type.
            5. Resolve the object's public URL.

        A failure at any step aborts the rest. Objects already written are
        left in place.

        Raises:
            MissingParameterError: If either identifier is absent.
            UpstreamError: If any Drive or storage call fails.
        """
        file_id, property_id = require_upload_target(file_id, property_id)
        try:
            meta = self._drive.get_metadata(file_id)
            filename = meta.get(FIELD_NAME) or DEFAULT_FILENAME
            mime_type = meta.get(FIELD_MIME_TYPE) or DEFAULT_MIME_TYPE

            content = self._drive.download(file_id)
            path = storage_path(self._storage_path_prefix, property_id, self._clock(), filename)

            self._store.put(path, content, mime_type)
            url = self._store.public_url(path)
        except Exception as exc:
            logger.warning(
                "[upload] upload failed; file_id:%s;property_id:%s", file_id, property_id
            )
            raise UpstreamError(str(exc)) from exc
        logger.info("[upload] copied image; file_id:%s;path:%s", file_id, path)
        return UploadResult(url=url, path=path)


def drive_picker_service_from_config(config: AppConfig) -> DrivePickerService:
    """Construct a DrivePickerService from application configuration.

    Creates the Drive client and blob store from the config, then wires
    them into the service.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DrivePickerService instance.
    """
    return DrivePickerService(
        drive=drive_client_from_config(config),
        store=blob_image_store_from_config(config),
        root_folder_id=config.browse_root_id,
        storage_path_prefix=config.storage_path_prefix,
        list_page_size=config.list_page_size,
        search_page_size=config.search_page_size,
    )
