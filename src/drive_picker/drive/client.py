"""Google Drive v3 client authenticated with a service account."""

from __future__ import annotations

import io
import json
import logging
from typing import TYPE_CHECKING, Any

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload

from drive_picker.drive.models import FIELD_FILES

if TYPE_CHECKING:
    from drive_picker.config import AppConfig

logger = logging.getLogger(__name__)

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.readonly"]


class DriveApiError(Exception):
    """Raised when the Drive API returns a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Drive API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _to_drive_error(exc: HttpError) -> DriveApiError:
    status = int(getattr(exc.resp, "status", 0) or 0)
    try:
        detail = json.loads(exc.content).get("error", {}).get("message", exc.reason)
    except Exception:
        detail = exc.reason
    return DriveApiError(status, detail or str(exc))


class DriveClient:
    """Read-only access to a single shared drive."""

    def __init__(self, service: Any, shared_drive_id: str) -> None:
        """Initialise the client.

        Args:
            service: Drive v3 resource returned by ``googleapiclient.discovery.build``.
            shared_drive_id: ID of the shared drive that list calls are confined to.
        """
        self._service = service
        self._shared_drive_id = shared_drive_id

    def list_files(
        self,
        query: str,
        order_by: str,
        page_size: int,
        fields: str,
    ) -> list[dict[str, Any]]:
        """Run a single-page ``files.list`` query scoped to the shared drive.

        Args:
            query: Drive query-language expression.
            order_by: Sort order, e.g. ``"folder, name"``.
            page_size: Maximum number of results.
            fields: Partial-response field selector.

        Returns:
            Raw ``files`` elements from the response (possibly empty).

        Raises:
            DriveApiError: If the API returns an error status.
        """
        try:
            response = (
                self._service.files()
                .list(
                    q=query,
                    fields=fields,
                    supportsAllDrives=True,
                    includeItemsFromAllDrives=True,
                    driveId=self._shared_drive_id,
                    corpora="drive",
                    orderBy=order_by,
                    pageSize=page_size,
                )
                .execute()
            )
        except HttpError as exc:
            raise _to_drive_error(exc) from exc
        files: list[dict[str, Any]] = response.get(FIELD_FILES, []) or []
        logger.info("[list_files] listed; count:%d", len(files))
        return files

    def get_metadata(self, file_id: str, fields: str = "name, mimeType") -> dict[str, Any]:
        """Fetch metadata for a single file.

        Raises:
            DriveApiError: If the API returns an error status.
        """
        try:
            return self._service.files().get(  # type: ignore[no-any-return]
                fileId=file_id,
                fields=fields,
                supportsAllDrives=True,
            ).execute()
        except HttpError as exc:
            raise _to_drive_error(exc) from exc

    def download(self, file_id: str) -> bytes:
        """Download a file's raw content into memory.

        Raises:
            DriveApiError: If the API returns an error status.
        """
        request = self._service.files().get_media(fileId=file_id, supportsAllDrives=True)
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(buffer, request)
        try:
            done = False
            while not done:
                _, done = downloader.next_chunk()
        except HttpError as exc:
            raise _to_drive_error(exc) from exc
        content = buffer.getvalue()
        logger.info("[download] downloaded; file_id:%s;bytes:%d", file_id, len(content))
        return content


def drive_client_from_config(config: AppConfig) -> DriveClient:
    """Construct a DriveClient from application configuration.

    Parses the service account key once and builds the Drive v3 resource
    without the discovery cache.

    Args:
        config: Application configuration instance.

    Returns:
        Configured DriveClient instance.
    """
    credentials = service_account.Credentials.from_service_account_info(
        json.loads(config.service_account_key),
        scopes=DRIVE_SCOPES,
    )
    service = build("drive", "v3", credentials=credentials, cache_discovery=False)
    return DriveClient(service=service, shared_drive_id=config.shared_drive_id)
