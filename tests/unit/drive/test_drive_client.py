"""Unit tests for drive/client.py — Drive v3 calls and error mapping."""

import json
from unittest.mock import MagicMock, patch

import httplib2
import pytest
from googleapiclient.errors import HttpError

from drive_picker.config import AppConfig
from drive_picker.drive.client import (
    DRIVE_SCOPES,
    DriveApiError,
    DriveClient,
    drive_client_from_config,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _http_error(status: int, message: str) -> HttpError:
    resp = httplib2.Response({"status": status})
    resp.reason = "Error"
    content = json.dumps({"error": {"code": status, "message": message}}).encode()
    return HttpError(resp, content)


def _make_client() -> tuple[DriveClient, MagicMock]:
    """Return (client, mock_service)."""
    service = MagicMock()
    return DriveClient(service=service, shared_drive_id="0AShared"), service


# ---------------------------------------------------------------------------
# list_files tests
# ---------------------------------------------------------------------------


class TestListFiles:
    def test_scopes_query_to_shared_drive(self) -> None:
        client, service = _make_client()
        service.files.return_value.list.return_value.execute.return_value = {"files": []}

        client.list_files("q-expr", order_by="folder, name", page_size=100, fields="files(id)")

        service.files.return_value.list.assert_called_once_with(
            q="q-expr",
            fields="files(id)",
            supportsAllDrives=True,
            includeItemsFromAllDrives=True,
            driveId="0AShared",
            corpora="drive",
            orderBy="folder, name",
            pageSize=100,
        )

    def test_returns_raw_files(self) -> None:
        client, service = _make_client()
        files = [{"id": "i1", "name": "a.jpg", "mimeType": "image/jpeg"}]
        service.files.return_value.list.return_value.execute.return_value = {"files": files}

        assert client.list_files("q", "name", 10, "files(id)") == files

    def test_missing_files_key_yields_empty_list(self) -> None:
        client, service = _make_client()
        service.files.return_value.list.return_value.execute.return_value = {}

        assert client.list_files("q", "name", 10, "files(id)") == []

    def test_http_error_becomes_drive_api_error(self) -> None:
        client, service = _make_client()
        service.files.return_value.list.return_value.execute.side_effect = _http_error(
            404, "File not found: bad-folder."
        )

        with pytest.raises(DriveApiError) as exc_info:
            client.list_files("q", "name", 10, "files(id)")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "File not found: bad-folder."


# ---------------------------------------------------------------------------
# get_metadata / download tests
# ---------------------------------------------------------------------------


class TestGetMetadata:
    def test_requests_name_and_mime_type(self) -> None:
        client, service = _make_client()
        service.files.return_value.get.return_value.execute.return_value = {
            "name": "a.jpg",
            "mimeType": "image/jpeg",
        }

        meta = client.get_metadata("i1")

        assert meta == {"name": "a.jpg", "mimeType": "image/jpeg"}
        service.files.return_value.get.assert_called_once_with(
            fileId="i1", fields="name, mimeType", supportsAllDrives=True
        )

    def test_http_error_becomes_drive_api_error(self) -> None:
        client, service = _make_client()
        service.files.return_value.get.return_value.execute.side_effect = _http_error(
            403, "Insufficient permissions"
        )

        with pytest.raises(DriveApiError, match="Insufficient permissions"):
            client.get_metadata("i1")


class TestDownload:
    def test_collects_all_chunks(self) -> None:
        client, service = _make_client()

        def fake_downloader(buffer: object, request: object) -> MagicMock:
            downloader = MagicMock()
            chunks = iter([b"abc", b"def"])

            def next_chunk() -> tuple[None, bool]:
                buffer.write(next(chunks))  # type: ignore[attr-defined]
                return None, buffer.tell() >= 6  # type: ignore[attr-defined]

            downloader.next_chunk.side_effect = next_chunk
            return downloader

        with patch("drive_picker.drive.client.MediaIoBaseDownload", side_effect=fake_downloader):
            content = client.download("i1")

        assert content == b"abcdef"
        service.files.return_value.get_media.assert_called_once_with(
            fileId="i1", supportsAllDrives=True
        )

    def test_http_error_becomes_drive_api_error(self) -> None:
        client, _ = _make_client()
        downloader = MagicMock()
        downloader.next_chunk.side_effect = _http_error(500, "Backend Error")

        with (
            patch("drive_picker.drive.client.MediaIoBaseDownload", return_value=downloader),
            pytest.raises(DriveApiError) as exc_info,
        ):
            client.download("i1")

        assert exc_info.value.status_code == 500


# ---------------------------------------------------------------------------
# Factory tests
# ---------------------------------------------------------------------------


class TestDriveClientFromConfig:
    def test_builds_service_account_client(self) -> None:
        config = AppConfig(
            service_account_key='{"type": "service_account", "client_email": "x@y"}',
            shared_drive_id="0AShared",
            storage_connection_string="conn",
        )
        with (
            patch("drive_picker.drive.client.service_account.Credentials") as mock_creds,
            patch("drive_picker.drive.client.build") as mock_build,
        ):
            client = drive_client_from_config(config)

        mock_creds.from_service_account_info.assert_called_once_with(
            {"type": "service_account", "client_email": "x@y"}, scopes=DRIVE_SCOPES
        )
        mock_build.assert_called_once_with(
            "drive",
            "v3",
            credentials=mock_creds.from_service_account_info.return_value,
            cache_discovery=False,
        )
        assert client._shared_drive_id == "0AShared"
