"""Unit tests for functions/http_trigger.py — status codes and response shapes."""

import json
from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import azure.functions as func
import pytest

from drive_picker.drive.models import FOLDER_MIME_TYPE, DriveEntry
from drive_picker.functions import http_trigger
from drive_picker.functions.http_trigger import drive_list, drive_search, drive_upload
from drive_picker.proxy.errors import UpstreamError
from drive_picker.proxy.service import UploadResult

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def service() -> Iterator[MagicMock]:
    mock_service = MagicMock()
    with patch.object(http_trigger, "get_service", return_value=mock_service):
        yield mock_service


def _get(url: str, params: dict[str, str] | None = None) -> func.HttpRequest:
    return func.HttpRequest(method="GET", url=url, params=params or {}, body=b"")


def _post(body: bytes) -> func.HttpRequest:
    return func.HttpRequest(
        method="POST",
        url="/api/drive/upload",
        headers={"Content-Type": "application/json"},
        body=body,
    )


def _body(response: func.HttpResponse) -> dict:
    return json.loads(response.get_body())  # type: ignore[no-any-return]


# ---------------------------------------------------------------------------
# drive/list
# ---------------------------------------------------------------------------


class TestDriveList:
    def test_returns_files(self, service: MagicMock) -> None:
        service.list_folder.return_value = [
            DriveEntry("f1", "Vacation", FOLDER_MIME_TYPE),
            DriveEntry("i1", "a.jpg", "image/jpeg", "https://thumb"),
        ]

        response = drive_list(_get("/api/drive/list"))

        assert response.status_code == 200
        assert response.mimetype == "application/json"
        assert _body(response) == {
            "files": [
                {"id": "f1", "name": "Vacation", "mimeType": FOLDER_MIME_TYPE},
                {
                    "id": "i1",
                    "name": "a.jpg",
                    "mimeType": "image/jpeg",
                    "thumbnailLink": "https://thumb",
                },
            ]
        }
        service.list_folder.assert_called_once_with(None)

    def test_passes_folder_id(self, service: MagicMock) -> None:
        service.list_folder.return_value = []

        drive_list(_get("/api/drive/list", {"folderId": "f1"}))

        service.list_folder.assert_called_once_with("f1")

    def test_upstream_failure_is_500_with_message(self, service: MagicMock) -> None:
        service.list_folder.side_effect = UpstreamError("File not found: bad")

        response = drive_list(_get("/api/drive/list", {"folderId": "bad"}))

        assert response.status_code == 500
        assert _body(response) == {"error": "File not found: bad"}


# ---------------------------------------------------------------------------
# drive/search
# ---------------------------------------------------------------------------


class TestDriveSearch:
    @pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "  "}])
    def test_missing_query_is_400_without_service(
        self, service: MagicMock, params: dict[str, str]
    ) -> None:
        response = drive_search(_get("/api/drive/search", params))

        assert response.status_code == 400
        assert _body(response) == {"error": "Missing search query"}
        service.search.assert_not_called()

    def test_returns_matches(self, service: MagicMock) -> None:
        service.search.return_value = [DriveEntry("i1", "beach.jpg", "image/jpeg")]

        response = drive_search(_get("/api/drive/search", {"q": "beach"}))

        assert response.status_code == 200
        assert _body(response)["files"][0]["id"] == "i1"
        service.search.assert_called_once_with("beach")

    def test_upstream_failure_is_500(self, service: MagicMock) -> None:
        service.search.side_effect = UpstreamError("Invalid Credentials")

        response = drive_search(_get("/api/drive/search", {"q": "beach"}))

        assert response.status_code == 500
        assert _body(response) == {"error": "Invalid Credentials"}


# ---------------------------------------------------------------------------
# drive/upload
# ---------------------------------------------------------------------------


class TestDriveUpload:
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"fileId": "i1"},
            {"propertyId": "p1"},
            {"fileId": "", "propertyId": "p1"},
            {"fileId": 5, "propertyId": "p1"},
            {"fileId": ["x"], "propertyId": "p1"},
        ],
    )
    def test_missing_ids_are_400_without_service(
        self, service: MagicMock, payload: dict[str, object]
    ) -> None:
        response = drive_upload(_post(json.dumps(payload).encode()))

        assert response.status_code == 400
        assert _body(response) == {"error": "Missing fileId or propertyId"}
        service.upload.assert_not_called()

    @pytest.mark.parametrize("raw", [b"not json", b"[1, 2]"])
    def test_invalid_body_is_400(self, service: MagicMock, raw: bytes) -> None:
        response = drive_upload(_post(raw))

        assert response.status_code == 400
        service.upload.assert_not_called()

    def test_returns_public_url(self, service: MagicMock) -> None:
        service.upload.return_value = UploadResult(
            url="https://acct.blob.core.windows.net/property-images/properties/p1/1-a.jpg",
            path="properties/p1/1-a.jpg",
        )

        response = drive_upload(_post(b'{"fileId": "i1", "propertyId": "p1"}'))

        assert response.status_code == 200
        assert _body(response) == {
            "url": "https://acct.blob.core.windows.net/property-images/properties/p1/1-a.jpg"
        }
        service.upload.assert_called_once_with("i1", "p1")

    def test_upstream_failure_is_500(self, service: MagicMock) -> None:
        service.upload.side_effect = UpstreamError("The specified blob already exists.")

        response = drive_upload(_post(b'{"fileId": "i1", "propertyId": "p1"}'))

        assert response.status_code == 500
        assert _body(response) == {"error": "The specified blob already exists."}


# ---------------------------------------------------------------------------
# Service lifecycle
# ---------------------------------------------------------------------------


class TestGetService:
    def test_service_built_once_per_process(self) -> None:
        http_trigger.get_service.cache_clear()
        try:
            with (
                patch.object(http_trigger, "load_config") as mock_load,
                patch.object(http_trigger, "drive_picker_service_from_config") as mock_factory,
            ):
                first = http_trigger.get_service()
                second = http_trigger.get_service()

            assert first is second
            mock_load.assert_called_once()
            mock_factory.assert_called_once_with(mock_load.return_value)
        finally:
            http_trigger.get_service.cache_clear()
