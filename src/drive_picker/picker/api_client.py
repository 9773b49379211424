"""HTTP client for the Drive picker endpoints."""

from __future__ import annotations

import json
import logging
from http.client import HTTPException
from typing import Any
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode

from drive_picker.drive.models import FIELD_FILES, DriveEntry

logger = logging.getLogger(__name__)

FUNCTION_KEY_HEADER = "x-functions-key"


class PickerApiError(Exception):
    """Raised when an endpoint reports an error or cannot be reached.

    ``status_code`` is 0 when no HTTP response was received.
    """

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class PickerApiClient:
    """Calls the list, search and upload endpoints of the picker backend."""

    def __init__(
        self,
        base_url: str,
        function_key: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialise the client.

        Args:
            base_url: Root of the HTTP API, e.g. ``https://app.example.net/api``.
            function_key: Azure Functions key sent with every request, if any.
            timeout: Socket timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._function_key = function_key
        self._timeout = timeout

    def list_files(self, folder_id: str | None = None) -> list[DriveEntry]:
        """List a folder (the configured root when ``folder_id`` is None)."""
        params = {"folderId": folder_id} if folder_id else None
        body = self._request("GET", "/drive/list", params=params)
        return [DriveEntry.from_api(item) for item in body.get(FIELD_FILES, [])]

    def search_files(self, query: str) -> list[DriveEntry]:
        body = self._request("GET", "/drive/search", params={"q": query})
        return [DriveEntry.from_api(item) for item in body.get(FIELD_FILES, [])]

    def upload(self, file_id: str, property_id: str) -> str:
        """Copy a Drive image into property storage.

        Returns:
            Public URL of the stored image.
        """
        body = self._request(
            "POST",
            "/drive/upload",
            payload={"fileId": file_id, "propertyId": property_id},
        )
        url = body.get("url")
        if not isinstance(url, str) or not url:
            raise PickerApiError(0, "Upload response did not include a url")
        return url

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        headers = {"Accept": "application/json"}
        data = None
        if payload is not None:
            data = json.dumps(payload).encode("utf-8")
            headers["Content-Type"] = "application/json"
        if self._function_key:
            headers[FUNCTION_KEY_HEADER] = self._function_key

        req = urllib_request.Request(url, data=data, headers=headers, method=method)
        try:
            with urllib_request.urlopen(req, timeout=self._timeout) as resp:
                body = json.loads(resp.read())
        except HTTPError as exc:
            raw = exc.read()
            try:
                detail = json.loads(raw).get("error") or exc.reason
            except Exception:
                detail = exc.reason
            logger.warning("[_request] request failed; path:%s;status:%d", path, exc.code)
            raise PickerApiError(exc.code, str(detail)) from exc
        except URLError as exc:
            logger.warning("[_request] endpoint unreachable; path:%s", path)
            raise PickerApiError(0, str(exc.reason)) from exc
        except (OSError, HTTPException) as exc:
            # Read timeouts and dropped connections surface here, not as URLError.
            logger.warning("[_request] connection failed; path:%s;error:%s", path, exc)
            raise PickerApiError(0, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise PickerApiError(0, "Invalid JSON response") from exc

        if not isinstance(body, dict):
            raise PickerApiError(0, "Invalid JSON response")
        if body.get("error"):
            raise PickerApiError(0, str(body["error"]))
        return body
