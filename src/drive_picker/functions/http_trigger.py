"""HTTP trigger blueprint — health check and Drive picker proxy endpoints."""

import functools
import json
import logging
from typing import Any

import azure.functions as func

from drive_picker import __version__
from drive_picker.config import load_config
from drive_picker.proxy.errors import MissingParameterError
from drive_picker.proxy.service import (
    DrivePickerService,
    drive_picker_service_from_config,
    require_search_text,
    require_upload_target,
)

logger = logging.getLogger(__name__)

bp = func.Blueprint()


@functools.lru_cache(maxsize=1)
def get_service() -> DrivePickerService:
    """Build the process-wide service on first use; credentials are loaded once."""
    logger.info("[get_service] initialising drive picker service")
    return drive_picker_service_from_config(load_config())


def _json_response(body: dict[str, Any], status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(json.dumps(body), status_code=status_code, mimetype="application/json")


def _error_response(message: str, status_code: int) -> func.HttpResponse:
    return _json_response({"error": message}, status_code=status_code)


@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint — returns service status and version."""
    logger.info("[health_check] health check requested")

    try:
        return _json_response({"status": "ok", "version": __version__})

    except Exception:
        logger.error("[health_check] health check failed", exc_info=True)
        return _json_response({"status": "error", "message": "Internal server error"}, 500)


@bp.route(route="drive/list", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def drive_list(req: func.HttpRequest) -> func.HttpResponse:
    """List folders and images in a Drive folder (root when folderId is absent)."""
    folder_id = req.params.get("folderId") or None
    logger.info("[drive_list] listing requested; folder_id:%s", folder_id)

    try:
        entries = get_service().list_folder(folder_id)
        return _json_response({"files": [entry.to_dict() for entry in entries]})

    except Exception as exc:
        logger.error("[drive_list] listing failed", exc_info=True)
        return _error_response(str(exc) or "Failed to list files", 500)


@bp.route(route="drive/search", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
def drive_search(req: func.HttpRequest) -> func.HttpResponse:
    """Search the shared drive for images whose name contains ``q``."""
    logger.info("[drive_search] search requested")
    try:
        query = require_search_text(req.params.get("q"))
    except MissingParameterError as exc:
        logger.info("[drive_search] rejected; reason:%s", exc.message)
        return _error_response(exc.message, 400)

    try:
        entries = get_service().search(query)
        return _json_response({"files": [entry.to_dict() for entry in entries]})

    except Exception as exc:
        logger.error("[drive_search] search failed", exc_info=True)
        return _error_response(str(exc) or "Search failed", 500)


@bp.route(route="drive/upload", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
def drive_upload(req: func.HttpRequest) -> func.HttpResponse:
    """Copy a Drive image into property storage and return its public URL."""
    try:
        payload = req.get_json()
    except ValueError:
        return _error_response("Invalid JSON body", 400)
    if not isinstance(payload, dict):
        return _error_response("Invalid JSON body", 400)

    try:
        file_id, property_id = require_upload_target(
            payload.get("fileId"), payload.get("propertyId")
        )
    except MissingParameterError as exc:
        logger.info("[drive_upload] rejected; reason:%s", exc.message)
        return _error_response(exc.message, 400)
    logger.info("[drive_upload] upload requested; file_id:%s;property_id:%s", file_id, property_id)

    try:
        result = get_service().upload(file_id, property_id)
        return _json_response(result.to_dict())

    except Exception as exc:
        logger.error("[drive_upload] upload failed", exc_info=True)
        return _error_response(str(exc) or "Upload failed", 500)
