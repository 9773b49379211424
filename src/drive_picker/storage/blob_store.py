"""Property image storage backed by Azure Blob Storage."""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING

from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import BlobServiceClient, ContentSettings

if TYPE_CHECKING:
    from drive_picker.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_CONTAINER = "property-images"


class BlobImageStore:
    """Writes image bytes to a publicly readable blob container.

    Objects are never overwritten: callers are expected to pick unique
    paths, and a write to an existing path fails.
    """

    def __init__(
        self,
        storage_connection_string: str,
        container: str = DEFAULT_IMAGE_CONTAINER,
    ) -> None:
        """Initialise the image store.

        Args:
            storage_connection_string: Azure Storage connection string.
            container: Blob container name for property images.
        """
        self._blob_service = BlobServiceClient.from_connection_string(storage_connection_string)
        self._container = container
        self._container_ready = False

    def _ensure_container(self) -> None:
        if self._container_ready:
            return
        container_client = self._blob_service.get_container_client(self._container)
        with contextlib.suppress(ResourceExistsError):
            container_client.create_container(public_access="blob")
        self._container_ready = True

    def put(self, path: str, content: bytes, content_type: str) -> None:
        """Upload an object.

        Creates the container (with anonymous blob read access) if it does
        not exist yet.

        Args:
            path: Blob path within the container.
            content: Raw object bytes.
            content_type: MIME type stored on the blob.
        """
        self._ensure_container()
        blob_client = self._blob_service.get_blob_client(self._container, path)
        blob_client.upload_blob(
            content,
            overwrite=False,
            content_settings=ContentSettings(content_type=content_type),
        )
        logger.info(
            "[blob_image_store] stored; path:%s;content_type:%s;bytes:%d",
            path,
            content_type,
            len(content),
        )

    def public_url(self, path: str) -> str:
        """Return the public URL of the blob at ``path``."""
        return str(self._blob_service.get_blob_client(self._container, path).url)


def blob_image_store_from_config(config: AppConfig) -> BlobImageStore:
    """Construct a BlobImageStore from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured BlobImageStore instance.
    """
    return BlobImageStore(
        storage_connection_string=config.storage_connection_string,
        container=config.image_container,
    )
