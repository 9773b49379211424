"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. Domain constants
    have sensible defaults but can be overridden via environment variables.
    """

    # Required — no defaults, fail at startup if missing
    service_account_key: str
    shared_drive_id: str
    storage_connection_string: str

    # Domain constants — defaults provided, overridable via env
    root_folder_id: str = ""
    image_container: str = "property-images"
    storage_path_prefix: str = "properties"
    list_page_size: int = 100
    search_page_size: int = 50

    @property
    def browse_root_id(self) -> str:
        """Folder listed when no folderId is given (the shared drive root by default)."""
        return self.root_folder_id or self.shared_drive_id


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        DP_SERVICE_ACCOUNT_KEY: Google service account key, as a JSON document.
        DP_SHARED_DRIVE_ID: ID of the shared drive that browsing and search are confined to.
        AzureWebJobsStorage: Azure Storage account connection string.

    Optional environment variables (with defaults):
        DP_ROOT_FOLDER_ID: Folder listed when no folderId is given (default: shared drive root).
        DP_IMAGE_CONTAINER: Blob container for copied images (default: property-images).
        DP_STORAGE_PATH_PREFIX: Leading path segment for stored images (default: properties).
        DP_LIST_PAGE_SIZE: Max entries returned by a folder listing (default: 100).
        DP_SEARCH_PAGE_SIZE: Max entries returned by a search (default: 50).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        service_account_key=os.environ["DP_SERVICE_ACCOUNT_KEY"],
        shared_drive_id=os.environ["DP_SHARED_DRIVE_ID"],
        storage_connection_string=os.environ["AzureWebJobsStorage"],  # noqa: SIM112
        root_folder_id=os.environ.get("DP_ROOT_FOLDER_ID", ""),
        image_container=os.environ.get("DP_IMAGE_CONTAINER", "property-images"),
        storage_path_prefix=os.environ.get("DP_STORAGE_PATH_PREFIX", "properties"),
        list_page_size=int(os.environ.get("DP_LIST_PAGE_SIZE", "100")),
        search_page_size=int(os.environ.get("DP_SEARCH_PAGE_SIZE", "50")),
    )
