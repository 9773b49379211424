"""Drive query-language builders for listing and search."""

from drive_picker.drive.models import FOLDER_MIME_TYPE, IMAGE_MIME_PREFIX

LISTING_ORDER_BY = "folder, name"
SEARCH_ORDER_BY = "modifiedTime desc"


def escape_query_text(text: str) -> str:
    """Escape single quotes so ``text`` can sit inside a quoted query literal."""
    return text.replace("'", "\\'")


def listing_query(folder_id: str) -> str:
    """Immediate, non-trashed children of ``folder_id`` that are folders or images."""
    return (
        f"'{folder_id}' in parents and trashed = false and "
        f"(mimeType = '{FOLDER_MIME_TYPE}' or mimeType contains '{IMAGE_MIME_PREFIX}')"
    )


def search_query(text: str) -> str:
    """Non-trashed images whose name contains ``text``."""
    return (
        f"name contains '{escape_query_text(text)}' and "
        f"mimeType contains '{IMAGE_MIME_PREFIX}' and trashed = false"
    )
