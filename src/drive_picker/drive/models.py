"""Data models for Google Drive file entries."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

# Drive API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_MIME_TYPE = "mimeType"
FIELD_THUMBNAIL_LINK = "thumbnailLink"
FIELD_FILES = "files"

# Fields requested for every listed entry
ENTRY_FIELDS = "files(id, name, mimeType, thumbnailLink)"

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
IMAGE_MIME_PREFIX = "image/"


@dataclass(frozen=True)
class DriveEntry:
    """A folder or image returned by a Drive listing or search."""

    id: str
    name: str
    mime_type: str
    thumbnail_link: str | None = None

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> DriveEntry:
        """Build an entry from a Drive API ``files`` element."""
        return cls(
            id=raw[FIELD_ID],
            name=raw.get(FIELD_NAME, ""),
            mime_type=raw.get(FIELD_MIME_TYPE, ""),
            thumbnail_link=raw.get(FIELD_THUMBNAIL_LINK),
        )

    def to_dict(self) -> dict[str, str]:
        """Serialize using the Drive API's field names; absent thumbnails are omitted."""
        data = {
            FIELD_ID: self.id,
            FIELD_NAME: self.name,
            FIELD_MIME_TYPE: self.mime_type,
        }
        if self.thumbnail_link:
            data[FIELD_THUMBNAIL_LINK] = self.thumbnail_link
        return data


def dedupe_entries(entries: Iterable[DriveEntry]) -> list[DriveEntry]:
    """Drop entries whose id was already seen, keeping first-seen order."""
    seen: set[str] = set()
    unique: list[DriveEntry] = []
    for entry in entries:
        if entry.id in seen:
            continue
        seen.add(entry.id)
        unique.append(entry)
    return unique
