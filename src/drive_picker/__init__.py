"""Google Drive image picker backed by Azure Blob Storage."""

__version__ = "0.1.0"
