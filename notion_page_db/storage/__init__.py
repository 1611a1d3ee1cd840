"""Blob storage for archived images."""

from .download import download_file
from .service import StorageService, content_type_for

__all__ = ["download_file", "StorageService", "content_type_for"]
