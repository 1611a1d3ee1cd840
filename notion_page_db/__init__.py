"""
notion-page-db: sync a Notion workspace into a Notion database.

Content pages are read from a source page, enriched with AI-generated
metadata, their images archived to object storage, and written to a
destination database without overwriting manually curated fields.
"""

__version__ = "0.1.0"
__author__ = "notion-page-db Project"

# Import main components
from .models import Block, Category, ContentPage, DestinationRow, DatabaseSchema
from .notion import NotionContent, NotionDatabase, NotionSource, MockDocumentSource
from .ai import AIService
from .storage import StorageService
from .state import StateManager
from .workflow import (
    ContentProcessor,
    ImageProcessor,
    DatabaseUpdater,
    DatabaseVerifier,
    MigrationManager,
)

__all__ = [
    "Block",
    "Category",
    "ContentPage",
    "DestinationRow",
    "DatabaseSchema",
    "NotionContent",
    "NotionDatabase",
    "NotionSource",
    "MockDocumentSource",
    "AIService",
    "StorageService",
    "StateManager",
    "ContentProcessor",
    "ImageProcessor",
    "DatabaseUpdater",
    "DatabaseVerifier",
    "MigrationManager",
]
