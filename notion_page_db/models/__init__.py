"""Data models for notion-page-db."""

from .blocks import (
    Block,
    TextBlock,
    ToDoBlock,
    CodeBlock,
    ImageBlock,
    ChildPageBlock,
    UnknownBlock,
    PageContent,
    TEXT_BLOCK_TYPES,
)
from .content import Category, ContentPage, Status, page_url_for_id
from .database import DatabaseSchema, DestinationRow, PropertyDescriptor, SelectOption
from .results import (
    FetchResult,
    ImageProcessingResult,
    ImageResult,
    MigrationResult,
    StorageItem,
    StorageResult,
    UpdateResult,
    ValidationResult,
    VerificationResult,
)
from .tasks import ImageTask

__all__ = [
    "Block",
    "TextBlock",
    "ToDoBlock",
    "CodeBlock",
    "ImageBlock",
    "ChildPageBlock",
    "UnknownBlock",
    "PageContent",
    "TEXT_BLOCK_TYPES",
    "Category",
    "ContentPage",
    "Status",
    "page_url_for_id",
    "DatabaseSchema",
    "DestinationRow",
    "PropertyDescriptor",
    "SelectOption",
    "FetchResult",
    "ImageProcessingResult",
    "ImageResult",
    "MigrationResult",
    "StorageItem",
    "StorageResult",
    "UpdateResult",
    "ValidationResult",
    "VerificationResult",
    "ImageTask",
]
