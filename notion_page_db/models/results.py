"""
Structured result types returned by notion-page-db operations.

Operations that can fail without aborting a sync run return one of these
instead of raising.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from .content import Category, ContentPage


class ValidationResult(BaseModel):
    """Outcome of configuration validation."""

    valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class UpdateResult(BaseModel):
    """Outcome of creating or updating one destination row."""

    success: bool
    page_id: Optional[str] = Field(default=None, description="Source page that was synced")
    entry_id: Optional[str] = Field(default=None, description="Destination row id")
    is_new: bool = False
    message: Optional[str] = None
    error: Optional[str] = None


class VerificationResult(BaseModel):
    """Outcome of verifying or provisioning the destination database."""

    success: bool
    database_id: Optional[str] = None
    message: Optional[str] = None
    errors: List[str] = Field(default_factory=list)


class FetchResult(BaseModel):
    """Outcome of reading categories and content pages from the source."""

    success: bool
    pages: List[ContentPage] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class ImageResult(BaseModel):
    """Outcome of an image generation request."""

    success: bool
    url: Optional[str] = None
    local_path: Optional[str] = None
    prompt: Optional[str] = None
    error: Optional[str] = None


class StorageResult(BaseModel):
    """Outcome of an upload or copy against the blob store."""

    success: bool
    key: Optional[str] = None
    url: Optional[str] = None
    content_type: Optional[str] = None
    size: Optional[int] = None
    error: Optional[str] = None


class ImageProcessingResult(BaseModel):
    """Outcome of archiving one page's image."""

    success: bool
    page_id: str
    image_url: Optional[str] = Field(default=None, description="Original or generated image URL")
    storage_url: Optional[str] = Field(default=None, description="URL of the archived copy")
    generated: bool = False
    error: Optional[str] = None


class MigrationResult(BaseModel):
    """Summary of one complete sync run."""

    success: bool
    total_pages: int = 0
    updated_pages: int = 0
    failed_pages: int = 0
    categories: int = 0
    errors: List[str] = Field(default_factory=list)
    results: List[UpdateResult] = Field(default_factory=list)


class StorageItem(BaseModel):
    """An object listed from the blob store."""

    key: str
    url: str
    size: int = 0
    last_modified: Optional[datetime] = None
    content_type: str = "application/octet-stream"
    etag: str = ""
