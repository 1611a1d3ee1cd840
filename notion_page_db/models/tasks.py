"""
Image task model for notion-page-db.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

ImageTaskStatus = Literal["pending", "processing", "completed", "failed"]


class ImageTask(BaseModel):
    """
    Tracks image work for one content page across sync runs.
    """

    page_id: str = Field(..., description="Source page the image belongs to")
    page_title: str = Field(default="", description="Page title, for log output")
    task_id: Optional[str] = Field(default=None, description="Generation request id, if any")
    status: ImageTaskStatus = "pending"
    source_url: Optional[str] = Field(default=None, description="Original or generated image URL")
    storage_url: Optional[str] = Field(default=None, description="URL of the archived copy")
    attempts: int = 0
    error: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
