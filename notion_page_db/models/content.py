"""
Content models for notion-page-db.

`ContentPage` is the unit that gets synced into the destination database.
"""

from enum import Enum
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

NOTION_PAGE_URL_TEMPLATE = "https://www.notion.so/{compact_id}"


def page_url_for_id(page_id: str) -> str:
    """
    Build the canonical notion.so URL for a page id.

    Args:
        page_id: Page id, with or without dashes

    Returns:
        URL with the dashes stripped from the id
    """
    return NOTION_PAGE_URL_TEMPLATE.format(compact_id=page_id.replace("-", ""))


class Status(str, Enum):
    """Publication workflow status of a destination row."""

    DRAFT = "Draft"
    READY = "Ready"
    REVIEW = "Review"
    PUBLISHED = "Published"


class Category(BaseModel):
    """
    A first-level sub-page of the source root page.
    """

    id: str = Field(..., description="Block id of the category page")

    name: str = Field(default="Untitled", description="Title of the category page")

    type: Literal["regular", "mit"] = Field(
        default="regular",
        description="'mit' when the name looks like a course code, otherwise 'regular'"
    )


class ContentPage(BaseModel):
    """
    A leaf content page, flattened to text and ready for enrichment.

    Pages are frozen. Enrichment steps return updated copies via `model_copy`.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Block id of the source page")
    title: str = Field(default="Untitled", description="Page title")
    parent_id: str = Field(..., description="Id of the owning category")
    category: str = Field(default="", description="Category label written to the database")
    content: str = Field(default="", description="Flattened page text")

    summary: str = ""
    excerpt: str = ""
    tags: List[str] = Field(default_factory=list, description="Ordered tags without duplicates")
    mins_read: int = Field(default=1, ge=1, description="Estimated reading time in minutes")

    status: Status = Status.DRAFT
    published: bool = False

    original_page_url: str = Field(default="", description="notion.so URL of the source page")
    image_url: str = ""
    r2_image_url: str = ""

    created_time: Optional[str] = None
    last_edited_time: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _derive_page_url(cls, data):
        if isinstance(data, dict) and data.get("id") and not data.get("original_page_url"):
            data = {**data, "original_page_url": page_url_for_id(data["id"])}
        return data

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: List[str]) -> List[str]:
        return list(dict.fromkeys(tags))
