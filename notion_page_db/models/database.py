"""
Destination database models for notion-page-db.
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

PropertyType = Literal[
    "title",
    "rich_text",
    "select",
    "multi_select",
    "url",
    "date",
    "number",
    "checkbox",
]


class SelectOption(BaseModel):
    """An option of a select or multi-select property."""

    name: str
    color: Optional[str] = None


class PropertyDescriptor(BaseModel):
    """
    Typed description of one database column.
    """

    type: PropertyType = Field(..., description="Notion property type")

    options: Optional[List[SelectOption]] = Field(
        default=None,
        description="Allowed options for select and multi_select properties"
    )

    format: Optional[str] = Field(
        default=None,
        description="Number format for number properties (e.g. 'number')"
    )


class DatabaseSchema(BaseModel):
    """
    Declarative shape of the destination database.
    """

    name: str = Field(..., description="Database title")

    properties: Dict[str, PropertyDescriptor] = Field(
        default_factory=dict,
        description="Property name to property descriptor"
    )


class DestinationRow(BaseModel):
    """
    A row that already exists in the destination database.
    """

    id: str = Field(..., description="Id assigned by the destination database")

    properties: Dict[str, Any] = Field(
        default_factory=dict,
        description="Raw property values keyed by property name"
    )

    url: Optional[str] = None
    created_time: Optional[str] = None
    last_edited_time: Optional[str] = None

    @classmethod
    def from_api(cls, page: Dict[str, Any]) -> "DestinationRow":
        """
        Build a row from a Notion page object.

        Args:
            page: Page object as returned by the Notion API

        Returns:
            DestinationRow instance
        """
        return cls(
            id=page["id"],
            properties=page.get("properties", {}),
            url=page.get("url"),
            created_time=page.get("created_time"),
            last_edited_time=page.get("last_edited_time"),
        )

    @property
    def original_page_url(self) -> Optional[str]:
        """The "Original Page" url property, if set."""
        prop = self.properties.get("Original Page")
        if isinstance(prop, dict):
            return prop.get("url") or None
        return None

    @property
    def title(self) -> str:
        """Plain text of the "Title" property."""
        prop = self.properties.get("Title")
        if isinstance(prop, dict):
            return "".join(part.get("plain_text", "") for part in prop.get("title", []))
        return ""
