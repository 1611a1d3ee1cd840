"""
Block models for notion-page-db.

A source page is a tree of blocks. Each block type carries a different payload,
so every supported type gets its own model and `UnknownBlock` is the catch-all
for anything the reader does not recognise.
"""

from typing import List, Literal, Optional, Union
from pydantic import BaseModel, Field


TEXT_BLOCK_TYPES = (
    "paragraph",
    "heading_1",
    "heading_2",
    "heading_3",
    "bulleted_list_item",
    "numbered_list_item",
)


class BaseBlock(BaseModel):
    """
    Fields shared by every block variant.
    """

    id: str = Field(..., description="Stable identifier of the block in the source workspace")

    has_children: bool = Field(
        default=False,
        description="Whether the source reports nested blocks under this one"
    )

    children: List["Block"] = Field(
        default_factory=list,
        description="Nested blocks, populated once the tree has been expanded"
    )


class TextBlock(BaseBlock):
    """Paragraphs, headings and list items: a single plain-text payload."""

    type: Literal[
        "paragraph",
        "heading_1",
        "heading_2",
        "heading_3",
        "bulleted_list_item",
        "numbered_list_item",
    ]
    text: str = Field(default="", description="Concatenated plain text of the rich-text runs")


class ToDoBlock(BaseBlock):
    """A checklist item."""

    type: Literal["to_do"] = "to_do"
    text: str = ""
    checked: bool = False


class CodeBlock(BaseBlock):
    """A fenced code block."""

    type: Literal["code"] = "code"
    text: str = ""
    language: str = Field(default="plain text", description="Language label shown on the fence")


class ImageBlock(BaseBlock):
    """An image, either uploaded to the workspace ("file") or linked ("external")."""

    type: Literal["image"] = "image"
    image_type: Literal["file", "external"] = "external"
    url: str = ""
    caption: str = ""


class ChildPageBlock(BaseBlock):
    """A reference to a nested page."""

    type: Literal["child_page"] = "child_page"
    title: str = "Untitled"


class UnknownBlock(BaseBlock):
    """Any block type without a dedicated model. Only the type tag is kept."""

    type: str


Block = Union[TextBlock, ToDoBlock, CodeBlock, ImageBlock, ChildPageBlock, UnknownBlock]


BaseBlock.model_rebuild()
TextBlock.model_rebuild()
ToDoBlock.model_rebuild()
CodeBlock.model_rebuild()
ImageBlock.model_rebuild()
ChildPageBlock.model_rebuild()
UnknownBlock.model_rebuild()


class PageContent(BaseModel):
    """
    A source page with its fully expanded block tree.
    """

    id: str
    title: str = "Untitled"
    blocks: List[Block] = Field(default_factory=list)
    properties: dict = Field(default_factory=dict)
    created_time: Optional[str] = None
    last_edited_time: Optional[str] = None
