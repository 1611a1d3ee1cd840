"""Notion source reading and destination database access."""

from .source import BaseDocumentSource, NotionSource, create_notion_client
from .mock import MockDocumentSource
from .content import (
    NotionContent,
    BlockDepthExceededError,
    transform_block,
    convert_blocks_to_text,
    first_image_url,
    generate_excerpt,
    extract_tags,
    estimate_reading_time,
)
from .database import NotionDatabase
from .schema import REQUIRED_PROPERTIES, default_schema, load_schema_config

__all__ = [
    "BaseDocumentSource",
    "NotionSource",
    "create_notion_client",
    "MockDocumentSource",
    "NotionContent",
    "BlockDepthExceededError",
    "transform_block",
    "convert_blocks_to_text",
    "first_image_url",
    "generate_excerpt",
    "extract_tags",
    "estimate_reading_time",
    "NotionDatabase",
    "REQUIRED_PROPERTIES",
    "default_schema",
    "load_schema_config",
]
