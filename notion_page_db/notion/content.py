"""
Source content reader for notion-page-db.

Walks the source workspace: the root page holds category sub-pages, and each
category holds the content pages that get synced. Raw Notion blocks are
normalised into the block models and flattened to plain text.
"""

import logging
import math
import re
import time
from collections import Counter
from typing import Any, Dict, List, Optional

from ..models import (
    Block,
    Category,
    ChildPageBlock,
    CodeBlock,
    ContentPage,
    ImageBlock,
    PageContent,
    TextBlock,
    ToDoBlock,
    UnknownBlock,
    TEXT_BLOCK_TYPES,
)
from .source import BaseDocumentSource

WORDS_PER_MINUTE = 200
MAX_TAGS = 10
MAX_CONTENT_KEYWORDS = 5


class BlockDepthExceededError(RuntimeError):
    """Raised when a block tree is nested deeper than the reader allows."""


def extract_text_content(rich_text: Optional[List[Dict[str, Any]]]) -> str:
    """Join the plain text of a rich-text array."""
    if not rich_text or not isinstance(rich_text, list):
        return ""
    return "".join(item.get("plain_text", "") for item in rich_text)


def transform_block(raw: Dict[str, Any]) -> Block:
    """
    Convert a raw Notion block into a block model.

    Args:
        raw: Block object as returned by the API

    Returns:
        The matching block variant; unrecognised types become UnknownBlock
    """
    block_type = raw.get("type", "unsupported")
    payload = raw.get(block_type) or {}
    common = {"id": raw["id"], "has_children": bool(raw.get("has_children", False))}

    if block_type in TEXT_BLOCK_TYPES:
        return TextBlock(type=block_type, text=extract_text_content(payload.get("rich_text")), **common)
    elif block_type == "to_do":
        return ToDoBlock(
            text=extract_text_content(payload.get("rich_text")),
            checked=bool(payload.get("checked", False)),
            **common
        )
    elif block_type == "code":
        return CodeBlock(
            text=extract_text_content(payload.get("rich_text")),
            language=payload.get("language") or "plain text",
            **common
        )
    elif block_type == "image":
        image_type = payload.get("type") or "external"
        url = (payload.get("file") or {}).get("url") or (payload.get("external") or {}).get("url") or ""
        return ImageBlock(
            image_type="file" if image_type == "file" else "external",
            url=url,
            caption=extract_text_content(payload.get("caption")),
            **common
        )
    elif block_type == "child_page":
        return ChildPageBlock(title=payload.get("title") or "Untitled", **common)
    else:
        return UnknownBlock(type=block_type, **common)


def convert_blocks_to_text(blocks: List[Block]) -> str:
    """
    Render blocks to a single plain-text document.

    Paragraphs and headings become blank-line separated lines, list items get
    a bullet or a running number, to-dos a checkbox marker, and code blocks a
    fence labelled with their language. Children are rendered after their
    parent. Images, child pages and unknown blocks produce no text of their own.

    Args:
        blocks: Blocks in document order

    Returns:
        The rendered text
    """
    text = ""
    number = 0

    for block in blocks:
        if isinstance(block, TextBlock) and block.type == "numbered_list_item":
            number += 1
            text += f"{number}. {block.text}\n"
        else:
            number = 0
            if isinstance(block, TextBlock) and block.type == "bulleted_list_item":
                text += f"• {block.text}\n"
            elif isinstance(block, TextBlock):
                text += f"{block.text}\n\n"
            elif isinstance(block, ToDoBlock):
                marker = "[x]" if block.checked else "[ ]"
                text += f"{marker} {block.text}\n"
            elif isinstance(block, CodeBlock):
                text += f"```{block.language}\n{block.text}\n```\n\n"
            else:
                # ImageBlock, ChildPageBlock, UnknownBlock
                pass

        if block.children:
            text += convert_blocks_to_text(block.children)

    return text


def first_image_url(blocks: List[Block]) -> str:
    """URL of the first image in document order, or an empty string."""
    stack = list(reversed(blocks))
    while stack:
        block = stack.pop()
        if isinstance(block, ImageBlock) and block.url:
            return block.url
        stack.extend(reversed(block.children))
    return ""


def generate_excerpt(content: str, max_length: int = 200) -> str:
    """
    Build a short excerpt from page text.

    Prefers ending at a sentence boundary in the second half of the allowed
    length, then at a word boundary, then a hard cut. The last two add "...".

    Args:
        content: Full text
        max_length: Maximum excerpt length before any "..." suffix

    Returns:
        The excerpt
    """
    if len(content) <= max_length:
        return content

    clean = re.sub(r"\s+", " ", content).strip()
    if len(clean) <= max_length:
        return clean

    head = clean[:max_length]
    sentence_break = head.rfind(".")
    if sentence_break != -1 and sentence_break >= max_length / 2:
        return clean[:sentence_break + 1]

    word_break = head.rfind(" ")
    if word_break != -1:
        return clean[:word_break] + "..."

    return head + "..."


def extract_tags(content: str, title: str, category: Optional[str] = None) -> List[str]:
    """
    Mine tags from a page.

    Args:
        content: Page text
        title: Page title; words longer than 3 characters become tags
        category: Category label, always kept as the first tag

    Returns:
        Up to 10 unique tags
    """
    tags: Dict[str, None] = {}

    if category:
        tags[category] = None

    for word in title.split():
        if len(word) > 3:
            tags[word.lower()] = None

    keywords = [
        word.lower()
        for word in content.split()
        if len(word) > 5 and word.isascii() and word.isalpha()
    ]
    # sorted() is stable, so equal counts keep first-occurrence order
    ranked = sorted(Counter(keywords).items(), key=lambda item: -item[1])
    for word, _ in ranked[:MAX_CONTENT_KEYWORDS]:
        tags[word] = None

    return list(tags)[:MAX_TAGS]


def estimate_reading_time(content: str) -> int:
    """Estimate reading time in whole minutes, never less than 1."""
    word_count = len(content.split()) if content else 0
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))


class NotionContent:
    """
    Reads categories and content pages from the source workspace.

    Page content and category lists are cached for the lifetime of the
    instance; one instance is meant to serve one sync run.
    """

    def __init__(self, source: BaseDocumentSource, rate_limit_delay: float = 0.35,
                 course_code_pattern: str = r"^[A-Z]?\d{4}$", course_code_prefix: str = "CITS",
                 max_depth: int = 25):
        """
        Initialize the reader.

        Args:
            source: Document source to read from
            rate_limit_delay: Seconds to wait before each source API call
            course_code_pattern: Regex marking a category name as a course code
            course_code_prefix: Prefix added to course-code category labels
            max_depth: Maximum block nesting depth that will be expanded
        """
        self.source = source
        self.rate_limit_delay = rate_limit_delay
        self.course_code_pattern = re.compile(course_code_pattern)
        self.course_code_prefix = course_code_prefix
        self.max_depth = max_depth
        self._content_cache: Dict[str, PageContent] = {}
        self._category_cache: Dict[str, List[Category]] = {}

    def _delay(self) -> None:
        if self.rate_limit_delay > 0:
            time.sleep(self.rate_limit_delay)

    def fetch_blocks(self, block_id: str) -> List[Block]:
        """
        Fetch all direct children of a block, following pagination.

        Args:
            block_id: Id of the page or block

        Returns:
            Child blocks in source order, without their own children expanded
        """
        blocks: List[Block] = []
        cursor = None

        while True:
            self._delay()
            response = self.source.list_children(block_id, cursor)
            blocks.extend(transform_block(raw) for raw in response.get("results", []))

            cursor = response.get("next_cursor")
            if not (response.get("has_more") and cursor):
                break

        return blocks

    def fetch_nested_blocks(self, blocks: List[Block]) -> List[Block]:
        """
        Expand the children of every block flagged as having them.

        The whole subtree is fetched before returning. There is no cycle
        detection; a source that reports cyclic children is stopped only by
        the depth limit.

        Args:
            blocks: Top-level blocks; modified in place

        Returns:
            The same blocks with `children` populated

        Raises:
            BlockDepthExceededError: If nesting goes deeper than max_depth
        """
        stack = [(block, 1) for block in reversed(blocks) if block.has_children]

        while stack:
            block, depth = stack.pop()
            if depth > self.max_depth:
                raise BlockDepthExceededError(
                    f"Block {block.id} is nested deeper than {self.max_depth} levels"
                )
            block.children = self.fetch_blocks(block.id)
            stack.extend((child, depth + 1) for child in reversed(block.children) if child.has_children)

        return blocks

    def fetch_page_content(self, page_id: str) -> PageContent:
        """
        Fetch a page's metadata and its fully expanded block tree.

        Args:
            page_id: Id of the page

        Returns:
            PageContent, cached for repeat calls
        """
        if page_id in self._content_cache:
            return self._content_cache[page_id]

        self._delay()
        page = self.source.get_page(page_id)
        properties = page.get("properties", {})

        blocks = self.fetch_nested_blocks(self.fetch_blocks(page_id))

        content = PageContent(
            id=page_id,
            title=self._extract_title(properties),
            blocks=blocks,
            properties=properties,
            created_time=page.get("created_time"),
            last_edited_time=page.get("last_edited_time"),
        )
        self._content_cache[page_id] = content
        logging.debug(f"Fetched page '{content.title}' with {len(blocks)} top-level blocks")
        return content

    def _extract_title(self, properties: Dict[str, Any]) -> str:
        title_prop = properties.get("title")
        if not isinstance(title_prop, dict):
            title_prop = next(
                (prop for prop in properties.values() if isinstance(prop, dict) and prop.get("type") == "title"),
                {}
            )
        return extract_text_content(title_prop.get("title")) or "Untitled"

    def extract_categories(self, root_page_id: str) -> List[Category]:
        """
        List the category sub-pages of the root page.

        Args:
            root_page_id: Id of the source root page

        Returns:
            Categories in source order, cached per root page
        """
        if root_page_id in self._category_cache:
            return self._category_cache[root_page_id]

        categories = []
        for block in self.fetch_blocks(root_page_id):
            if not isinstance(block, ChildPageBlock):
                continue
            name = block.title or "Untitled"
            category_type = "mit" if self.course_code_pattern.match(name) else "regular"
            categories.append(Category(id=block.id, name=name, type=category_type))

        self._category_cache[root_page_id] = categories
        logging.info(f"Found {len(categories)} categories under {root_page_id}")
        return categories

    def category_label(self, category: Category) -> str:
        """Destination label for a category: course codes get the prefix."""
        if category.type == "mit":
            return f"{self.course_code_prefix}{category.name}"
        return category.name

    def extract_valid_content(self, root_page_id: str) -> List[ContentPage]:
        """
        Build content pages for every page inside every category.

        Args:
            root_page_id: Id of the source root page

        Returns:
            Content pages, category by category in source order
        """
        pages = []

        for category in self.extract_categories(root_page_id):
            label = self.category_label(category)
            for block in self.fetch_blocks(category.id):
                if not isinstance(block, ChildPageBlock):
                    continue
                page_content = self.fetch_page_content(block.id)
                pages.append(ContentPage(
                    id=block.id,
                    title=page_content.title,
                    parent_id=category.id,
                    category=label,
                    content=self.convert_blocks_to_text(page_content.blocks),
                    image_url=first_image_url(page_content.blocks),
                    created_time=page_content.created_time,
                    last_edited_time=page_content.last_edited_time,
                ))
            logging.info(f"Category '{label}': {len(pages)} content pages so far")

        return pages

    # Text helpers, exposed on the reader for callers holding only an instance
    convert_blocks_to_text = staticmethod(convert_blocks_to_text)
    generate_excerpt = staticmethod(generate_excerpt)
    extract_tags = staticmethod(extract_tags)
    estimate_reading_time = staticmethod(estimate_reading_time)
