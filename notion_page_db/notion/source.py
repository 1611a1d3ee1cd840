"""
Document sources for notion-page-db.

A document source exposes the two read operations the content reader needs:
page metadata and paginated block children. Responses keep the Notion API
shape (`results`, `has_more`, `next_cursor`).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from notion_client import Client


class BaseDocumentSource(ABC):
    """
    Abstract base class for hierarchical document sources.
    """

    @abstractmethod
    def get_page(self, page_id: str) -> Dict[str, Any]:
        """
        Retrieve page metadata.

        Args:
            page_id: Id of the page

        Returns:
            Page object with `properties`, `created_time` and `last_edited_time`
        """
        pass

    @abstractmethod
    def list_children(self, block_id: str, cursor: Optional[str] = None) -> Dict[str, Any]:
        """
        Retrieve one page of child blocks.

        Args:
            block_id: Id of the parent block or page
            cursor: Continuation cursor from the previous response

        Returns:
            Dictionary with `results`, `has_more` and `next_cursor`
        """
        pass


class NotionSource(BaseDocumentSource):
    """
    Document source backed by the Notion API.
    """

    def __init__(self, client: Client, page_size: int = 100):
        """
        Initialize the source.

        Args:
            client: Authenticated notion-client instance
            page_size: Number of blocks requested per call (Notion allows up to 100)
        """
        self.client = client
        self.page_size = page_size

    def get_page(self, page_id: str) -> Dict[str, Any]:
        return self.client.pages.retrieve(page_id=page_id)

    def list_children(self, block_id: str, cursor: Optional[str] = None) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"block_id": block_id, "page_size": self.page_size}
        if cursor:
            kwargs["start_cursor"] = cursor
        return self.client.blocks.children.list(**kwargs)


def create_notion_client(api_key: str, timeout: float = 30.0) -> Client:
    """
    Create an authenticated Notion client.

    Args:
        api_key: Notion integration token
        timeout: Request timeout in seconds

    Returns:
        notion-client Client instance
    """
    if not api_key:
        raise ValueError("Notion API key is required")
    return Client(auth=api_key, timeout_ms=int(timeout * 1000))
