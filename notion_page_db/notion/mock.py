"""
In-memory document source for notion-page-db.

Serves a hardcoded workspace (or one supplied by the caller) with the same
response shapes as the Notion API, including cursor pagination. Used for dry
runs and tests without network access.
"""

from typing import Any, Dict, List, Optional

from .source import BaseDocumentSource


def rich_text(text: str) -> List[Dict[str, Any]]:
    """Build a single-run rich-text array."""
    return [{"type": "text", "plain_text": text, "text": {"content": text}}]


def make_block(block_id: str, block_type: str, has_children: bool = False, **payload) -> Dict[str, Any]:
    """
    Build a raw block object.

    Args:
        block_id: Id of the block
        block_type: Notion block type
        has_children: Whether the block has nested blocks
        **payload: Type-specific payload (e.g. rich_text=..., checked=...)

    Returns:
        Block object in Notion API shape
    """
    return {
        "object": "block",
        "id": block_id,
        "type": block_type,
        "has_children": has_children,
        block_type: payload,
    }


def make_page(page_id: str, title: str, created_time: str = "2024-01-01T00:00:00.000Z",
              last_edited_time: str = "2024-01-02T00:00:00.000Z") -> Dict[str, Any]:
    """Build a raw page object with a title property."""
    return {
        "object": "page",
        "id": page_id,
        "created_time": created_time,
        "last_edited_time": last_edited_time,
        "properties": {"title": {"id": "title", "type": "title", "title": rich_text(title)}},
    }


class MockDocumentSource(BaseDocumentSource):
    """
    Document source that serves pages and blocks from memory.
    """

    def __init__(self, pages: Optional[Dict[str, Dict[str, Any]]] = None,
                 children: Optional[Dict[str, List[Dict[str, Any]]]] = None,
                 page_size: int = 100):
        """
        Initialize the mock source.

        Args:
            pages: Page id to page object; defaults to a small sample workspace
            children: Block id to ordered list of child blocks
            page_size: Number of blocks returned per call
        """
        if pages is None and children is None:
            pages, children = self._create_sample_workspace()
        self.pages = pages or {}
        self.children = children or {}
        self.page_size = page_size
        self.calls: List[tuple] = []

    def get_page(self, page_id: str) -> Dict[str, Any]:
        self.calls.append(("get_page", page_id))
        if page_id not in self.pages:
            raise KeyError(f"Page not found: {page_id}")
        return self.pages[page_id]

    def list_children(self, block_id: str, cursor: Optional[str] = None) -> Dict[str, Any]:
        self.calls.append(("list_children", block_id, cursor))
        items = self.children.get(block_id, [])
        start = int(cursor) if cursor else 0
        end = start + self.page_size
        has_more = end < len(items)
        return {
            "object": "list",
            "results": items[start:end],
            "has_more": has_more,
            "next_cursor": str(end) if has_more else None,
        }

    def _create_sample_workspace(self):
        """
        Create a small workspace: one root page, two categories, three articles.

        Returns:
            Tuple of (pages, children)
        """
        pages = {
            "root": make_page("root", "Knowledge Base"),
            "page-closures": make_page("page-closures", "Understanding Closures in JavaScript"),
            "page-hooks": make_page("page-hooks", "React Hooks Basics"),
            "page-graphs": make_page("page-graphs", "Graph Search Algorithms"),
        }
        children = {
            "root": [
                make_block("cat-js", "child_page", True, title="JavaScript"),
                make_block("cat-3701", "child_page", True, title="3701"),
                make_block("root-intro", "paragraph", rich_text=rich_text("Index of all notes.")),
            ],
            "cat-js": [
                make_block("page-closures", "child_page", True, title="Understanding Closures in JavaScript"),
                make_block("page-hooks", "child_page", True, title="React Hooks Basics"),
            ],
            "cat-3701": [
                make_block("page-graphs", "child_page", True, title="Graph Search Algorithms"),
            ],
            "page-closures": [
                make_block("c1", "heading_1", rich_text=rich_text("Closures")),
                make_block("c2", "paragraph", rich_text=rich_text(
                    "A closure captures variables from its enclosing function scope. "
                    "Closures are everywhere in callback-heavy JavaScript code."
                )),
                make_block("c3", "code", rich_text=rich_text("const add = a => b => a + b;"), language="javascript"),
                make_block("c4", "bulleted_list_item", True, rich_text=rich_text("Common uses")),
            ],
            "c4": [
                make_block("c5", "bulleted_list_item", rich_text=rich_text("Event handlers")),
                make_block("c6", "bulleted_list_item", rich_text=rich_text("Memoization")),
            ],
            "page-hooks": [
                make_block("h1", "paragraph", rich_text=rich_text(
                    "Hooks let function components manage state and side effects."
                )),
                make_block("h2", "to_do", rich_text=rich_text("Read about useEffect"), checked=True),
                make_block("h3", "to_do", rich_text=rich_text("Try useReducer"), checked=False),
            ],
            "page-graphs": [
                make_block("g1", "heading_2", rich_text=rich_text("Breadth-first search")),
                make_block("g2", "numbered_list_item", rich_text=rich_text("Enqueue the start vertex")),
                make_block("g3", "numbered_list_item", rich_text=rich_text("Visit neighbours level by level")),
                make_block("g4", "image", type="external", external={"url": "https://example.com/bfs.png"},
                           caption=rich_text("BFS frontier")),
            ],
        }
        return pages, children
