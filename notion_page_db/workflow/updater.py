"""
Database reconciliation for notion-page-db.

`DatabaseUpdater` decides for every content page whether the destination
database already has a row for it. Existing rows are indexed twice, by their
"Original Page" URL and by their own id, and both keys refer to the same row
object. Status and Published belong to manual curation: they are set when a
row is created and never touched on update.
"""

import logging
from typing import Any, Dict, List, Optional

from ..models import ContentPage, DestinationRow, Status, UpdateResult, page_url_for_id
from ..notion.database import NotionDatabase


def _rich_text(text: str) -> List[Dict[str, Any]]:
    return [{"type": "text", "text": {"content": text}}]


def build_properties(page: ContentPage) -> Dict[str, Any]:
    """
    Build the property payload synced for a content page.

    Status and Published are not part of it; see `build_create_properties`.

    Args:
        page: The enriched content page

    Returns:
        Notion property values keyed by property name
    """
    properties: Dict[str, Any] = {
        "Title": {"title": _rich_text(page.title)},
        "Category": {"select": {"name": page.category}},
        "Summary": {"rich_text": _rich_text(page.summary)},
        "Excerpt": {"rich_text": _rich_text(page.excerpt)},
        "Mins Read": {"number": page.mins_read or 0},
        "Original Page": {"url": page_url_for_id(page.id)},
    }

    if page.created_time:
        properties["Date Created"] = {"date": {"start": page.created_time}}

    if page.image_url:
        properties["Image"] = {"url": page.image_url}

    if page.r2_image_url:
        properties["R2ImageUrl"] = {"url": page.r2_image_url}

    if page.tags:
        properties["Tags"] = {"multi_select": [{"name": tag} for tag in page.tags]}

    return properties


def build_create_properties(page: ContentPage) -> Dict[str, Any]:
    """Payload for a new row: the synced properties plus Draft / unpublished defaults."""
    properties = build_properties(page)
    properties["Status"] = {"select": {"name": Status.DRAFT.value}}
    properties["Published"] = {"checkbox": False}
    return properties


class DatabaseUpdater:
    """
    Creates or updates destination rows for content pages.

    One instance serves one sync run; the row index lives on the instance.
    """

    def __init__(self, notion_database: NotionDatabase):
        """
        Initialize the updater.

        Args:
            notion_database: Client for the destination database
        """
        self.notion_database = notion_database
        self._existing_entries: Dict[str, DestinationRow] = {}

    def initialize(self, database_id: Optional[str] = None) -> None:
        """
        Load every existing row into the index.

        Args:
            database_id: Database to read; defaults to the client's current one

        Raises:
            Exception: Any query failure is propagated; the updater cannot
                decide between create and update without the baseline
        """
        if database_id:
            self.notion_database.set_database_id(database_id)

        self._existing_entries.clear()
        try:
            rows = self.notion_database.query_entries(page_size=100)
        except Exception as e:
            logging.error(f"Failed to load existing database entries: {e}")
            raise

        for row in rows:
            self._index(row)

        logging.info(f"Indexed {len(rows)} existing database entries")

    def _index(self, row: DestinationRow, url: Optional[str] = None) -> None:
        key_url = url or row.original_page_url
        if key_url:
            self._existing_entries[key_url] = row
        self._existing_entries[row.id] = row

    def update_entry(self, page: ContentPage) -> UpdateResult:
        """
        Sync one content page.

        Args:
            page: The enriched content page

        Returns:
            UpdateResult; failures are reported, never raised
        """
        page_url = page_url_for_id(page.id)
        existing = self._existing_entries.get(page_url)

        try:
            if existing:
                self.notion_database.update_entry(existing.id, build_properties(page))
                logging.info(f"Updated entry for '{page.title}' ({existing.id})")
                return UpdateResult(
                    success=True,
                    page_id=page.id,
                    entry_id=existing.id,
                    is_new=False,
                    message=f"Updated entry for {page.title}"
                )

            properties = build_create_properties(page)
            entry_id = self.notion_database.create_entry(properties)
            self._index(DestinationRow(id=entry_id, properties=properties), url=page_url)
            logging.info(f"Created entry for '{page.title}' ({entry_id})")
            return UpdateResult(
                success=True,
                page_id=page.id,
                entry_id=entry_id,
                is_new=True,
                message=f"Created entry for {page.title}"
            )

        except Exception as e:
            logging.error(f"Failed to sync '{page.title}' ({page.id}): {e}")
            return UpdateResult(success=False, page_id=page.id, error=str(e))

    def update_entries(self, pages: List[ContentPage]) -> List[UpdateResult]:
        """
        Sync content pages one at a time, in order.

        Args:
            pages: Enriched content pages

        Returns:
            One result per page, in input order
        """
        results = []
        for index, page in enumerate(pages, start=1):
            logging.info(f"Syncing page {index}/{len(pages)}: {page.title}")
            results.append(self.update_entry(page))
        return results

    def get_existing_entry(self, key: str) -> Optional[DestinationRow]:
        """
        Look up a row by its id or by its source page URL.

        Args:
            key: Row id or "Original Page" URL

        Returns:
            The row, or None
        """
        return self._existing_entries.get(key)

    def get_all_existing_entries(self) -> List[DestinationRow]:
        """Every indexed row, once, in first-indexed order."""
        unique: Dict[int, DestinationRow] = {}
        for row in self._existing_entries.values():
            unique.setdefault(id(row), row)
        return list(unique.values())
