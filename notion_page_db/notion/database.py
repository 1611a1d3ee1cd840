"""
Destination database client for notion-page-db.

Thin wrapper over the Notion databases and pages endpoints. It holds the id
of the destination database and knows how to find it by name, create it from
a `DatabaseSchema`, and read and write its rows.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from notion_client import Client

from ..models import DatabaseSchema, DestinationRow, PropertyDescriptor
from .schema import default_schema


def _plain_title(title: List[Dict[str, Any]]) -> str:
    # API responses carry plain_text; payloads built locally only text.content
    return "".join(
        part.get("plain_text") or part.get("text", {}).get("content", "")
        for part in title or []
    )


class NotionDatabase:
    """
    Reads and writes rows of the destination database.
    """

    def __init__(self, client: Client, database_id: Optional[str] = None,
                 database_name: str = "Content Database", rate_limit_delay: float = 0.35):
        """
        Initialize the client.

        Args:
            client: Authenticated notion-client instance
            database_id: Known database id, if any
            database_name: Title used to look the database up when the id is unknown
            rate_limit_delay: Seconds to wait between paginated query calls
        """
        self.client = client
        self.database_id = database_id
        self.database_name = database_name
        self.rate_limit_delay = rate_limit_delay

    def get_database_id(self) -> Optional[str]:
        return self.database_id

    def set_database_id(self, database_id: str) -> None:
        self.database_id = database_id

    def find_database_by_name(self) -> Optional[str]:
        """
        Search the workspace for a database titled `database_name`.

        The match is case-insensitive. When found the id is remembered.

        Returns:
            Database id, or None if no database matches
        """
        try:
            response = self.client.search(
                query=self.database_name,
                filter={"property": "object", "value": "database"},
            )
        except Exception as e:
            logging.error(f"Error searching for database '{self.database_name}': {e}")
            return None

        wanted = self.database_name.lower()
        for result in response.get("results", []):
            if _plain_title(result.get("title", [])).lower() == wanted:
                self.database_id = result["id"]
                logging.info(f"Found database '{self.database_name}' with ID {self.database_id}")
                return self.database_id

        return None

    def verify_database(self) -> bool:
        """
        Check that the destination database exists and is accessible.

        Returns:
            True if the database could be retrieved
        """
        if not self.database_id and not self.find_database_by_name():
            return False

        try:
            self.client.databases.retrieve(database_id=self.database_id)
            return True
        except Exception as e:
            logging.error(f"Database {self.database_id} is not accessible: {e}")
            return False

    def initialize_database(self, parent_page_id: Optional[str] = None,
                            schema: Optional[DatabaseSchema] = None) -> str:
        """
        Find the destination database by name, or create it.

        Args:
            parent_page_id: Page to create the database under if it is missing
            schema: Schema for a new database; defaults to the built-in schema

        Returns:
            The database id

        Raises:
            ValueError: If the database is missing and no parent page was given
        """
        existing = self.find_database_by_name()
        if existing:
            return existing

        if not parent_page_id:
            raise ValueError("Database not found and cannot be created without a parent page ID")

        return self.create_database(schema or default_schema(self.database_name), parent_page_id)

    def create_database(self, schema: DatabaseSchema, parent_page_id: str) -> str:
        """
        Create a database from a schema.

        Args:
            schema: Database schema
            parent_page_id: Page the database is created under

        Returns:
            Id of the new database
        """
        properties = {
            name: self._property_definition(descriptor)
            for name, descriptor in schema.properties.items()
        }

        response = self.client.databases.create(
            parent={"type": "page_id", "page_id": parent_page_id},
            title=[{"type": "text", "text": {"content": schema.name}}],
            properties=properties,
        )
        self.database_id = response["id"]
        self.database_name = schema.name
        logging.info(f"Created database '{schema.name}' with ID {self.database_id}")
        return self.database_id

    def _property_definition(self, descriptor: PropertyDescriptor) -> Dict[str, Any]:
        if descriptor.type in ("select", "multi_select"):
            options = [option.model_dump(exclude_none=True) for option in descriptor.options or []]
            return {descriptor.type: {"options": options}}
        if descriptor.type == "number":
            return {"number": {"format": descriptor.format or "number"}}
        return {descriptor.type: {}}

    def _require_database_id(self) -> str:
        if not self.database_id:
            raise RuntimeError("Database ID is not set")
        return self.database_id

    def query_entries(self, filter: Optional[Dict[str, Any]] = None,
                      sorts: Optional[List[Dict[str, Any]]] = None,
                      page_size: int = 100, limit: Optional[int] = None) -> List[DestinationRow]:
        """
        Query rows of the destination database.

        Pages through all results with the continuation cursor unless a
        limit is given.

        Args:
            filter: Optional Notion filter object
            sorts: Optional Notion sort list
            page_size: Rows requested per API call (at most 100)
            limit: Maximum number of rows returned

        Returns:
            Rows in query order
        """
        database_id = self._require_database_id()
        rows: List[DestinationRow] = []
        cursor = None

        while True:
            kwargs: Dict[str, Any] = {"database_id": database_id, "page_size": min(page_size, 100)}
            if filter:
                kwargs["filter"] = filter
            if sorts:
                kwargs["sorts"] = sorts
            if cursor:
                kwargs["start_cursor"] = cursor

            response = self.client.databases.query(**kwargs)
            rows.extend(DestinationRow.from_api(page) for page in response.get("results", []))

            cursor = response.get("next_cursor")
            if (limit is not None and len(rows) >= limit) or not (response.get("has_more") and cursor):
                break
            if self.rate_limit_delay > 0:
                time.sleep(self.rate_limit_delay)

        return rows if limit is None else rows[:limit]

    def create_entry(self, properties: Dict[str, Any]) -> str:
        """
        Create a row.

        Args:
            properties: Notion property values

        Returns:
            Id of the new row

        Raises:
            RuntimeError: If the API call fails
        """
        database_id = self._require_database_id()
        try:
            response = self.client.pages.create(
                parent={"database_id": database_id},
                properties=properties,
            )
            return response["id"]
        except Exception as e:
            raise RuntimeError(f"Failed to create entry: {e}") from e

    def update_entry(self, entry_id: str, properties: Dict[str, Any]) -> None:
        """
        Update the properties of a row.

        Args:
            entry_id: Id of the row
            properties: Notion property values to set

        Raises:
            RuntimeError: If the API call fails
        """
        try:
            self.client.pages.update(page_id=entry_id, properties=properties)
        except Exception as e:
            raise RuntimeError(f"Failed to update entry: {e}") from e

    def batch_update_entries(self, updates: List[Dict[str, Any]]) -> None:
        """
        Update several rows, one after another.

        Args:
            updates: Items of the form {"id": ..., "properties": {...}}
        """
        for update in updates:
            self.update_entry(update["id"], update["properties"])

    def upsert_entry(self, properties: Dict[str, Any]) -> str:
        """
        Update the row with the same title, or create a new one.

        Args:
            properties: Notion property values; must include "Title"

        Returns:
            Id of the updated or created row
        """
        title = _plain_title(properties.get("Title", {}).get("title", []))

        matches = self.query_entries(
            filter={"property": "Title", "title": {"equals": title}},
            limit=1,
        )
        if matches:
            self.update_entry(matches[0].id, properties)
            return matches[0].id

        return self.create_entry(properties)
