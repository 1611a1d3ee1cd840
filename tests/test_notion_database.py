"""
Unit tests for the destination database client.

The notion-client instance is replaced with a MagicMock.
"""

import unittest
from unittest.mock import MagicMock

from notion_page_db.notion import NotionDatabase, default_schema


def api_row(row_id, title="", url=None):
    properties = {"Title": {"title": [{"plain_text": title}]}}
    if url:
        properties["Original Page"] = {"url": url}
    return {"object": "page", "id": row_id, "properties": properties}


class TestNotionDatabase(unittest.TestCase):
    """Test database lookup, provisioning and row access."""

    def setUp(self):
        """Set up a database client over a mocked API."""
        self.client = MagicMock()
        self.database = NotionDatabase(self.client, database_name="Content Database", rate_limit_delay=0)

    def test_find_database_by_name_case_insensitive(self):
        """Test the database title is matched ignoring case."""
        self.client.search.return_value = {"results": [
            {"id": "other", "title": [{"plain_text": "Something else"}]},
            {"id": "db-1", "title": [{"plain_text": "content DATABASE"}]},
        ]}

        self.assertEqual(self.database.find_database_by_name(), "db-1")
        self.assertEqual(self.database.get_database_id(), "db-1")
        self.client.search.assert_called_once_with(
            query="Content Database",
            filter={"property": "object", "value": "database"},
        )

    def test_find_database_not_found(self):
        """Test a search without a matching title."""
        self.client.search.return_value = {"results": []}
        self.assertIsNone(self.database.find_database_by_name())

    def test_find_database_search_error(self):
        """Test search failures are reported as not found."""
        self.client.search.side_effect = Exception("unauthorized")
        self.assertIsNone(self.database.find_database_by_name())

    def test_verify_database(self):
        """Test verification retrieves the database."""
        self.database.set_database_id("db-1")

        self.assertTrue(self.database.verify_database())
        self.client.databases.retrieve.assert_called_once_with(database_id="db-1")

    def test_verify_database_not_accessible(self):
        """Test verification fails when retrieval fails."""
        self.database.set_database_id("db-1")
        self.client.databases.retrieve.side_effect = Exception("object_not_found")

        self.assertFalse(self.database.verify_database())

    def test_verify_database_unknown(self):
        """Test verification fails without an id or a match by name."""
        self.client.search.return_value = {"results": []}

        self.assertFalse(self.database.verify_database())
        self.client.databases.retrieve.assert_not_called()

    def test_initialize_database_requires_parent(self):
        """Test a missing database cannot be created without a parent page."""
        self.client.search.return_value = {"results": []}

        with self.assertRaises(ValueError):
            self.database.initialize_database()

    def test_initialize_database_uses_existing(self):
        """Test an existing database is reused."""
        self.client.search.return_value = {"results": [
            {"id": "db-1", "title": [{"plain_text": "Content Database"}]},
        ]}

        self.assertEqual(self.database.initialize_database("parent"), "db-1")
        self.client.databases.create.assert_not_called()

    def test_initialize_database_creates(self):
        """Test a missing database is created from the default schema."""
        self.client.search.return_value = {"results": []}
        self.client.databases.create.return_value = {"id": "db-new"}

        database_id = self.database.initialize_database("parent-page")

        self.assertEqual(database_id, "db-new")
        kwargs = self.client.databases.create.call_args.kwargs
        self.assertEqual(kwargs["parent"], {"type": "page_id", "page_id": "parent-page"})
        self.assertEqual(kwargs["title"][0]["text"]["content"], "Content Database")

        properties = kwargs["properties"]
        self.assertEqual(set(properties), set(default_schema().properties))
        self.assertEqual(properties["Title"], {"title": {}})
        self.assertEqual(properties["Mins Read"], {"number": {"format": "number"}})
        self.assertIn({"name": "Draft", "color": "gray"}, properties["Status"]["select"]["options"])
        self.assertEqual(properties["Tags"], {"multi_select": {"options": []}})

    def test_query_entries_follows_cursor(self):
        """Test every result page is read."""
        self.database.set_database_id("db-1")
        self.client.databases.query.side_effect = [
            {"results": [api_row("r1"), api_row("r2")], "has_more": True, "next_cursor": "cur-2"},
            {"results": [api_row("r3")], "has_more": False, "next_cursor": None},
        ]

        rows = self.database.query_entries(page_size=2)

        self.assertEqual([row.id for row in rows], ["r1", "r2", "r3"])
        second_call = self.client.databases.query.call_args_list[1].kwargs
        self.assertEqual(second_call["start_cursor"], "cur-2")
        self.assertEqual(second_call["page_size"], 2)

    def test_query_entries_limit(self):
        """Test a limit stops pagination early."""
        self.database.set_database_id("db-1")
        self.client.databases.query.return_value = {
            "results": [api_row("r1"), api_row("r2")], "has_more": True, "next_cursor": "cur-2"
        }

        rows = self.database.query_entries(limit=1)

        self.assertEqual([row.id for row in rows], ["r1"])
        self.assertEqual(self.client.databases.query.call_count, 1)

    def test_query_entries_requires_database_id(self):
        """Test querying without a database id raises."""
        with self.assertRaises(RuntimeError):
            self.database.query_entries()

    def test_create_entry(self):
        """Test creating a row returns its id."""
        self.database.set_database_id("db-1")
        self.client.pages.create.return_value = {"id": "row-1"}

        self.assertEqual(self.database.create_entry({"Title": {}}), "row-1")
        self.client.pages.create.assert_called_once_with(
            parent={"database_id": "db-1"}, properties={"Title": {}}
        )

    def test_create_entry_failure(self):
        """Test API failures are wrapped."""
        self.database.set_database_id("db-1")
        self.client.pages.create.side_effect = Exception("validation_error")

        with self.assertRaises(RuntimeError) as context:
            self.database.create_entry({})
        self.assertIn("Failed to create entry: validation_error", str(context.exception))

    def test_update_entry_failure(self):
        """Test update failures are wrapped."""
        self.client.pages.update.side_effect = Exception("conflict")

        with self.assertRaises(RuntimeError) as context:
            self.database.update_entry("row-1", {})
        self.assertIn("Failed to update entry: conflict", str(context.exception))

    def test_batch_update_entries(self):
        """Test batch updates are applied in order."""
        self.database.batch_update_entries([
            {"id": "row-1", "properties": {"Summary": {}}},
            {"id": "row-2", "properties": {"Excerpt": {}}},
        ])

        calls = self.client.pages.update.call_args_list
        self.assertEqual([call.kwargs["page_id"] for call in calls], ["row-1", "row-2"])

    def test_upsert_entry_updates_match(self):
        """Test upsert updates the row with the same title."""
        self.database.set_database_id("db-1")
        self.client.databases.query.return_value = {
            "results": [api_row("row-1", "Closures")], "has_more": False, "next_cursor": None
        }
        properties = {"Title": {"title": [{"type": "text", "text": {"content": "Closures"}}]}}

        self.assertEqual(self.database.upsert_entry(properties), "row-1")
        query_kwargs = self.client.databases.query.call_args.kwargs
        self.assertEqual(query_kwargs["filter"], {"property": "Title", "title": {"equals": "Closures"}})
        self.client.pages.update.assert_called_once_with(page_id="row-1", properties=properties)
        self.client.pages.create.assert_not_called()

    def test_upsert_entry_creates(self):
        """Test upsert creates a row when no title matches."""
        self.database.set_database_id("db-1")
        self.client.databases.query.return_value = {"results": [], "has_more": False, "next_cursor": None}
        self.client.pages.create.return_value = {"id": "row-new"}

        properties = {"Title": {"title": [{"type": "text", "text": {"content": "New"}}]}}
        self.assertEqual(self.database.upsert_entry(properties), "row-new")


if __name__ == '__main__':
    unittest.main()
