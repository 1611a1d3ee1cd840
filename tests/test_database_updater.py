"""
Unit tests for destination row reconciliation.
"""

import unittest
from unittest.mock import MagicMock

from notion_page_db.models import ContentPage, DestinationRow
from notion_page_db.workflow import DatabaseUpdater, build_create_properties, build_properties


def make_page(page_id="page-1", **kwargs):
    data = {
        "id": page_id,
        "parent_id": "cat-js",
        "title": "Understanding Closures",
        "category": "JavaScript",
        "content": "A closure captures variables.",
        "summary": "Closures explained.",
        "excerpt": "A closure captures variables.",
        "tags": ["JavaScript", "closures"],
        "mins_read": 2,
    }
    data.update(kwargs)
    return ContentPage(**data)


def existing_row(row_id, page_id):
    return DestinationRow(
        id=row_id,
        properties={"Original Page": {"url": f"https://www.notion.so/{page_id.replace('-', '')}"}},
    )


class TestBuildProperties(unittest.TestCase):
    """Test the synced property payload."""

    def test_required_properties(self):
        """Test the always-present properties."""
        properties = build_properties(make_page())

        self.assertEqual(properties["Title"]["title"][0]["text"]["content"], "Understanding Closures")
        self.assertEqual(properties["Category"], {"select": {"name": "JavaScript"}})
        self.assertEqual(properties["Mins Read"], {"number": 2})
        self.assertEqual(properties["Original Page"], {"url": "https://www.notion.so/page1"})
        self.assertEqual(properties["Tags"]["multi_select"], [{"name": "JavaScript"}, {"name": "closures"}])

    def test_curation_fields_excluded(self):
        """Test Status and Published are never part of the synced payload."""
        properties = build_properties(make_page())

        self.assertNotIn("Status", properties)
        self.assertNotIn("Published", properties)

    def test_optional_properties(self):
        """Test optional properties appear only when set."""
        bare = build_properties(make_page(tags=[]))
        for name in ("Date Created", "Image", "R2ImageUrl", "Tags"):
            self.assertNotIn(name, bare)

        full = build_properties(make_page(
            created_time="2024-01-01T00:00:00.000Z",
            image_url="https://images.example.com/a.png",
            r2_image_url="https://images.example.com/a.png",
        ))
        self.assertEqual(full["Date Created"], {"date": {"start": "2024-01-01T00:00:00.000Z"}})
        self.assertEqual(full["Image"], {"url": "https://images.example.com/a.png"})
        self.assertEqual(full["R2ImageUrl"], {"url": "https://images.example.com/a.png"})

    def test_create_properties_add_defaults(self):
        """Test new rows start as unpublished drafts."""
        properties = build_create_properties(make_page())

        self.assertEqual(properties["Status"], {"select": {"name": "Draft"}})
        self.assertEqual(properties["Published"], {"checkbox": False})


class TestDatabaseUpdater(unittest.TestCase):
    """Test create-or-update decisions."""

    def setUp(self):
        """Set up an updater over a mocked database client."""
        self.database = MagicMock()
        self.database.query_entries.return_value = []
        self.updater = DatabaseUpdater(self.database)

    def test_initialize_indexes_by_url_and_id(self):
        """Test existing rows are reachable by both keys."""
        row = existing_row("row-1", "page-1")
        self.database.query_entries.return_value = [row]

        self.updater.initialize("db-1")

        self.database.set_database_id.assert_called_once_with("db-1")
        self.assertIs(self.updater.get_existing_entry("https://www.notion.so/page1"), row)
        self.assertIs(self.updater.get_existing_entry("row-1"), row)

    def test_initialize_propagates_errors(self):
        """Test the updater refuses to run without the existing rows."""
        self.database.query_entries.side_effect = RuntimeError("rate limited")

        with self.assertRaises(RuntimeError):
            self.updater.initialize()

    def test_update_existing_entry(self):
        """Test a page with a row is updated without curation fields."""
        self.database.query_entries.return_value = [existing_row("row-1", "page-1")]
        self.updater.initialize()

        result = self.updater.update_entry(make_page())

        self.assertTrue(result.success)
        self.assertFalse(result.is_new)
        self.assertEqual(result.entry_id, "row-1")
        entry_id, properties = self.database.update_entry.call_args.args
        self.assertEqual(entry_id, "row-1")
        self.assertNotIn("Status", properties)
        self.assertNotIn("Published", properties)
        self.database.create_entry.assert_not_called()

    def test_create_new_entry(self):
        """Test a page without a row is created and indexed."""
        self.database.create_entry.return_value = "row-new"
        self.updater.initialize()

        result = self.updater.update_entry(make_page())

        self.assertTrue(result.success)
        self.assertTrue(result.is_new)
        self.assertEqual(result.entry_id, "row-new")
        created = self.database.create_entry.call_args.args[0]
        self.assertEqual(created["Status"], {"select": {"name": "Draft"}})

        by_url = self.updater.get_existing_entry("https://www.notion.so/page1")
        by_id = self.updater.get_existing_entry("row-new")
        self.assertIsNotNone(by_url)
        self.assertIs(by_url, by_id)

    def test_second_sync_of_same_page_updates(self):
        """Test a page created earlier in the run is updated, not duplicated."""
        self.database.create_entry.return_value = "row-new"
        self.updater.initialize()

        self.updater.update_entry(make_page())
        result = self.updater.update_entry(make_page(summary="Changed summary."))

        self.assertFalse(result.is_new)
        self.assertEqual(self.database.create_entry.call_count, 1)
        self.database.update_entry.assert_called_once()

    def test_failures_are_reported(self):
        """Test API failures become failed results."""
        self.database.create_entry.side_effect = RuntimeError("Failed to create entry: boom")
        self.updater.initialize()

        result = self.updater.update_entry(make_page())

        self.assertFalse(result.success)
        self.assertEqual(result.page_id, "page-1")
        self.assertIn("boom", result.error)

    def test_update_entries_keeps_order(self):
        """Test one result per page in input order, failures included."""
        self.database.create_entry.side_effect = ["row-a", RuntimeError("boom"), "row-c"]
        self.updater.initialize()

        results = self.updater.update_entries([make_page("a"), make_page("b"), make_page("c")])

        self.assertEqual([result.page_id for result in results], ["a", "b", "c"])
        self.assertEqual([result.success for result in results], [True, False, True])

    def test_get_all_existing_entries_unique(self):
        """Test rows indexed under two keys are listed once."""
        self.database.query_entries.return_value = [
            existing_row("row-1", "page-1"),
            existing_row("row-2", "page-2"),
        ]
        self.updater.initialize()

        self.assertEqual([row.id for row in self.updater.get_all_existing_entries()], ["row-1", "row-2"])


if __name__ == '__main__':
    unittest.main()
