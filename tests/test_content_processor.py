"""
Unit tests for content fetching and enrichment.
"""

import unittest
from unittest.mock import MagicMock

from notion_page_db.models import ContentPage, ImageResult
from notion_page_db.notion import MockDocumentSource, NotionContent
from notion_page_db.notion.mock import make_block, rich_text
from notion_page_db.workflow import ContentProcessor

CONTENT = (
    "Closures capture variables from their enclosing function. "
    "Closures power callbacks, closures power memoization."
)


def make_page(**kwargs):
    data = {"id": "page-1", "parent_id": "cat-js", "title": "Understanding Closures",
            "category": "JavaScript", "content": CONTENT}
    data.update(kwargs)
    return ContentPage(**data)


class TestFetchContent(unittest.TestCase):
    """Test reading content pages through the processor."""

    def setUp(self):
        """Set up a processor over the sample workspace."""
        self.ai_service = MagicMock()
        self.processor = ContentProcessor(NotionContent(MockDocumentSource(), rate_limit_delay=0), self.ai_service)

    def test_fetch_content(self):
        """Test all sample pages are fetched and remembered."""
        result = self.processor.fetch_content("root")

        self.assertTrue(result.success)
        self.assertEqual(len(result.categories), 2)
        self.assertEqual(len(result.pages), 3)
        self.assertEqual(self.processor.get_content_page("page-hooks").title, "React Hooks Basics")
        self.assertEqual(len(self.processor.get_all_content_pages()), 3)

    def test_no_categories(self):
        """Test a root page without sub-pages."""
        source = MockDocumentSource(pages={}, children={
            "root": [make_block("p", "paragraph", rich_text=rich_text("Just text"))]
        })
        processor = ContentProcessor(NotionContent(source, rate_limit_delay=0), self.ai_service)

        result = processor.fetch_content("root")

        self.assertFalse(result.success)
        self.assertEqual(result.errors, ["No categories found in the source page"])

    def test_no_content_pages(self):
        """Test categories without pages."""
        source = MockDocumentSource(pages={}, children={
            "root": [make_block("cat", "child_page", True, title="Empty")],
            "cat": [],
        })
        processor = ContentProcessor(NotionContent(source, rate_limit_delay=0), self.ai_service)

        result = processor.fetch_content("root")

        self.assertFalse(result.success)
        self.assertEqual(result.errors, ["No valid content pages found"])
        self.assertEqual(len(result.categories), 1)

    def test_source_error(self):
        """Test source failures are reported."""
        source = MagicMock()
        source.list_children.side_effect = Exception("unauthorized")
        processor = ContentProcessor(NotionContent(source, rate_limit_delay=0), self.ai_service)

        result = processor.fetch_content("root")

        self.assertFalse(result.success)
        self.assertEqual(result.errors, ["unauthorized"])


class TestEnhanceContent(unittest.TestCase):
    """Test filling in derived fields."""

    def setUp(self):
        """Set up a processor with a mocked AI service."""
        self.ai_service = MagicMock()
        self.ai_service.generate_title.return_value = "Mastering JavaScript Closures"
        self.ai_service.generate_summary.return_value = "A tour of closures."
        self.processor = ContentProcessor(MagicMock(), self.ai_service)

    def test_missing_fields_generated(self):
        """Test short titles, summaries and excerpts are filled in."""
        page = make_page(title="Hooks")

        enhanced = self.processor.enhance_content(page)

        self.assertEqual(enhanced.title, "Mastering JavaScript Closures")
        self.assertEqual(enhanced.summary, "A tour of closures.")
        self.assertTrue(enhanced.excerpt.startswith("Closures capture variables"))
        self.assertEqual(enhanced.tags[:3], ["JavaScript", "mastering", "javascript"])
        self.assertIn("closures", enhanced.tags)
        self.assertEqual(enhanced.mins_read, 1)

        self.ai_service.generate_title.assert_called_once_with(CONTENT, "Hooks", page_id="page-1")
        self.ai_service.generate_summary.assert_called_once_with(
            CONTENT, max_length=250, style="detailed", page_id="page-1"
        )
        self.assertEqual(page.title, "Hooks")

    def test_untitled_is_regenerated(self):
        """Test generic titles are replaced even when long."""
        self.processor.enhance_content(make_page(title="Untitled page from import"))
        self.ai_service.generate_title.assert_called_once()

    def test_existing_fields_kept(self):
        """Test good titles, summaries and excerpts are not regenerated."""
        page = make_page(summary="An existing summary.", excerpt="An existing excerpt.")

        enhanced = self.processor.enhance_content(page)

        self.assertEqual(enhanced.title, "Understanding Closures")
        self.assertEqual(enhanced.summary, "An existing summary.")
        self.assertEqual(enhanced.excerpt, "An existing excerpt.")
        self.ai_service.generate_title.assert_not_called()
        self.ai_service.generate_summary.assert_not_called()

    def test_generate_image(self):
        """Test an image is generated for pages without one when asked."""
        self.ai_service.generate_image.return_value = ImageResult(success=True, url="https://ai.example.com/1.png")

        enhanced = self.processor.enhance_content(make_page(), generate_image=True)

        self.assertEqual(enhanced.image_url, "https://ai.example.com/1.png")

    def test_image_generation_failure_keeps_page(self):
        """Test a failed generation leaves the image empty."""
        self.ai_service.generate_image.return_value = ImageResult(success=False, error="quota")

        enhanced = self.processor.enhance_content(make_page(), generate_image=True)

        self.assertEqual(enhanced.image_url, "")

    def test_enhance_all_content_keeps_failed_pages(self):
        """Test a page whose enrichment fails is passed through unchanged."""
        self.ai_service.generate_title.side_effect = [Exception("boom"), "A Perfectly Good Title"]
        pages = [make_page(id="a", title="Short"), make_page(id="b", title="Tiny")]

        enhanced = self.processor.enhance_all_content(pages)

        self.assertIs(enhanced[0], pages[0])
        self.assertEqual(enhanced[1].title, "A Perfectly Good Title")
        self.assertEqual(self.processor.get_content_page("b").title, "A Perfectly Good Title")


if __name__ == '__main__':
    unittest.main()
