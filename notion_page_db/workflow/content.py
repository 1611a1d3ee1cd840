"""
Content enrichment for notion-page-db.

Reads content pages from the source and fills in the derived fields the
destination database needs: title, summary, excerpt, tags and reading time.
"""

import logging
from typing import Dict, List, Optional

from ..ai import AIService, prompt_registry
from ..models import ContentPage, FetchResult
from ..notion.content import NotionContent, estimate_reading_time, extract_tags, generate_excerpt

MIN_FIELD_LENGTH = 10
SUMMARY_LENGTH = 250
EXCERPT_LENGTH = 150


def article_image_prompt(page: ContentPage) -> str:
    """Image prompt for a page's cover image."""
    return prompt_registry.get_prompt("article_image").render(
        title=page.title,
        category=page.category,
        summary=(page.summary or page.title)[:200],
    )


class ContentProcessor:
    """
    Fetches content pages and enriches them.

    Enrichment never mutates a page; each step returns an updated copy.
    """

    def __init__(self, notion_content: NotionContent, ai_service: AIService):
        """
        Initialize the processor.

        Args:
            notion_content: Reader for the source workspace
            ai_service: AI service used for titles, summaries and images
        """
        self.notion_content = notion_content
        self.ai_service = ai_service
        self._processed: Dict[str, ContentPage] = {}

    def fetch_content(self, root_page_id: str) -> FetchResult:
        """
        Read categories and content pages under the root page.

        Args:
            root_page_id: Id of the source root page

        Returns:
            FetchResult; source errors are reported, not raised
        """
        try:
            logging.info(f"Fetching content from page: {root_page_id}")
            categories = self.notion_content.extract_categories(root_page_id)
            if not categories:
                return FetchResult(success=False, errors=["No categories found in the source page"])

            pages = self.notion_content.extract_valid_content(root_page_id)
            if not pages:
                return FetchResult(
                    success=False,
                    categories=categories,
                    errors=["No valid content pages found"]
                )

            for page in pages:
                self._processed[page.id] = page

            logging.info(f"Found {len(pages)} content pages in {len(categories)} categories")
            return FetchResult(success=True, pages=pages, categories=categories)

        except Exception as e:
            logging.error(f"Error fetching content: {e}")
            return FetchResult(success=False, errors=[str(e)])

    def enhance_content(self, page: ContentPage, generate_image: bool = False) -> ContentPage:
        """
        Fill in missing derived fields of a page.

        A new title is generated when the current one is missing or generic,
        a summary and excerpt when they are missing or too short. Tags and
        reading time are always recomputed.

        Args:
            page: The page to enrich
            generate_image: Also generate a cover image when the page has none

        Returns:
            The enriched copy of the page
        """
        updates = {}
        title = page.title

        if "untitled" in title.lower() or len(title) < MIN_FIELD_LENGTH:
            title = self.ai_service.generate_title(page.content, page.title, page_id=page.id)
            updates["title"] = title
            logging.info(f"Enhanced title: {title}")

        summary = page.summary
        if len(summary) < MIN_FIELD_LENGTH:
            summary = self.ai_service.generate_summary(
                page.content, max_length=SUMMARY_LENGTH, style="detailed", page_id=page.id
            )
            updates["summary"] = summary

        if len(page.excerpt) < MIN_FIELD_LENGTH:
            updates["excerpt"] = generate_excerpt(page.content, EXCERPT_LENGTH)

        updates["tags"] = extract_tags(page.content, title, page.category)
        updates["mins_read"] = estimate_reading_time(page.content)

        enhanced = page.model_copy(update=updates)

        if generate_image and not enhanced.image_url:
            result = self.ai_service.generate_image(article_image_prompt(enhanced))
            if result.success and result.url:
                enhanced = enhanced.model_copy(update={"image_url": result.url})
            else:
                logging.error(f"Failed to generate image for '{enhanced.title}': {result.error}")

        self._processed[enhanced.id] = enhanced
        return enhanced

    def enhance_all_content(self, pages: Optional[List[ContentPage]] = None,
                            generate_image: bool = False) -> List[ContentPage]:
        """
        Enrich pages one at a time, keeping their order.

        Args:
            pages: Pages to enrich; defaults to every fetched page
            generate_image: Also generate cover images

        Returns:
            Enriched pages; a page whose enrichment fails is returned unchanged
        """
        pages = list(self._processed.values()) if pages is None else pages
        enhanced = []
        for page in pages:
            try:
                enhanced.append(self.enhance_content(page, generate_image))
            except Exception as e:
                logging.error(f"Error enhancing '{page.title}' ({page.id}): {e}")
                enhanced.append(page)
        return enhanced

    def get_content_page(self, page_id: str) -> Optional[ContentPage]:
        """Latest version of a fetched page, or None."""
        return self._processed.get(page_id)

    def get_all_content_pages(self) -> List[ContentPage]:
        """Latest version of every fetched page."""
        return list(self._processed.values())
