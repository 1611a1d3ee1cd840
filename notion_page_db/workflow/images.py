"""
Image archiving for notion-page-db.

Every content page can carry a cover image. Images hosted elsewhere are
downloaded and copied into the storage bucket; pages without an image can get
a generated one. Progress is recorded in the state store so completed pages
are skipped on later runs.
"""

import logging
import shutil
import time
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from ..ai import AIService
from ..models import ContentPage, ImageProcessingResult
from ..state import StateManager
from ..storage import StorageService, download_file
from .content import article_image_prompt


class ImageProcessor:
    """
    Moves content page images into the storage bucket.
    """

    def __init__(self, ai_service: AIService, storage_service: StorageService,
                 state_manager: Optional[StateManager] = None,
                 temp_dir: str = "tmp/notion-page-db-images"):
        """
        Initialize the image processor.

        Args:
            ai_service: Used to generate missing images
            storage_service: Destination bucket
            state_manager: Optional task ledger shared across runs
            temp_dir: Directory for downloaded files
        """
        self.ai_service = ai_service
        self.storage_service = storage_service
        self.state_manager = state_manager
        self.temp_dir = Path(temp_dir)

    def initialize(self) -> None:
        """Create the temporary directory."""
        self.temp_dir.mkdir(parents=True, exist_ok=True)

    def process_images(self, page: ContentPage, generate_if_missing: bool = True) -> ImageProcessingResult:
        """
        Archive the image of one page.

        Args:
            page: The content page
            generate_if_missing: Generate an image when the page has none

        Returns:
            ImageProcessingResult with the storage URL on success
        """
        if self.state_manager:
            stored_url = self.state_manager.get_storage_url(page.id)
            if stored_url:
                logging.info(f"Image for '{page.title}' already archived: {stored_url}")
                return ImageProcessingResult(
                    success=True, page_id=page.id, image_url=page.image_url or stored_url,
                    storage_url=stored_url
                )

        if page.image_url and self.storage_service.is_storage_url(page.image_url):
            return ImageProcessingResult(
                success=True, page_id=page.id, image_url=page.image_url, storage_url=page.image_url
            )

        if not page.image_url and not generate_if_missing:
            return ImageProcessingResult(
                success=False, page_id=page.id, error="No image URL and generation not requested"
            )

        if self.state_manager:
            self.state_manager.create_or_update_task(page.id, page.title, page.image_url or None)

        try:
            generated = not page.image_url
            if generated:
                source_url, local_path = self._generate(page)
            else:
                source_url, local_path = self._download(page)

            storage_result = self.storage_service.upload_image(str(local_path), {
                "title": page.title,
                "description": page.summary,
                "alt": f"Image for {page.title}",
                "sourceUrl": source_url,
                "tags": page.tags,
            })
            local_path.unlink(missing_ok=True)

            if not storage_result.success:
                raise RuntimeError(storage_result.error or "Failed to upload image to storage")

            if self.state_manager:
                self.state_manager.complete_task(page.id, storage_result.url, source_url)

            return ImageProcessingResult(
                success=True,
                page_id=page.id,
                image_url=source_url,
                storage_url=storage_result.url,
                generated=generated
            )

        except Exception as e:
            logging.error(f"Error processing image for '{page.title}': {e}")
            if self.state_manager:
                self.state_manager.fail_task(page.id, str(e))
            return ImageProcessingResult(success=False, page_id=page.id, error=str(e))

    def _download(self, page: ContentPage) -> Tuple[str, Path]:
        name = Path(urlparse(page.image_url).path).name or "image.jpg"
        local_path = self.temp_dir / f"{int(time.time() * 1000)}-{name}"
        logging.info(f"Downloading image from: {page.image_url}")
        return page.image_url, download_file(page.image_url, str(local_path))

    def _generate(self, page: ContentPage) -> Tuple[str, Path]:
        local_path = self.temp_dir / f"{int(time.time() * 1000)}-{page.id}.png"
        logging.info(f"Generating image for: {page.title}")
        result = self.ai_service.generate_image(article_image_prompt(page), local_path=str(local_path))
        if not result.success or not result.url or not result.local_path:
            raise RuntimeError(result.error or "Failed to generate image")
        return result.url, Path(result.local_path)

    def process_all_images(self, pages: List[ContentPage],
                           generate_if_missing: bool = True) -> Tuple[List[ContentPage], List[ImageProcessingResult]]:
        """
        Archive images for several pages, one at a time.

        Args:
            pages: Content pages
            generate_if_missing: Generate images for pages without one

        Returns:
            Tuple of (pages pointing at their archived images, per-page results)
        """
        updated_pages = []
        results = []
        for page in pages:
            result = self.process_images(page, generate_if_missing)
            results.append(result)
            if result.success and result.storage_url:
                page = page.model_copy(update={
                    "image_url": result.storage_url,
                    "r2_image_url": result.storage_url,
                })
            updated_pages.append(page)
        return updated_pages, results

    def cleanup(self) -> None:
        """Remove everything in the temporary directory."""
        if not self.temp_dir.exists():
            return
        for path in self.temp_dir.iterdir():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
        logging.info(f"Cleaned up temporary images in {self.temp_dir}")
