"""
Sync orchestration for notion-page-db.

`MigrationManager` wires the reader, enrichment, image archiving and database
reconciliation together and runs them in order for one sync run.
"""

import logging
from typing import List, Optional

from notion_client import Client

from ..ai import AIService
from ..config import ConfigManager
from ..models import ContentPage, MigrationResult, VerificationResult
from ..notion import (
    BaseDocumentSource,
    NotionContent,
    NotionDatabase,
    NotionSource,
    create_notion_client,
)
from ..state import StateManager
from ..storage import StorageService
from .content import ContentProcessor
from .images import ImageProcessor
from .updater import DatabaseUpdater
from .verifier import DatabaseVerifier


class MigrationManager:
    """
    Runs a complete sync from the source page to the destination database.
    """

    def __init__(self, config_manager: ConfigManager,
                 source: Optional[BaseDocumentSource] = None,
                 notion_client: Optional[Client] = None,
                 ai_service: Optional[AIService] = None,
                 storage_service: Optional[StorageService] = None,
                 state_manager: Optional[StateManager] = None):
        """
        Build every component from configuration.

        Components passed in explicitly are used as-is.

        Args:
            config_manager: Loaded configuration
            source: Document source; defaults to the Notion API
            notion_client: notion-client instance; created from the API key when omitted
            ai_service: AI service; created from the ai section when omitted
            storage_service: Image bucket; created from the storage section when
                omitted and the section is complete
            state_manager: Local state store; created from paths.state_db when omitted
        """
        self.config = config_manager
        self.notion_config = config_manager.notion_config
        delay = config_manager.rate_limit_delay

        if notion_client is None and self.notion_config.api_key:
            notion_client = create_notion_client(self.notion_config.api_key, self.notion_config.timeout)

        if source is None:
            if notion_client is None:
                raise ValueError("Notion API key is required")
            source = NotionSource(notion_client)

        self.state_manager = state_manager or StateManager(config_manager.state_db_filename)
        self.notion_content = NotionContent(
            source,
            rate_limit_delay=delay,
            course_code_pattern=config_manager.course_code_pattern,
            course_code_prefix=config_manager.course_code_prefix,
            max_depth=config_manager.max_depth,
        )
        self.ai_service = ai_service or AIService(config_manager.ai_config, state_manager=self.state_manager)
        self.content_processor = ContentProcessor(self.notion_content, self.ai_service)

        self.notion_database: Optional[NotionDatabase] = None
        self.database_verifier: Optional[DatabaseVerifier] = None
        self.database_updater: Optional[DatabaseUpdater] = None
        if notion_client is not None:
            self.notion_database = NotionDatabase(
                notion_client,
                database_id=self.notion_config.resolved_database_id,
                database_name=self.notion_config.target_database_name,
                rate_limit_delay=delay,
            )
            self.database_verifier = DatabaseVerifier(self.notion_database, self.notion_config)
            self.database_updater = DatabaseUpdater(self.notion_database)

        if storage_service is None:
            try:
                storage_service = StorageService(config_manager.storage_config)
            except ValueError as e:
                logging.warning(f"Image archiving disabled: {e}")
        self.storage_service = storage_service

        self.image_processor: Optional[ImageProcessor] = None
        if self.storage_service is not None:
            self.image_processor = ImageProcessor(
                self.ai_service,
                self.storage_service,
                state_manager=self.state_manager,
                temp_dir=config_manager.image_temp_dir,
            )

    def verify(self, parent_page_id: Optional[str] = None) -> VerificationResult:
        """
        Verify the destination database, creating it under a parent page if asked.

        Args:
            parent_page_id: Page to create the database under when it is missing

        Returns:
            VerificationResult
        """
        if self.database_verifier is None:
            return VerificationResult(success=False, errors=["Notion API key is required"])

        if parent_page_id:
            schema = self.database_verifier.load_schema_config(self.config.schema_file)
            return self.database_verifier.create_database_if_needed(parent_page_id, schema)

        result = self.database_verifier.verify_database(self.notion_config.resolved_database_id)
        if result.success:
            self.notion_config.resolved_database_id = result.database_id
        return result

    def migrate(self, enhance_content: bool = True, process_images: bool = True,
                generate_images: bool = True, parent_page_id: Optional[str] = None,
                dry_run: bool = False) -> MigrationResult:
        """
        Run the sync.

        Steps: verify the database, index existing rows, read the source,
        enrich, archive images, then create or update one row per page.

        Args:
            enhance_content: Run AI enrichment
            process_images: Archive images to storage
            generate_images: Generate images for pages without one
            parent_page_id: Create the database under this page if it is missing
            dry_run: Read and enrich only; nothing is written to the database or bucket

        Returns:
            MigrationResult with per-page outcomes
        """
        logging.info("Starting migration process...")

        try:
            with self.state_manager:
                return self._run(enhance_content, process_images, generate_images, parent_page_id, dry_run)
        except Exception as e:
            logging.error(f"Migration failed: {e}")
            return MigrationResult(success=False, errors=[str(e)])
        finally:
            if self.image_processor:
                self.image_processor.cleanup()

    def _run(self, enhance_content: bool, process_images: bool, generate_images: bool,
             parent_page_id: Optional[str], dry_run: bool) -> MigrationResult:
        if not dry_run:
            logging.info("Verifying database...")
            verification = self.verify(parent_page_id)
            if not verification.success:
                return MigrationResult(
                    success=False,
                    errors=[f"Database verification failed: {', '.join(verification.errors)}"]
                )
            self.database_updater.initialize(verification.database_id)

        logging.info("Fetching content...")
        fetch_result = self.content_processor.fetch_content(self.notion_config.source_page_id)
        if not fetch_result.success:
            return MigrationResult(
                success=False,
                categories=len(fetch_result.categories),
                errors=[f"Content fetching failed: {', '.join(fetch_result.errors)}"]
            )

        pages: List[ContentPage] = fetch_result.pages
        logging.info(f"Fetched {len(pages)} content pages from {len(fetch_result.categories)} categories")

        if enhance_content:
            logging.info("Enhancing content...")
            pages = self.content_processor.enhance_all_content(pages)

        if process_images and not dry_run:
            if self.image_processor is None:
                logging.warning("Skipping images: storage is not configured")
            else:
                logging.info("Processing images...")
                self.image_processor.initialize()
                pages, _ = self.image_processor.process_all_images(pages, generate_images)

        if dry_run:
            for page in pages:
                logging.info(f"[dry run] {page.category} / {page.title} ({page.mins_read} min, tags: {', '.join(page.tags)})")
            return MigrationResult(
                success=True,
                total_pages=len(pages),
                categories=len(fetch_result.categories)
            )

        logging.info("Updating database...")
        results = self.database_updater.update_entries(pages)
        failed = [result for result in results if not result.success]
        logging.info(f"Updated {len(results) - len(failed)} entries, {len(failed)} failed")

        return MigrationResult(
            success=True,
            total_pages=len(pages),
            updated_pages=len(results) - len(failed),
            failed_pages=len(failed),
            categories=len(fetch_result.categories),
            errors=[f"{result.page_id}: {result.error}" for result in failed],
            results=results
        )
