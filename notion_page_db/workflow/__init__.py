"""Sync workflow: enrichment, image archiving, reconciliation and orchestration."""

from .content import ContentProcessor
from .images import ImageProcessor
from .updater import DatabaseUpdater, build_properties, build_create_properties
from .verifier import DatabaseVerifier
from .migration import MigrationManager

__all__ = [
    "ContentProcessor",
    "ImageProcessor",
    "DatabaseUpdater",
    "build_properties",
    "build_create_properties",
    "DatabaseVerifier",
    "MigrationManager",
]
