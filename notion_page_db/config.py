"""
Configuration management for notion-page-db.

This module loads settings from config.yaml, applies overrides from the
environment (including a local .env file) and optionally merges an extra
YAML or JSON file on top. Components receive typed views of the sections they
need instead of reading raw dictionaries.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .models import ValidationResult


class NotionConfig(BaseModel):
    """Settings for the Notion source page and destination database."""

    api_key: str = ""
    source_page_id: str = ""
    target_database_name: str = "Content Database"
    resolved_database_id: Optional[str] = Field(
        default=None,
        description="Destination database id, written back once verified"
    )
    rate_limit_delay: int = Field(default=350, description="Milliseconds between source API calls")
    timeout: float = 30.0


class AIConfig(BaseModel):
    """Settings for the AI enrichment service."""

    provider: str = "openai"
    api_key: str = ""
    model: str = "gpt-3.5-turbo"
    image_model: str = "dall-e-3"
    max_tokens: int = 500
    temperature: float = 0.7


class StorageConfig(BaseModel):
    """Settings for the S3-compatible image archive."""

    provider: str = "r2"
    access_key_id: str = ""
    secret_access_key: str = ""
    bucket_name: str = ""
    account_id: str = ""
    region: str = "auto"
    base_url: str = ""
    use_presigned_urls: bool = False


# Environment variable -> (config key path, converter). The first variable
# that is set wins for a given key.
ENV_OVERRIDES = [
    ("NOTION_API_KEY", "notion.api_key", str),
    ("SOURCE_PAGE_ID", "notion.source_page_id", str),
    ("NOTION_SOURCE_PAGE_ID", "notion.source_page_id", str),
    ("NOTION_TARGET_DATABASE_NAME", "notion.target_database_name", str),
    ("NOTION_TARGET_DATABASE_ID", "notion.resolved_database_id", str),
    ("NOTION_DATABASE_ID", "notion.resolved_database_id", str),
    ("NOTION_RATE_LIMIT_DELAY", "notion.rate_limit_delay", int),
    ("AI_PROVIDER", "ai.provider", str),
    ("AI_API_KEY", "ai.api_key", str),
    ("OPENAI_API_KEY", "ai.api_key", str),
    ("AI_MODEL", "ai.model", str),
    ("AI_IMAGE_MODEL", "ai.image_model", str),
    ("AI_MAX_TOKENS", "ai.max_tokens", int),
    ("AI_TEMPERATURE", "ai.temperature", float),
    ("STORAGE_PROVIDER", "storage.provider", str),
    ("STORAGE_ACCESS_KEY_ID", "storage.access_key_id", str),
    ("R2_ACCESS_KEY_ID", "storage.access_key_id", str),
    ("STORAGE_SECRET_ACCESS_KEY", "storage.secret_access_key", str),
    ("R2_SECRET_ACCESS_KEY", "storage.secret_access_key", str),
    ("STORAGE_BUCKET_NAME", "storage.bucket_name", str),
    ("R2_BUCKET_NAME", "storage.bucket_name", str),
    ("STORAGE_ACCOUNT_ID", "storage.account_id", str),
    ("R2_ACCOUNT_ID", "storage.account_id", str),
    ("STORAGE_REGION", "storage.region", str),
    ("STORAGE_BASE_URL", "storage.base_url", str),
    ("R2_PUBLIC_URL", "storage.base_url", str),
    ("STORAGE_USE_PRESIGNED_URLS", "storage.use_presigned_urls", lambda v: v.lower() in ("1", "true", "yes")),
]


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two dictionaries.

    Args:
        base: Dictionary providing the defaults
        override: Dictionary whose values take precedence

    Returns:
        A new merged dictionary; neither input is modified
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


class ConfigManager:
    """
    Manages configuration loading and access for notion-page-db.
    """

    def __init__(self, config_path: str = "config.yaml", env_file: Optional[str] = ".env",
                 use_environment: bool = True):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the YAML configuration file
            env_file: Optional .env file loaded before environment overrides
            use_environment: Whether environment variables override file values
        """
        self.config_path = Path(config_path)
        self.env_file = env_file
        self.use_environment = use_environment
        self._config: Dict[str, Any] = {}
        self._notion_config: Optional[NotionConfig] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from the YAML file, then apply environment overrides."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}

            self._config = deep_merge(self._get_default_config(), loaded)
            logging.info(f"Configuration loaded from {self.config_path}")

        except Exception as e:
            logging.error(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = self._get_default_config()

        if self.use_environment:
            if self.env_file and Path(self.env_file).exists():
                load_dotenv(self.env_file)
            self._apply_environment()

        self._notion_config = None

    def _apply_environment(self) -> None:
        """Override configuration values from environment variables."""
        applied = set()
        for env_name, key_path, convert in ENV_OVERRIDES:
            if key_path in applied:
                continue
            value = os.environ.get(env_name)
            if value is None or value == "":
                continue
            try:
                self.set(key_path, convert(value))
                applied.add(key_path)
            except ValueError:
                logging.warning(f"Ignoring invalid value for {env_name}: {value!r}")

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "notion": {
                "api_key": "",
                "source_page_id": "",
                "target_database_name": "Content Database",
                "resolved_database_id": "",
                "rate_limit_delay": 350,
                "timeout": 30.0
            },
            "source": {
                "course_code_pattern": r"^[A-Z]?\d{4}$",
                "course_code_prefix": "CITS",
                "max_depth": 25
            },
            "ai": {
                "provider": "openai",
                "api_key": "",
                "model": "gpt-3.5-turbo",
                "image_model": "dall-e-3",
                "max_tokens": 500,
                "temperature": 0.7
            },
            "storage": {
                "provider": "r2",
                "access_key_id": "",
                "secret_access_key": "",
                "bucket_name": "",
                "account_id": "",
                "region": "auto",
                "base_url": "",
                "use_presigned_urls": False
            },
            "paths": {
                "state_db": "notion_page_db.duckdb",
                "log_file": "notion_page_db.log",
                "image_temp_dir": "tmp/notion-page-db-images",
                "schema_file": "config/database-schema.json"
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "migration": {
                "enhance_content": True,
                "process_images": True,
                "generate_images": True
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "ai.model")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("ai.model")  # Returns "gpt-3.5-turbo"
            config.get("source.course_code_prefix")  # Returns "CITS"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """
        Set a configuration value using dot notation, creating sections as needed.

        Setting a notion.* value rebuilds the shared NotionConfig on next access.

        Args:
            key_path: Dot-separated path to the configuration value
            value: New value
        """
        keys = key_path.split('.')
        section = self._config
        for key in keys[:-1]:
            if not isinstance(section.get(key), dict):
                section[key] = {}
            section = section[key]
        section[keys[-1]] = value
        if keys[0] == "notion":
            self._notion_config = None

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def merge_file(self, path: str) -> None:
        """
        Deep-merge an extra YAML or JSON configuration file on top of the current values.

        Args:
            path: Path to the file

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file does not contain a mapping
        """
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {file_path}")

        with open(file_path, 'r', encoding='utf-8') as f:
            if file_path.suffix.lower() == ".json":
                overrides = json.load(f)
            else:
                overrides = yaml.safe_load(f) or {}

        if not isinstance(overrides, dict):
            raise ValueError(f"Configuration file {file_path} must contain a mapping")

        self._config = deep_merge(self._config, overrides)
        self._notion_config = None
        logging.info(f"Merged configuration from {file_path}")

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def validate(self) -> ValidationResult:
        """
        Check that the settings required for a sync run are present.

        Returns:
            ValidationResult listing every problem found
        """
        result = ValidationResult()

        if not self.get("notion.api_key"):
            result.errors.append("Notion API key is required")
        if not self.get("notion.source_page_id"):
            result.errors.append("Notion source page ID is required")

        if self.get("ai.provider", "openai") != "none" and not self.get("ai.api_key"):
            result.errors.append("AI API key is required")

        if self.get("storage.provider") == "r2":
            required = {
                "R2_ACCOUNT_ID": "storage.account_id",
                "R2_ACCESS_KEY_ID": "storage.access_key_id",
                "R2_SECRET_ACCESS_KEY": "storage.secret_access_key",
                "R2_BUCKET_NAME": "storage.bucket_name",
            }
            for env_name, key_path in required.items():
                if not self.get(key_path):
                    result.errors.append(f"{env_name} is required")

        if not self.get("storage.base_url") and not self.get("storage.use_presigned_urls"):
            result.warnings.append(
                "R2_PUBLIC_URL is not set; image URLs will fall back to the bucket endpoint"
            )

        result.valid = not result.errors
        return result

    # Typed views of configuration sections

    @property
    def notion_config(self) -> NotionConfig:
        """
        Shared Notion settings.

        The same instance is returned until the configuration is reloaded, so a
        database id written back by one component is seen by all others.
        """
        if self._notion_config is None:
            section = dict(self.get_section("notion"))
            section["resolved_database_id"] = section.get("resolved_database_id") or None
            self._notion_config = NotionConfig(**section)
        return self._notion_config

    @property
    def ai_config(self) -> AIConfig:
        """Get AI service settings."""
        return AIConfig(**self.get_section("ai"))

    @property
    def storage_config(self) -> StorageConfig:
        """Get storage settings."""
        return StorageConfig(**self.get_section("storage"))

    # Convenience properties for commonly used values

    @property
    def rate_limit_delay(self) -> float:
        """Get the source API delay in seconds."""
        return self.get("notion.rate_limit_delay", 350) / 1000.0

    @property
    def course_code_pattern(self) -> str:
        """Get the regex that marks a category name as a course code."""
        return self.get("source.course_code_pattern", r"^[A-Z]?\d{4}$")

    @property
    def course_code_prefix(self) -> str:
        """Get the prefix added to course-code category labels."""
        return self.get("source.course_code_prefix", "CITS")

    @property
    def max_depth(self) -> int:
        """Get the maximum block nesting depth expanded by the reader."""
        return self.get("source.max_depth", 25)

    @property
    def state_db_filename(self) -> str:
        """Get the local state database filename."""
        return self.get("paths.state_db", "notion_page_db.duckdb")

    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("paths.log_file", "notion_page_db.log")

    @property
    def image_temp_dir(self) -> str:
        """Get the temporary directory for downloaded images."""
        return self.get("paths.image_temp_dir", "tmp/notion-page-db-images")

    @property
    def schema_file(self) -> str:
        """Get the optional schema override file path."""
        return self.get("paths.schema_file", "config/database-schema.json")


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config
