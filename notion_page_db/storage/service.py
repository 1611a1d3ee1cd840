"""
Blob storage service for notion-page-db.

Archives images to Cloudflare R2 or any other S3-compatible bucket through
boto3, and resolves the public URL of stored objects.
"""

import logging
import mimetypes
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import boto3

from ..config import StorageConfig
from ..models import StorageItem, StorageResult

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".pdf": "application/pdf",
    ".json": "application/json",
    ".txt": "text/plain",
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
}

# Object metadata keys copied from the caller's metadata
METADATA_FIELDS = ("title", "description", "alt", "author", "sourceUrl")


def content_type_for(key: str) -> str:
    """
    Guess a content type from a file name or object key.

    Args:
        key: File name, path or object key

    Returns:
        MIME type, "application/octet-stream" when unknown
    """
    suffix = Path(key).suffix.lower()
    if suffix in CONTENT_TYPES:
        return CONTENT_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(key)
    return guessed or "application/octet-stream"


class StorageService:
    """
    Stores and lists objects in the image bucket.
    """

    def __init__(self, storage_config: StorageConfig, client=None):
        """
        Initialize the storage service.

        Args:
            storage_config: Bucket, credentials and URL settings
            client: Pre-built boto3 S3 client; created from the config when omitted

        Raises:
            ValueError: If provider, bucket or credentials are missing
        """
        missing = [
            name for name, value in (
                ("provider", storage_config.provider),
                ("bucket_name", storage_config.bucket_name),
                ("access_key_id", storage_config.access_key_id),
                ("secret_access_key", storage_config.secret_access_key),
            ) if not value
        ]
        if missing:
            raise ValueError(f"Storage configuration is incomplete, missing: {', '.join(missing)}")

        self.config = storage_config
        self.bucket_name = storage_config.bucket_name
        self.base_url = storage_config.base_url
        self.client = client or self._create_client()

    def _create_client(self):
        kwargs: Dict[str, Any] = {
            "aws_access_key_id": self.config.access_key_id,
            "aws_secret_access_key": self.config.secret_access_key,
            "region_name": self.config.region or "auto",
        }
        if self.config.provider == "r2":
            if not self.config.account_id:
                raise ValueError("R2 storage requires an account ID")
            kwargs["endpoint_url"] = f"https://{self.config.account_id}.r2.cloudflarestorage.com"
        return boto3.client("s3", **kwargs)

    def upload_image(self, file_path: str, metadata: Optional[Dict[str, Any]] = None) -> StorageResult:
        """
        Upload a local image.

        Args:
            file_path: Path of the image file
            metadata: Optional title, description, alt, author, sourceUrl and tags

        Returns:
            StorageResult with the object key and public URL
        """
        try:
            path = Path(file_path)
            body = path.read_bytes()
            content_type = content_type_for(path.name)

            timestamp = datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")
            key = f"images/{timestamp}-{path.name}"

            object_metadata = {}
            for field in METADATA_FIELDS:
                if metadata and metadata.get(field):
                    object_metadata[field] = str(metadata[field])
            if metadata and metadata.get("tags"):
                object_metadata["tags"] = ",".join(metadata["tags"])

            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type,
                Metadata=object_metadata,
            )

            url = self.get_public_url(key)
            logging.info(f"Uploaded {path.name} to {url}")
            return StorageResult(
                success=True,
                key=key,
                url=url,
                content_type=content_type,
                size=len(body),
            )

        except Exception as e:
            logging.error(f"Error uploading image {file_path}: {e}")
            return StorageResult(success=False, error=str(e))

    def get_public_url(self, key: str, expires_in: int = 3600) -> str:
        """
        Resolve the URL of a stored object.

        Presigned when configured, otherwise based on the public base URL,
        otherwise the bucket endpoint.

        Args:
            key: Object key
            expires_in: Lifetime of a presigned URL in seconds

        Returns:
            The URL
        """
        if self.config.use_presigned_urls:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expires_in,
            )

        if self.base_url:
            return f"{self.base_url.rstrip('/')}/{key.lstrip('/')}"

        region = self.config.region or "auto"
        return f"https://{self.bucket_name}.r2.{region}.cloudflarestorage.com/{key}"

    def list_items(self, prefix: str = "") -> List[StorageItem]:
        """
        List objects under a prefix.

        Args:
            prefix: Key prefix

        Returns:
            Stored items across every result page; empty if listing fails
        """
        items = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                for obj in page.get("Contents", []):
                    key = obj.get("Key", "")
                    items.append(StorageItem(
                        key=key,
                        url=self.get_public_url(key),
                        size=obj.get("Size", 0),
                        last_modified=obj.get("LastModified"),
                        content_type=content_type_for(key),
                        etag=obj.get("ETag", ""),
                    ))
        except Exception as e:
            logging.error(f"Error listing items under '{prefix}': {e}")
            return []

        return items

    def delete_item(self, key: str) -> bool:
        """
        Delete an object.

        Returns:
            True if the delete request succeeded
        """
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
            return True
        except Exception as e:
            logging.error(f"Error deleting {key}: {e}")
            return False

    def copy_item(self, source_key: str, destination_key: str) -> StorageResult:
        """
        Copy an object within the bucket.

        Args:
            source_key: Key to copy from
            destination_key: Key to copy to

        Returns:
            StorageResult for the new object
        """
        try:
            self.client.copy_object(
                Bucket=self.bucket_name,
                CopySource={"Bucket": self.bucket_name, "Key": source_key},
                Key=destination_key,
            )
            return StorageResult(
                success=True,
                key=destination_key,
                url=self.get_public_url(destination_key),
                content_type=content_type_for(destination_key),
            )
        except Exception as e:
            logging.error(f"Error copying {source_key} to {destination_key}: {e}")
            return StorageResult(success=False, error=str(e))

    def is_storage_url(self, url: str) -> bool:
        """
        Whether a URL points at an object in this bucket.

        Only the public base URL, the bucket's own virtual host and the
        account endpoint with the bucket in the path count. Other S3 or R2
        hosts, such as the signed links Notion serves for uploaded files,
        are not archived copies.
        """
        if not url:
            return False
        if self.base_url and url.startswith(self.base_url.rstrip('/') + '/'):
            return True

        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
        bucket = self.bucket_name.lower()

        if self.config.provider == "r2":
            if host.startswith(f"{bucket}.r2.") and host.endswith(".cloudflarestorage.com"):
                return True
            endpoint = f"{self.config.account_id}.r2.cloudflarestorage.com".lower()
            if host == f"{bucket}.{endpoint}":
                return True
            return host == endpoint and parsed.path.startswith(f"/{self.bucket_name}/")

        if host.startswith(f"{bucket}.s3.") and host.endswith(".amazonaws.com"):
            return True
        return (host.startswith("s3.") and host.endswith(".amazonaws.com")
                and parsed.path.startswith(f"/{self.bucket_name}/"))
