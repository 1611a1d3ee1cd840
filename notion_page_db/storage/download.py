"""
HTTP download helper for notion-page-db.
"""

import logging
from pathlib import Path

import httpx


def download_file(url: str, destination: str, timeout: float = 30.0) -> Path:
    """
    Stream a remote file to disk.

    Args:
        url: URL to download
        destination: Local file path; parent directories are created
        timeout: Request timeout in seconds

    Returns:
        Path of the written file

    Raises:
        httpx.HTTPError: If the request fails or returns an error status
    """
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)

    with httpx.Client(timeout=timeout, follow_redirects=True) as client:
        with client.stream("GET", url) as response:
            response.raise_for_status()
            with open(path, 'wb') as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)

    logging.debug(f"Downloaded {url} to {path}")
    return path
