"""
Network download for release artifacts.

This module provides the transport used by the provisioner:
- HTTP/HTTPS downloads with TLS verification and redirects (GitHub release
  assets redirect to a CDN)
- Streaming to disk in chunks
- Bounded retry with exponential backoff for transient failures
- Temporary download locations under ``RUNNER_TEMP`` when running in CI

Retries live here and only here; callers treat a raised DownloadError as final.
"""

import logging
import os
import tempfile
import time
import uuid
from pathlib import Path
from typing import Optional

import requests
from requests.exceptions import HTTPError, RequestException

from smtsetup.core.exceptions import DownloadError

logger = logging.getLogger(__name__)

TEMP_ENV_VAR = "RUNNER_TEMP"

# Client errors worth another attempt (request timeout, rate limiting)
RETRYABLE_CLIENT_STATUSES = (408, 429)


def get_temp_dir() -> Path:
    """
    Get the directory used for temporary downloads.

    Returns:
        ``$RUNNER_TEMP`` if set, otherwise the system temp directory
    """
    runner_temp = os.environ.get(TEMP_ENV_VAR)
    if runner_temp:
        return Path(runner_temp)
    return Path(tempfile.gettempdir())


def download_file(
    url: str,
    destination: Optional[Path] = None,
    timeout: int = 30,
    max_retries: int = 3,
) -> Path:
    """
    Download file from URL with retry logic.

    Args:
        url: URL to download from
        destination: Local path to save file (default: unique file in temp dir)
        timeout: Request timeout in seconds
        max_retries: Maximum number of attempts

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails after retries
        ValueError: If URL is empty

    Example:
        >>> from smtsetup.core.download import download_file
        >>> archive = download_file(
        ...     "https://github.com/cvc5/cvc5/releases/download/cvc5-1.2.1/"
        ...     "cvc5-Linux-x86_64-static.zip"
        ... )
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if destination is None:
        destination = get_temp_dir() / str(uuid.uuid4())

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    for attempt in range(max_retries):
        try:
            return _download(url, destination, timeout)
        except RequestException as e:
            if not _is_retryable(e) or attempt == max_retries - 1:
                if destination.exists():
                    destination.unlink()
                raise DownloadError(
                    f"Download of {url} failed after {attempt + 1} attempt(s): {e}"
                ) from e

            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)
        except OSError as e:
            raise DownloadError(f"Failed to write {destination}: {e}") from e

    raise DownloadError(f"Download of {url} failed for unknown reason")


def _is_retryable(error: RequestException) -> bool:
    """Client errors other than timeouts and rate limits are final."""
    if isinstance(error, HTTPError) and error.response is not None:
        status = error.response.status_code
        if 400 <= status < 500 and status not in RETRYABLE_CLIENT_STATUSES:
            return False
    return True


def _download(url: str, destination: Path, timeout: int) -> Path:
    """
    Perform a single streaming download attempt.

    Raises:
        RequestException: If the HTTP request fails
    """
    logger.debug(f"Downloading {url}")

    with requests.get(
        url, stream=True, timeout=timeout, allow_redirects=True
    ) as response:
        response.raise_for_status()

        downloaded = 0
        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=8192):
                if chunk:
                    f.write(chunk)
                    downloaded += len(chunk)

    logger.debug(f"Downloaded {downloaded} bytes to {destination}")
    return destination


__all__ = ["download_file", "get_temp_dir", "DownloadError"]
