"""Download URL resolution and secure downloads of Snyk binaries.

Downloads go through an SSL context backed by certifi's CA bundle so they
also work on nodes whose Python cannot reach the system certificate store.
"""

from __future__ import annotations

import os
import shutil
import ssl
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.request import Request, urlopen

import certifi

from snyk_installer import __version__
from snyk_installer.bootstrap.platform import PlatformDescriptor
from snyk_installer.core.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_DOWNLOAD_BASE_URL = "https://static.snyk.io"

# Applied to connect and to each blocking read
DOWNLOAD_TIMEOUT_SECONDS = 10.0

LATEST = "latest"


def normalize_version(version: Optional[str]) -> str:
    """Return a bare version number, or "latest" for an empty version."""
    if version is None:
        return LATEST
    version = version.strip()
    if not version or version.lower() == LATEST:
        return LATEST
    return version[1:] if version[0] in "vV" else version


@dataclass(frozen=True)
class DownloadService:
    """Resolves download URLs of the Snyk CLI and snyk-to-html."""

    base_url: str = DEFAULT_DOWNLOAD_BASE_URL

    def get_download_url_for_snyk(
        self, version: Optional[str], platform: PlatformDescriptor
    ) -> str:
        """URL of the snyk binary for ``platform``.

        Example: https://static.snyk.io/cli/v1.1290.0/snyk-linux
        """
        normalized = normalize_version(version)
        channel = LATEST if normalized == LATEST else f"v{normalized}"
        return f"{self.base_url.rstrip('/')}/cli/{channel}/{platform.snyk_wrapper_file_name}"

    def get_download_url_for_snyk_to_html(self, platform: PlatformDescriptor) -> str:
        """URL of the latest snyk-to-html binary for ``platform``."""
        return (
            f"{self.base_url.rstrip('/')}/snyk-to-html/{LATEST}/"
            f"{platform.snyk_to_html_wrapper_file_name}"
        )


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def secure_urlopen(url: str, timeout: Optional[float] = DOWNLOAD_TIMEOUT_SECONDS):
    """Open a URL with proper SSL certificate verification.

    Raises:
        URLError: If the URL cannot be opened.
        ValueError: If the URL is not HTTPS.
    """
    if not url.startswith("https://"):
        raise ValueError(f"Only HTTPS URLs are supported: {url}")

    request = Request(url, headers={"User-Agent": f"snyk-installer/{__version__}"})
    return urlopen(request, timeout=timeout, context=get_ssl_context())  # nosec B310


def download_file(
    url: str, dest_path: Path, timeout: Optional[float] = DOWNLOAD_TIMEOUT_SECONDS
) -> None:
    """Download ``url`` to ``dest_path``.

    The body is streamed into a temporary file next to ``dest_path`` which
    then replaces it, so an interrupted transfer never leaves a truncated
    binary behind.

    Raises:
        URLError: If the URL cannot be opened.
        ValueError: If the URL is not HTTPS.
        OSError: If the file cannot be written.
    """
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{dest_path.name}.", dir=dest_path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            with secure_urlopen(url, timeout=timeout) as response:
                shutil.copyfileobj(response, f)
        # mkstemp creates 0600
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, dest_path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def make_executable(path: Path) -> None:
    """Set the execute bits for user, group and others.

    Raises:
        OSError: If the mode cannot be changed or did not take effect.
    """
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    if not os.access(path, os.X_OK):
        raise OSError(f"Could not set executable flag for the file: {path}")


class Downloader:
    """Unit of work downloading one file on the node that runs it."""

    def __init__(self, url: str, output: str, timeout: float = DOWNLOAD_TIMEOUT_SECONDS):
        self.url = url
        self.output = output
        self.timeout = timeout

    def __call__(self) -> None:
        downloaded = Path(self.output)
        LOGGER.debug(f"Downloading {self.url} to {downloaded}")
        download_file(self.url, downloaded, timeout=self.timeout)
        if os.name != "nt" and downloaded.is_file():
            try:
                make_executable(downloaded)
            except OSError as ex:
                raise OSError(
                    f"Could not set executable flag for the file: {downloaded}"
                ) from ex
