"""Secure download utilities with SSL certificate handling.

This module provides SSL-aware download functions that work correctly
on macOS standalone interpreters where the system certificate store is not
accessible by default, plus archive extraction for release assets.
"""

from __future__ import annotations

import os
import shutil
import ssl
import tarfile
import tempfile
import zipfile
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union
from urllib.request import Request, urlopen

import certifi

from kclserver import __version__ as KCLSERVER_VERSION
from kclserver.core.logging import get_logger

LOGGER = get_logger(__name__)

USER_AGENT = f"kclserver/{KCLSERVER_VERSION}"


class ArchiveKind(str, Enum):
    """Archive formats release assets are published in."""

    ZIP = "zip"
    GZIP_TAR = "gzip_tar"

    @property
    def suffix(self) -> str:
        return ".zip" if self is ArchiveKind.ZIP else ".tar.gz"


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle.

    Returns:
        An SSL context configured with certifi's CA certificates.
    """
    return ssl.create_default_context(cafile=certifi.where())


def secure_urlopen(
    url: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: Optional[float] = None,
):
    """Open a URL with proper SSL certificate verification.

    Args:
        url: The URL to open.
        headers: Extra request headers.
        timeout: Socket timeout in seconds. When None the transport default
            applies.

    Returns:
        A file-like object for reading the response.

    Raises:
        URLError: If the URL cannot be opened.
        ValueError: If the URL is not HTTPS.
    """
    if not url.startswith("https://"):
        raise ValueError(f"Only HTTPS URLs are supported: {url}")

    request = Request(url, headers={"User-Agent": USER_AGENT, **(headers or {})})
    kwargs = {"context": get_ssl_context()}
    if timeout is not None:
        kwargs["timeout"] = timeout
    return urlopen(request, **kwargs)  # nosec B310


def download_file(
    url: str,
    dest_dir: Union[str, Path],
    kind: ArchiveKind,
    timeout: Optional[float] = None,
) -> None:
    """Download an archive and extract it into a directory.

    The archive is streamed to a temporary file first, which is always
    removed afterwards.

    Args:
        url: The URL to download from.
        dest_dir: Directory to extract into; created if missing.
        kind: Archive format of the download.
        timeout: Socket timeout in seconds, or None for the transport default.

    Raises:
        URLError: If the URL cannot be opened.
        ValueError: If the URL is not HTTPS or the archive contains unsafe paths.
        OSError: If the archive cannot be written or extracted.
    """
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)

    LOGGER.debug(f"Downloading from {url}")

    # Use delete=False and manually clean up to avoid Windows file locking issues
    tmp_file = tempfile.NamedTemporaryFile(suffix=kind.suffix, delete=False)
    tmp_path = Path(tmp_file.name)
    try:
        with secure_urlopen(url, timeout=timeout) as response:
            shutil.copyfileobj(response, tmp_file)
        # Close the file before extracting (required on Windows)
        tmp_file.close()

        if kind is ArchiveKind.ZIP:
            extract_zip(tmp_path, dest_dir)
        else:
            extract_tarball(tmp_path, dest_dir)

        LOGGER.debug(f"Extracted {url} to {dest_dir}")

    finally:
        if not tmp_file.closed:
            tmp_file.close()
        tmp_path.unlink(missing_ok=True)


def _check_member(dest_dir: Path, name: str) -> None:
    member_path = (dest_dir / name).resolve()
    if not member_path.is_relative_to(dest_dir.resolve()):
        raise ValueError(f"Path traversal detected: {name}")


def extract_zip(archive_path: Path, dest_dir: Path) -> None:
    """Extract a .zip archive, rejecting members outside ``dest_dir``."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        for name in zf.namelist():
            _check_member(dest_dir, name)
        zf.extractall(dest_dir)


def extract_tarball(archive_path: Path, dest_dir: Path) -> None:
    """Extract a .tar.gz archive, rejecting members outside ``dest_dir``."""
    with tarfile.open(archive_path, "r:gz") as tar:
        for member in tar.getmembers():
            _check_member(dest_dir, member.name)
            tar.extract(member, path=dest_dir)


def make_executable(path: Union[str, Path]) -> None:
    """Add the execute bits to a file.

    Raises:
        OSError: If the file is missing or its mode cannot be changed.
    """
    path = Path(path)
    mode = os.stat(path).st_mode
    path.chmod(mode | 0o111)
