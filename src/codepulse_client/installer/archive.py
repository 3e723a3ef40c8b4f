"""Blocking download and archive helpers used by the dependency installer.

All functions here block; the installer runs them in worker threads.
"""

from __future__ import annotations

import re
import shutil
import zipfile
from pathlib import Path
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from loguru import logger

USER_AGENT = "CodePulse-Client"

VERSION_INFO_PATTERN = re.compile(r"^__version_info__ = \('([0-9]+)', '([0-9]+)', '([0-9]+)'\)")


class InstallError(Exception):
    """Raised when an archive cannot be fetched or unpacked."""


def download_file(url: str, output_file: Path, timeout: int = 30) -> None:
    """Stream ``url`` into ``output_file``.

    A partially written file is removed before the error is raised.

    Raises:
        InstallError: On any network or local write failure
    """
    req = Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urlopen(req, timeout=timeout) as response, open(output_file, "wb") as out:
            shutil.copyfileobj(response, out)
    except HTTPError as e:
        _discard(output_file)
        raise InstallError(f"HTTP {e.code} downloading {url}") from e
    except URLError as e:
        _discard(output_file)
        raise InstallError(f"Network error downloading {url}: {e.reason}") from e
    except OSError as e:
        _discard(output_file)
        raise InstallError(f"Could not write {output_file}: {e}") from e


def _discard(path: Path) -> None:
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove partial download {path}: {e}")


def fetch_latest_version(url: str, timeout: int = 30) -> Optional[str]:
    """Read the newest core version advertised at ``url``.

    The first line matching the ``__version_info__`` tuple wins.

    Returns:
        Dotted version string, or None when it cannot be determined
    """
    req = Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urlopen(req, timeout=timeout) as response:
            if response.status != 200:
                logger.warning(f"Unexpected response fetching {url}: HTTP {response.status}")
                return None
            body = response.read().decode("utf-8", errors="replace")
    except (URLError, OSError) as e:
        logger.warning(f"Network error fetching {url}: {e}")
        return None

    return parse_version_info(body)


def parse_version_info(body: str) -> Optional[str]:
    for line in body.split("\n"):
        match = VERSION_INFO_PATTERN.match(line)
        if match:
            return ".".join(match.groups())
    return None


def remove_tree(path: Path) -> None:
    """Recursively delete ``path``; a missing path is fine."""
    if path.exists():
        shutil.rmtree(path)


def unzip(archive: Path, output_dir: Path) -> None:
    """Extract ``archive`` into ``output_dir`` and delete the archive.

    The archive is deleted even when extraction fails.

    Raises:
        InstallError: The archive is missing or cannot be extracted
    """
    if not archive.exists():
        raise InstallError(f"Archive not found: {archive}")

    try:
        with zipfile.ZipFile(archive, "r") as zf:
            zf.extractall(output_dir)
    except (zipfile.BadZipFile, OSError) as e:
        raise InstallError(f"Could not extract {archive}: {e}") from e
    finally:
        archive.unlink(missing_ok=True)
