"""Python runtime discovery for the core tool.

The core tool is a Python program, so every heartbeat needs a working
interpreter. Candidates are tried in priority order with ``--version``.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional

from loguru import logger


def default_candidates(python_dir: Path) -> list[str]:
    """Interpreter candidates in priority order.

    Args:
        python_dir: Directory of the bundled interpreter
    """
    locations = [
        str(python_dir / "pythonw"),
        "pythonw",
        "python",
        "/usr/local/bin/python",
        "/usr/bin/python",
    ]
    for i in range(40, 25, -1):
        locations.append(f"\\python{i}\\pythonw")
        locations.append(f"\\Python{i}\\pythonw")
    return locations


class RuntimeLocator:
    """Finds and caches a working Python interpreter.

    A successful lookup is cached for the lifetime of the locator. A failed
    lookup is not, so an interpreter installed later is picked up by the next
    call.
    """

    def __init__(self, python_dir: Path, candidates: Optional[list[str]] = None, version_timeout: float = 10.0):
        self.python_dir = Path(python_dir)
        self.candidates = candidates if candidates is not None else default_candidates(self.python_dir)
        self.version_timeout = version_timeout
        self._cached_location: Optional[str] = None

    def resolve(self) -> Optional[str]:
        """Return the first candidate that runs, or None."""
        if self._cached_location:
            return self._cached_location

        for location in self.candidates:
            if self._responds(location):
                logger.debug(f"Using Python runtime at {location}")
                self._cached_location = location
                return location

        logger.debug("No Python runtime found")
        return None

    def is_installed(self) -> bool:
        return self.resolve() is not None

    def reset(self) -> None:
        """Forget the cached location."""
        self._cached_location = None

    def _responds(self, location: str) -> bool:
        try:
            subprocess.run(
                [location, "--version"],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=self.version_timeout,
                check=True,
            )
        except (OSError, subprocess.SubprocessError):
            return False
        return True
