"""Configuration management for CodePulse client.

This module provides the client settings together with environment
variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from loguru import logger

# Remote sources for the core tool and the bundled interpreter
CORE_ARCHIVE_URL = "https://github.com/wakatime/wakatime/archive/master.zip"
CORE_VERSION_URL = "https://raw.githubusercontent.com/wakatime/wakatime/master/wakatime/__about__.py"
PYTHON_ARCHIVE_URL = "https://www.python.org/ftp/python/{version}/python-{version}-embed-{arch}.zip"

HEARTBEAT_WINDOW_MS = 120_000


def _default_install_dir() -> Path:
    return Path.home() / ".codepulse"


def _default_config_file() -> Path:
    return Path.home() / ".wakatime.cfg"


@dataclass
class PulseConfig:
    """Complete CodePulse client configuration."""

    # Locations
    install_dir: Path = field(default_factory=_default_install_dir)
    config_file: Path = field(default_factory=_default_config_file)

    # Remote sources
    core_archive_url: str = CORE_ARCHIVE_URL
    core_version_url: str = CORE_VERSION_URL
    python_archive_url: str = PYTHON_ARCHIVE_URL
    python_version: str = "3.5.1"

    # Heartbeats
    heartbeat_window_ms: int = HEARTBEAT_WINDOW_MS
    max_in_flight: int = 4

    # Timeouts (seconds)
    version_timeout: float = 10.0
    request_timeout: int = 30

    # Logging
    log_level: str = "INFO"
    log_to_console: bool = True
    log_to_file: bool = True
    log_rotation: str = "1 MB"
    log_retention: str = "7 days"

    def __post_init__(self):
        """Apply environment variable overrides."""
        self.install_dir = Path(self.install_dir)
        self.config_file = Path(self.config_file)
        self._apply_env_overrides()

    @property
    def log_file_path(self) -> Path:
        return self.install_dir / "codepulse.log"

    @property
    def core_dir(self) -> Path:
        """Root of the extracted core tool tree."""
        return self.install_dir / "wakatime-master"

    @property
    def core_location(self) -> Path:
        return self.core_dir / "wakatime" / "cli.py"

    @property
    def python_dir(self) -> Path:
        return self.install_dir / "python"

    def _apply_env_overrides(self):
        """Apply configuration overrides from environment variables."""
        if install_dir := os.getenv("CODEPULSE_INSTALL_DIR"):
            self.install_dir = Path(install_dir)

        if config_file := os.getenv("CODEPULSE_CONFIG_FILE"):
            self.config_file = Path(config_file)

        if python_version := os.getenv("CODEPULSE_PYTHON_VERSION"):
            self.python_version = python_version

        if heartbeat_window := os.getenv("CODEPULSE_HEARTBEAT_WINDOW_MS"):
            try:
                self.heartbeat_window_ms = int(heartbeat_window)
            except ValueError:
                logger.warning(f"Invalid heartbeat window: {heartbeat_window}")

        if max_in_flight := os.getenv("CODEPULSE_MAX_IN_FLIGHT"):
            try:
                self.max_in_flight = int(max_in_flight)
            except ValueError:
                logger.warning(f"Invalid max in-flight value: {max_in_flight}")

        if log_level := os.getenv("CODEPULSE_LOG_LEVEL"):
            self.log_level = log_level.upper()

        if (log_to_file := os.getenv("CODEPULSE_LOG_TO_FILE")) is not None:
            self.log_to_file = log_to_file.lower() in ("true", "1", "yes", "on")

        if (log_to_console := os.getenv("CODEPULSE_LOG_TO_CONSOLE")) is not None:
            self.log_to_console = log_to_console.lower() in ("true", "1", "yes", "on")

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if self.heartbeat_window_ms < 0:
            errors.append("Heartbeat window must not be negative")

        if self.max_in_flight <= 0:
            errors.append("Max in-flight heartbeats must be positive")

        if self.version_timeout <= 0:
            errors.append("Version check timeout must be positive")

        if not self.core_archive_url:
            errors.append("Core archive URL is required")

        return len(errors) == 0, errors


def load_config(
    install_dir: Optional[Path] = None,
    config_file: Optional[Path] = None,
    log_level: Optional[str] = None,
) -> PulseConfig:
    """Load configuration with optional overrides.

    Explicit arguments win over environment variables.

    Args:
        install_dir: Directory holding the core tool and bundled interpreter
        config_file: Path of the credential file
        log_level: Log level override

    Returns:
        Configured PulseConfig instance
    """
    config = PulseConfig()

    if install_dir:
        config.install_dir = Path(install_dir)

    if config_file:
        config.config_file = Path(config_file)

    if log_level:
        config.log_level = log_level.upper()

    return config
