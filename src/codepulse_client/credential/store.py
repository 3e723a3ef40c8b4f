"""Credential storage for CodePulse client.

This module handles:
- Reading the API key from the shared ``~/.wakatime.cfg`` file
- Writing a new API key when the user supplies one
- Prompting the user through the editor when no key is configured
"""

from __future__ import annotations

import configparser
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from loguru import logger

if TYPE_CHECKING:
    from ..core.trackers.base import Editor

SETTINGS_SECTION = "settings"
API_KEY_OPTION = "api_key"


class CredentialNotFoundError(Exception):
    """Raised when no API key can be read from the config file."""


class CredentialStore:
    """Storage for the API key shared with the core tool."""

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize credential store.

        Args:
            config_file: INI file holding the key (defaults to ~/.wakatime.cfg)
        """
        if config_file is None:
            self.config_file = Path.home() / ".wakatime.cfg"
        else:
            self.config_file = Path(config_file)

        self._api_key: Optional[str] = None

    def get_credential(self) -> str:
        """Read the API key.

        Returns:
            The stored key; an empty string when the entry exists but is blank

        Raises:
            CredentialNotFoundError: The file is missing, unreadable, malformed
                or has no ``settings.api_key`` entry
        """
        parser = configparser.ConfigParser(interpolation=None)
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                parser.read_file(f)
        except OSError as e:
            raise CredentialNotFoundError(f"could not read {self.config_file}: {e}") from e
        except UnicodeDecodeError as e:
            raise CredentialNotFoundError(f"{self.config_file} is not valid UTF-8: {e}") from e
        except configparser.Error as e:
            raise CredentialNotFoundError(f"could not parse {self.config_file}: {e}") from e

        if not parser.has_option(SETTINGS_SECTION, API_KEY_OPTION):
            raise CredentialNotFoundError("api key not found")

        self._api_key = parser.get(SETTINGS_SECTION, API_KEY_OPTION).strip()
        return self._api_key

    def has_credential(self) -> bool:
        """Check if a non-empty API key is stored."""
        try:
            return bool(self.get_credential())
        except CredentialNotFoundError as e:
            logger.debug(f"No API key: {e}")
            return False

    def set_credential(self, api_key: Optional[str]) -> bool:
        """Store a new API key.

        The file is replaced wholesale, so any other sections it held are lost.

        Returns:
            True if stored successfully, False otherwise
        """
        if not api_key:
            return False

        content = f"[{SETTINGS_SECTION}]\n{API_KEY_OPTION} = {api_key}"
        try:
            self.config_file.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error(f"could not write to {self.config_file}: {e}")
            return False

        self._api_key = api_key
        logger.info(f"Stored API key in {self.config_file}")
        return True

    @property
    def cached_credential(self) -> Optional[str]:
        """Last key read or written by this store."""
        return self._api_key

    def prompt_for_credential(self, editor: Editor, default: Optional[str] = None) -> Optional[str]:
        """Ask the user for an API key. Returns None when cancelled."""
        return editor.prompt("WakaTime API Key", default)
