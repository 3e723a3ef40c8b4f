"""CodePulse credential management module.

This module reads and writes the API key stored in the config file shared
with the core tool.
"""

from .store import CredentialNotFoundError, CredentialStore

__all__ = ["CredentialNotFoundError", "CredentialStore"]
