"""Base classes and interfaces for CodePulse trackers."""

from __future__ import annotations

from typing import Optional, Protocol


class Editor(Protocol):
    """Protocol for the editor hosting the client.

    The editor supplies the active document and workspace, renders the
    status label and offers a one-line prompt.
    """

    name: str
    version: str

    def active_file(self) -> Optional[str]:
        """Path of the document in the active editor, if any."""
        ...

    def workspace_root(self) -> Optional[str]:
        """Root path of the open workspace, if any."""
        ...

    def set_status(self, text: str, tooltip: Optional[str] = None) -> None:
        """Render the status label."""
        ...

    def prompt(self, prompt: str, default: Optional[str] = None) -> Optional[str]:
        """Ask the user for one line of text. Returns None on cancel.

        Called from a worker thread; it may block until the user answers.
        """
        ...
