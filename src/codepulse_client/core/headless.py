"""Editor stand-in for running the client without an editor."""

from __future__ import annotations

import platform
from typing import Optional

from loguru import logger


class HeadlessEditor:
    """Editor with a fixed active file, a log-backed status bar and a stdin prompt."""

    name = "headless"

    def __init__(self, file: Optional[str] = None, workspace: Optional[str] = None, interactive: bool = True):
        self.version = platform.python_version()
        self.file = file
        self.workspace = workspace
        self.interactive = interactive
        self.status_text = ""
        self.status_tooltip: Optional[str] = None

    def active_file(self) -> Optional[str]:
        return self.file

    def workspace_root(self) -> Optional[str]:
        return self.workspace

    def set_status(self, text: str, tooltip: Optional[str] = None) -> None:
        self.status_text = text
        self.status_tooltip = tooltip
        if text and tooltip:
            logger.info(f"{text} ({tooltip})")
        elif text:
            logger.info(text)

    def prompt(self, prompt: str, default: Optional[str] = None) -> Optional[str]:
        if not self.interactive:
            return None
        suffix = f" [{default}]" if default else ""
        try:
            value = input(f"{prompt}{suffix}: ").strip()
        except EOFError:
            return None
        return value or default
