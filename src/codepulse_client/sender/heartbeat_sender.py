"""Heartbeat sender for CodePulse client.

This module runs the core tool for each heartbeat and turns its exit code
into a status label update. The core tool talks to the remote service;
this module only interprets how it exited.
"""

from __future__ import annotations

import asyncio
import re
from typing import Callable, Optional

from loguru import logger

from .. import __version__
from ..config.settings import PulseConfig
from ..core.events import HeartbeatEvent
from ..core.trackers.base import Editor
from ..runtime.locator import RuntimeLocator
from .status import LAUNCH_FAILED, ExitCode, StatusUpdate, status_for_exit_code, status_for_launch_error

PLUGIN_NAME = "codepulse-client"

_PROJECT_NAME_PATTERN = re.compile(r"([^/\\]*)[/\\]*$")

StatusFn = Callable[[StatusUpdate], None]


def project_name(workspace_root: Optional[str]) -> Optional[str]:
    """Last path segment of the workspace root, or None."""
    if not workspace_root:
        return None
    match = _PROJECT_NAME_PATTERN.search(workspace_root)
    if match is None or not match.group(1):
        return None
    return match.group(1)


class HeartbeatSender:
    """Runs the core tool for heartbeats and reports the outcome."""

    def __init__(
        self,
        config: PulseConfig,
        editor: Editor,
        locator: RuntimeLocator,
        on_status: Optional[StatusFn] = None,
    ):
        """Initialize heartbeat sender.

        Args:
            config: CodePulse configuration
            editor: Editor supplying name, version and workspace
            locator: Locator for the Python runtime
            on_status: Called with the status derived from each exit code
        """
        self.config = config
        self.editor = editor
        self.locator = locator
        self._on_status = on_status
        self._slots = asyncio.Semaphore(config.max_in_flight)

    @property
    def plugin(self) -> str:
        return f"{self.editor.name}/{self.editor.version} {PLUGIN_NAME}/{__version__}"

    def build_args(self, file: str, is_write: bool) -> list[str]:
        """Arguments passed to the interpreter, starting with the core tool."""
        args = [str(self.config.core_location), "--file", file, "--plugin", self.plugin]
        project = project_name(self.editor.workspace_root())
        if project:
            args.extend(["--alternate-project", project])
        if is_write:
            args.append("--write")
        return args

    async def send(self, event: HeartbeatEvent) -> Optional[int]:
        return await self.dispatch(event.file, event.is_write)

    async def dispatch(self, file: str, is_write: bool = False) -> Optional[int]:
        """Send one heartbeat through the core tool.

        Returns:
            The core tool's exit code, LAUNCH_FAILED when the runtime could
            not be started, or None when no runtime is available
        """
        python = self.locator.resolve()
        if not python:
            logger.debug(f"No Python runtime yet, skipping heartbeat for {file}")
            return None

        args = self.build_args(file, is_write)
        async with self._slots:
            try:
                process = await asyncio.create_subprocess_exec(
                    python,
                    *args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
                stdout, stderr = await process.communicate()
            except OSError as e:
                logger.error(f"Could not start wakatime-core with {python}: {e}")
                self.locator.reset()
                self._notify(status_for_launch_error(e))
                return LAUNCH_FAILED

        code = process.returncode
        if code != ExitCode.SUCCESS:
            if stderr and stderr.strip():
                logger.error(stderr.decode("utf-8", errors="replace").rstrip())
            if stdout and stdout.strip():
                logger.error(stdout.decode("utf-8", errors="replace").rstrip())

        self._report(code)
        return code

    def _report(self, code: int) -> None:
        status = status_for_exit_code(code)
        if code == ExitCode.API_ERROR:
            logger.warning("API Error (102); Check your ~/.wakatime.log file for more details.")
        elif code != ExitCode.SUCCESS:
            logger.error(status.tooltip)
        self._notify(status)

    def _notify(self, status: StatusUpdate) -> None:
        if self._on_status is not None:
            self._on_status(status)
