"""CodePulse client wiring editor events to heartbeats.

This is the single component that owns all client state:
- The credential check at startup
- Dependency provisioning (runtime and core tool)
- The heartbeat trigger and its session state
- In-flight heartbeat tasks and the status label
"""

from __future__ import annotations

import asyncio
from typing import Optional

from loguru import logger

from .. import __version__
from ..config.settings import PulseConfig
from ..credential.store import CredentialStore
from ..installer.dependency_installer import DependencyInstaller
from ..runtime.locator import RuntimeLocator
from ..sender.heartbeat_sender import HeartbeatSender
from ..sender.status import INITIALIZED, INITIALIZING, StatusUpdate
from .events import ClientState, HeartbeatEvent
from .trackers.base import Editor
from .trackers.heartbeat_tracker import HeartbeatTracker


class PulseClient:
    """Editor-facing CodePulse client."""

    def __init__(self, editor: Editor, config: Optional[PulseConfig] = None):
        """Initialize CodePulse client.

        Args:
            editor: Editor hosting the client
            config: CodePulse configuration (defaults to PulseConfig())
        """
        self.editor = editor
        self.config = config or PulseConfig()
        self.state = ClientState.INITIALIZING
        self.status: Optional[StatusUpdate] = None
        self._tasks: set[asyncio.Task] = set()

        logger.info(f"Initializing CodePulse v{__version__}")
        self._show(INITIALIZING)

        self.credentials = CredentialStore(self.config.config_file)
        self.locator = RuntimeLocator(self.config.python_dir, version_timeout=self.config.version_timeout)
        self.installer = DependencyInstaller(self.config, self.locator, on_state_change=self._set_state)
        self.sender = HeartbeatSender(self.config, editor, self.locator, on_status=self._show)
        self.tracker = HeartbeatTracker(editor, self._schedule, window_ms=self.config.heartbeat_window_ms)

    async def start(self) -> bool:
        """Check the API key and provision dependencies.

        The key prompt and provisioning run side by side, so a user who
        leaves the prompt open does not hold up the core tool install.

        Returns:
            True once the client is ready to send heartbeats
        """
        ready, _ = await asyncio.gather(
            self.installer.ensure_ready(lambda: self._show(INITIALIZED)),
            self.check_api_key(),
        )
        if not ready:
            logger.warning("CodePulse dependencies are not available; heartbeats will be skipped")
        return ready

    async def check_api_key(self) -> None:
        """Prompt for an API key when none is configured.

        The editor prompt blocks, so it runs in a worker thread.
        """
        if self.credentials.has_credential():
            return
        api_key = await asyncio.to_thread(self.credentials.prompt_for_credential, self.editor)
        if api_key:
            self.credentials.set_credential(api_key)
        else:
            logger.info("No API key entered")

    # Editor hooks

    def on_selection_changed(self) -> None:
        self.tracker.on_selection_changed()

    def on_active_editor_changed(self) -> None:
        self.tracker.on_active_editor_changed()

    def on_document_saved(self) -> None:
        self.tracker.on_document_saved()

    async def drain(self) -> None:
        """Wait for every in-flight heartbeat to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def dispose(self) -> None:
        """Detach from the editor. In-flight heartbeats are left running."""
        self.editor.set_status("", None)
        logger.info("CodePulse client disposed")

    def _schedule(self, event: HeartbeatEvent) -> None:
        task = asyncio.get_running_loop().create_task(self.sender.send(event))
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("Heartbeat failed")

    def _set_state(self, state: ClientState) -> None:
        logger.debug(f"Client state: {self.state.value} -> {state.value}")
        self.state = state

    def _show(self, status: StatusUpdate) -> None:
        self.status = status
        self.editor.set_status(status.text, status.tooltip)
