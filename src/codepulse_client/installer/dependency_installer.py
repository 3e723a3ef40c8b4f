"""Dependency installer for CodePulse client.

This module makes sure a Python runtime and the core tool are available and
current before heartbeats are sent:

- Locate a Python runtime, installing a bundled one where that is automated
- Install the core tool when it is missing
- Replace the core tool when a newer version is published

Every failure is logged and absorbed. Nothing here raises into the editor.
"""

from __future__ import annotations

import asyncio
import inspect
import platform
from typing import Any, Awaitable, Callable, Optional, Union

from loguru import logger

from ..config.settings import PulseConfig
from ..core.events import ClientState
from ..runtime.locator import RuntimeLocator
from . import archive
from .archive import InstallError

ReadyCallback = Callable[[], Union[None, Awaitable[None]]]
StateCallback = Callable[[ClientState], Any]


class DependencyInstaller:
    """Ensures the Python runtime and the core tool are installed."""

    def __init__(
        self,
        config: PulseConfig,
        locator: RuntimeLocator,
        on_state_change: Optional[StateCallback] = None,
    ):
        """Initialize dependency installer.

        Args:
            config: CodePulse configuration
            locator: Locator shared with the heartbeat sender
            on_state_change: Called whenever the provisioning state changes
        """
        self.config = config
        self.locator = locator
        self._on_state_change = on_state_change

    async def ensure_ready(self, on_ready: Optional[ReadyCallback] = None) -> bool:
        """Install or update dependencies, then call ``on_ready``.

        Returns:
            True if ``on_ready`` was reached, False if provisioning gave up
        """
        self._set_state(ClientState.LOCATING)

        if not self.locator.is_installed():
            if not await self.install_python():
                self._set_state(ClientState.FAILED)
                return False

        if not self.is_core_installed():
            ready = await self.install_core()
        elif await self.is_core_latest():
            ready = True
        else:
            ready = await self.install_core()

        if not ready:
            self._set_state(ClientState.FAILED)
            return False

        self._set_state(ClientState.READY)
        if on_ready is not None:
            try:
                result = on_ready()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Ready callback failed")
        return True

    def is_core_installed(self) -> bool:
        return self.config.core_location.exists()

    async def is_core_latest(self) -> bool:
        """Compare the installed core version with the published one."""
        current_version = await self.get_installed_core_version()
        if current_version is None:
            return False
        logger.info(f"Current wakatime-core version is {current_version}")

        logger.info("Checking for updates to wakatime-core...")
        latest_version = await asyncio.to_thread(
            archive.fetch_latest_version, self.config.core_version_url, self.config.request_timeout
        )
        if current_version == latest_version:
            logger.info("wakatime-core is up to date.")
            return True
        if latest_version:
            logger.info(f"Found an updated wakatime-core v{latest_version}")
        else:
            logger.info("Unable to find latest wakatime-core version from GitHub.")
        return False

    async def get_installed_core_version(self) -> Optional[str]:
        """Ask the installed core tool for its version.

        The core tool prints its version on stderr.
        """
        python = self.locator.resolve()
        if not python:
            return None

        try:
            process = await asyncio.create_subprocess_exec(
                python,
                str(self.config.core_location),
                "--version",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await process.communicate()
        except OSError as e:
            logger.warning(f"Could not query wakatime-core version: {e}")
            return None

        if process.returncode != 0:
            logger.debug(f"wakatime-core --version exited with {process.returncode}")
            return None
        return stderr.decode("utf-8", errors="replace").strip()

    async def install_core(self) -> bool:
        """Download the core archive and swap it in for any existing tree."""
        self._set_state(ClientState.INSTALLING)
        install_dir = self.config.install_dir
        zip_file = install_dir / "wakatime-master.zip"

        try:
            install_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Downloading wakatime-core...")
            await asyncio.to_thread(
                archive.download_file, self.config.core_archive_url, zip_file, self.config.request_timeout
            )

            logger.info(f'Extracting wakatime-core into "{install_dir}"...')
            await asyncio.to_thread(archive.remove_tree, self.config.core_dir)
            await asyncio.to_thread(archive.unzip, zip_file, install_dir)
        except (InstallError, OSError) as e:
            logger.error(f"Failed to install wakatime-core: {e}")
            return False

        logger.info("Finished extracting wakatime-core.")
        return True

    async def install_python(self) -> bool:
        """Install a bundled Python runtime.

        Only automated on Windows; elsewhere the user has to install Python.
        """
        if platform.system() != "Windows":
            logger.error(
                "WakaTime depends on Python. Install it from https://python.org/downloads then restart your editor."
            )
            return False

        self._set_state(ClientState.INSTALLING)
        url = self.config.python_archive_url.format(version=self.config.python_version, arch=self._python_arch())
        zip_file = self.config.install_dir / "python.zip"

        try:
            self.config.install_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Downloading python...")
            await asyncio.to_thread(archive.download_file, url, zip_file, self.config.request_timeout)

            logger.info("Extracting python...")
            await asyncio.to_thread(archive.unzip, zip_file, self.config.python_dir)
        except (InstallError, OSError) as e:
            logger.error(f"Failed to install python: {e}")
            return False

        logger.info("Finished installing python.")
        self.locator.reset()
        if not self.locator.is_installed():
            logger.error("Installed python could not be started")
            return False
        return True

    @staticmethod
    def _python_arch() -> str:
        return "amd64" if platform.machine().lower() in ("amd64", "x86_64") else "win32"

    def _set_state(self, state: ClientState) -> None:
        if self._on_state_change is not None:
            self._on_state_change(state)
