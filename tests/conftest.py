"""Shared fixtures for the CodePulse client tests."""

import io
import sys
import textwrap
import zipfile
from pathlib import Path
from typing import Optional

import pytest

from codepulse_client.config.settings import PulseConfig
from codepulse_client.runtime.locator import RuntimeLocator


class FakeEditor:
    """Editor double recording status updates and answering prompts."""

    name = "testeditor"
    version = "1.2.3"

    def __init__(self, file: Optional[str] = None, workspace: Optional[str] = None, answer: Optional[str] = None):
        self.file = file
        self.workspace = workspace
        self.answer = answer
        self.statuses: list[tuple[str, Optional[str]]] = []
        self.prompts: list[str] = []

    def active_file(self):
        return self.file

    def workspace_root(self):
        return self.workspace

    def set_status(self, text, tooltip=None):
        self.statuses.append((text, tooltip))

    def prompt(self, prompt, default=None):
        self.prompts.append(prompt)
        return self.answer


class FakeResponse(io.BytesIO):
    """Stand-in for the object returned by urlopen."""

    def __init__(self, body: bytes, status: int = 200):
        super().__init__(body)
        self.status = status


@pytest.fixture
def config(tmp_path, monkeypatch):
    for var in (
        "CODEPULSE_INSTALL_DIR",
        "CODEPULSE_CONFIG_FILE",
        "CODEPULSE_HEARTBEAT_WINDOW_MS",
        "CODEPULSE_MAX_IN_FLIGHT",
        "CODEPULSE_LOG_LEVEL",
        "CODEPULSE_PYTHON_VERSION",
    ):
        monkeypatch.delenv(var, raising=False)
    return PulseConfig(
        install_dir=tmp_path / "install",
        config_file=tmp_path / ".wakatime.cfg",
        log_to_file=False,
    )


@pytest.fixture
def editor():
    return FakeEditor(file="/home/user/myproject/main.py", workspace="/home/user/myproject")


@pytest.fixture
def python_locator(config):
    """Locator resolving to the interpreter running the tests."""
    return RuntimeLocator(config.python_dir, candidates=[sys.executable])


def write_core_script(config: PulseConfig, body: str) -> Path:
    """Install a fake core tool made of ``body``."""
    core = config.core_location
    core.parent.mkdir(parents=True, exist_ok=True)
    core.write_text(textwrap.dedent(body), encoding="utf-8")
    return core


def make_core_archive(version: str = "13.0.7") -> bytes:
    """Zip archive laid out like the published core tool."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("wakatime-master/wakatime/cli.py", f"import sys\nsys.stderr.write('{version}\\n')\n")
        zf.writestr("wakatime-master/wakatime/__about__.py", f"__version__ = '{version}'\n")
    return buffer.getvalue()
