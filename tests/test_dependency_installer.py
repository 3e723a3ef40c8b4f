"""Tests for runtime and core tool provisioning."""

import asyncio
import io
import zipfile
from urllib.error import URLError

import pytest

from codepulse_client.core.events import ClientState
from codepulse_client.installer import archive
from codepulse_client.installer import dependency_installer as installer_module
from codepulse_client.installer.dependency_installer import DependencyInstaller
from codepulse_client.runtime.locator import RuntimeLocator

from conftest import FakeResponse, make_core_archive, write_core_script

ABOUT_PY = """# -*- coding: utf-8 -*-
__title__ = 'wakatime'
__description__ = 'Common interface to the WakaTime api.'
__version_info__ = ('13', '0', '7')
__version__ = '.'.join(__version_info__)
"""


class DroppedResponse(FakeResponse):
    """Response whose connection resets after the first chunk."""

    def read(self, size=-1):
        if self.tell() > 0:
            raise ConnectionResetError("connection reset by peer")
        return super().read(16)


class FakeNetwork:
    """Serves the version file and the core archive; records every request."""

    def __init__(self, config, version_body=ABOUT_PY, archive_body=None, fail_archive=False, drop_archive=False):
        self.config = config
        self.version_body = version_body
        self.archive_body = archive_body if archive_body is not None else make_core_archive()
        self.fail_archive = fail_archive
        self.drop_archive = drop_archive
        self.requests = []

    def __call__(self, req, timeout=None):
        url = req.full_url
        self.requests.append(url)
        if url == self.config.core_version_url:
            return FakeResponse(self.version_body.encode("utf-8"))
        if url == self.config.core_archive_url:
            if self.fail_archive:
                raise URLError("connection refused")
            if self.drop_archive:
                return DroppedResponse(self.archive_body)
            return FakeResponse(self.archive_body)
        raise URLError(f"unexpected url {url}")


def run_ready(installer):
    calls = []
    ready = asyncio.run(installer.ensure_ready(lambda: calls.append("ready")))
    return ready, calls


def test_absent_core_installs_once_then_ready(config, python_locator, monkeypatch):
    network = FakeNetwork(config)
    monkeypatch.setattr(archive, "urlopen", network)
    states = []
    installer = DependencyInstaller(config, python_locator, on_state_change=states.append)

    ready, calls = run_ready(installer)

    assert ready
    assert calls == ["ready"]
    assert network.requests == [config.core_archive_url]
    assert config.core_location.exists()
    assert not (config.install_dir / "wakatime-master.zip").exists(), "Archive should be deleted"
    assert states == [ClientState.LOCATING, ClientState.INSTALLING, ClientState.READY]


def test_current_core_only_checks_metadata(config, python_locator, monkeypatch):
    write_core_script(config, "import sys\nsys.stderr.write('13.0.7\\n')\n")
    network = FakeNetwork(config)
    monkeypatch.setattr(archive, "urlopen", network)
    installer = DependencyInstaller(config, python_locator)

    ready, calls = run_ready(installer)

    assert ready
    assert calls == ["ready"]
    assert network.requests == [config.core_version_url]


def test_outdated_core_is_replaced(config, python_locator, monkeypatch):
    write_core_script(config, "import sys\nsys.stderr.write('12.0.0\\n')\n")
    stale = config.core_dir / "stale.txt"
    stale.write_text("old")
    network = FakeNetwork(config)
    monkeypatch.setattr(archive, "urlopen", network)
    installer = DependencyInstaller(config, python_locator)

    ready, calls = run_ready(installer)

    assert ready
    assert calls == ["ready"]
    assert network.requests == [config.core_version_url, config.core_archive_url]
    assert not stale.exists(), "Old tree should be removed before extracting"
    assert asyncio.run(installer.get_installed_core_version()) == "13.0.7"


def test_unknown_latest_version_reinstalls(config, python_locator, monkeypatch):
    write_core_script(config, "import sys\nsys.stderr.write('13.0.7\\n')\n")
    network = FakeNetwork(config, version_body="nothing to see here\n")
    monkeypatch.setattr(archive, "urlopen", network)

    ready, _ = run_ready(DependencyInstaller(config, python_locator))

    assert ready
    assert network.requests == [config.core_version_url, config.core_archive_url]


def test_failed_download_keeps_previous_install(config, python_locator, monkeypatch):
    write_core_script(config, "import sys\nsys.stderr.write('12.0.0\\n')\n")
    marker = config.core_dir / "marker.txt"
    marker.write_text("still here")
    monkeypatch.setattr(archive, "urlopen", FakeNetwork(config, fail_archive=True))
    states = []
    installer = DependencyInstaller(config, python_locator, on_state_change=states.append)

    ready, calls = run_ready(installer)

    assert not ready
    assert calls == []
    assert marker.exists()
    assert states[-1] == ClientState.FAILED


def test_corrupt_archive_is_reported_and_deleted(config, python_locator, monkeypatch):
    monkeypatch.setattr(archive, "urlopen", FakeNetwork(config, archive_body=b"not a zip"))

    ready, calls = run_ready(DependencyInstaller(config, python_locator))

    assert not ready
    assert calls == []
    assert not (config.install_dir / "wakatime-master.zip").exists()


def test_missing_runtime_off_windows_never_becomes_ready(config, tmp_path, monkeypatch):
    monkeypatch.setattr(installer_module.platform, "system", lambda: "Linux")
    network = FakeNetwork(config)
    monkeypatch.setattr(archive, "urlopen", network)
    locator = RuntimeLocator(config.python_dir, candidates=[str(tmp_path / "no-python")])

    ready, calls = run_ready(DependencyInstaller(config, locator))

    assert not ready
    assert calls == []
    assert network.requests == []


def test_async_ready_callback_is_awaited(config, python_locator, monkeypatch):
    monkeypatch.setattr(archive, "urlopen", FakeNetwork(config))
    calls = []

    async def on_ready():
        calls.append("ready")

    assert asyncio.run(DependencyInstaller(config, python_locator).ensure_ready(on_ready))
    assert calls == ["ready"]


def test_interrupted_download_leaves_no_partial_archive(config, python_locator, monkeypatch):
    monkeypatch.setattr(archive, "urlopen", FakeNetwork(config, drop_archive=True))
    states = []
    installer = DependencyInstaller(config, python_locator, on_state_change=states.append)

    ready, calls = run_ready(installer)

    assert not ready
    assert calls == []
    assert not (config.install_dir / "wakatime-master.zip").exists()
    assert states[-1] == ClientState.FAILED


def test_download_file_removes_partial_output(config, tmp_path, monkeypatch):
    monkeypatch.setattr(archive, "urlopen", FakeNetwork(config, drop_archive=True))
    output = tmp_path / "core.zip"

    with pytest.raises(archive.InstallError):
        archive.download_file(config.core_archive_url, output)
    assert not output.exists()


def test_failing_ready_callback_is_logged_not_raised(config, python_locator, monkeypatch):
    monkeypatch.setattr(archive, "urlopen", FakeNetwork(config))
    states = []
    installer = DependencyInstaller(config, python_locator, on_state_change=states.append)

    def on_ready():
        raise RuntimeError("status bar went away")

    assert asyncio.run(installer.ensure_ready(on_ready))
    assert states[-1] == ClientState.READY


def test_parse_version_info_first_match_wins():
    body = "x = 1\n__version_info__ = ('1', '2', '3')\n__version_info__ = ('4', '5', '6')\n"

    assert archive.parse_version_info(body) == "1.2.3"
    assert archive.parse_version_info("__version__ = '1.2.3'\n") is None


def test_fetch_latest_version_non_200(monkeypatch):
    monkeypatch.setattr(archive, "urlopen", lambda req, timeout=None: FakeResponse(ABOUT_PY.encode(), status=204))

    assert archive.fetch_latest_version("https://example.invalid/about.py") is None


class BundledPythonLocator:
    """Locator that only finds a runtime once the bundled one is extracted."""

    def __init__(self, config):
        self.config = config
        self.resets = 0

    def resolve(self):
        return "python-bundled" if (self.config.python_dir / "pythonw.exe").exists() else None

    def is_installed(self):
        return self.resolve() is not None

    def reset(self):
        self.resets += 1


def test_windows_installs_bundled_python(config, monkeypatch):
    monkeypatch.setattr(installer_module.platform, "system", lambda: "Windows")
    monkeypatch.setattr(installer_module.platform, "machine", lambda: "AMD64")
    python_url = "https://www.python.org/ftp/python/3.5.1/python-3.5.1-embed-amd64.zip"
    requests = []

    def fake_urlopen(req, timeout=None):
        requests.append(req.full_url)
        if req.full_url == python_url:
            buffer = io.BytesIO()
            with zipfile.ZipFile(buffer, "w") as zf:
                zf.writestr("pythonw.exe", b"MZ")
            return FakeResponse(buffer.getvalue())
        raise URLError("offline")

    monkeypatch.setattr(archive, "urlopen", fake_urlopen)
    locator = BundledPythonLocator(config)
    installer = DependencyInstaller(config, locator)

    assert asyncio.run(installer.install_python())
    assert locator.resets == 1
    assert requests == [python_url]
    assert not (config.install_dir / "python.zip").exists()
