"""Command line entry point for running CodePulse without an editor.

The ``heartbeat`` command exits with the core tool's own exit code so
scripts can tell an offline service (102) from a bad config (103) or a
rejected API key (104). It exits with 127 when the Python runtime was found
but could not be started.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, Sequence

from loguru import logger

from .config import load_config, setup_logging
from .config.settings import PulseConfig
from .core.app import PulseClient
from .core.headless import HeadlessEditor
from .sender.status import LAUNCH_FAILED

EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="codepulse", description="Report coding activity through the WakaTime core tool")
    parser.add_argument("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--install-dir", default=None, help="Directory holding the core tool")
    parser.add_argument("--config-file", default=None, help="Path of the WakaTime config file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("install", help="Install or update the Python runtime and core tool")

    heartbeat = subparsers.add_parser("heartbeat", help="Send one heartbeat")
    heartbeat.add_argument("--file", required=True, help="File the activity happened in")
    heartbeat.add_argument("--write", action="store_true", help="The file was saved")
    heartbeat.add_argument("--project-root", default=None, help="Workspace root used for the project name")

    api_key = subparsers.add_parser("api-key", help="Show or set the API key")
    api_key.add_argument("--set", dest="value", default=None, help="API key to store")

    return parser


async def run_install(config: PulseConfig) -> int:
    client = PulseClient(HeadlessEditor(interactive=False), config)
    ready = await client.installer.ensure_ready()
    return 0 if ready else EXIT_FAILURE


async def run_heartbeat(config: PulseConfig, file: str, is_write: bool, project_root: Optional[str]) -> int:
    editor = HeadlessEditor(file=file, workspace=project_root, interactive=False)
    client = PulseClient(editor, config)
    code = await client.sender.dispatch(file, is_write)
    if code is None:
        logger.error("No Python runtime found; run `codepulse install` first")
        return EXIT_FAILURE
    if code == LAUNCH_FAILED:
        logger.error("The Python runtime could not be started; check its installation")
    return code


def run_api_key(config: PulseConfig, value: Optional[str]) -> int:
    client = PulseClient(HeadlessEditor(), config)
    if value:
        if not client.credentials.set_credential(value):
            return EXIT_FAILURE
    else:
        asyncio.run(client.check_api_key())

    if client.credentials.has_credential():
        print(f"API key configured in {config.config_file}")
        return 0
    print("No API key configured")
    return EXIT_FAILURE


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(install_dir=args.install_dir, config_file=args.config_file, log_level=args.log_level)
    setup_logging(config)

    is_valid, errors = config.validate()
    if not is_valid:
        for error in errors:
            logger.error(error)
        return EXIT_FAILURE

    if args.command == "install":
        return asyncio.run(run_install(config))
    if args.command == "heartbeat":
        return asyncio.run(run_heartbeat(config, args.file, args.write, args.project_root))
    return run_api_key(config, args.value)


if __name__ == "__main__":
    sys.exit(main())
