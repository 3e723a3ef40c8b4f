"""Heartbeat sender module for CodePulse client."""

from .heartbeat_sender import HeartbeatSender, project_name
from .status import LAUNCH_FAILED, ExitCode, StatusState, StatusUpdate, format_date, status_for_exit_code

__all__ = [
    "LAUNCH_FAILED",
    "ExitCode",
    "HeartbeatSender",
    "StatusState",
    "StatusUpdate",
    "format_date",
    "project_name",
    "status_for_exit_code",
]
