"""Status label models and core tool exit codes."""

from __future__ import annotations

from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict

STATUS_PREFIX = "$(clock) WakaTime"

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class ExitCode(IntEnum):
    """Exit codes of the core tool."""

    SUCCESS = 0
    API_ERROR = 102  # Remote service unreachable, heartbeat queued offline
    CONFIG_PARSE_ERROR = 103
    AUTH_ERROR = 104  # API key rejected


# Returned in place of an exit code when the interpreter could not be started.
LAUNCH_FAILED = 127


class StatusState(str, Enum):
    """Enumeration of status label states."""

    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
    ACTIVE = "active"
    OFFLINE = "offline"
    ERROR = "error"


class StatusUpdate(BaseModel):
    """Text and tooltip rendered in the editor's status bar."""

    model_config = ConfigDict(frozen=True)

    state: StatusState
    text: str
    tooltip: Optional[str] = None


INITIALIZING = StatusUpdate(state=StatusState.INITIALIZING, text=f"{STATUS_PREFIX} Initializing...")
INITIALIZED = StatusUpdate(state=StatusState.INITIALIZED, text=f"{STATUS_PREFIX} Initialized")


def format_date(date: datetime) -> str:
    """Format like ``Jan 5, 2026 3:07 PM``."""
    hour = date.hour
    ampm = "AM"
    if hour > 11:
        ampm = "PM"
        hour -= 12
    if hour == 0:
        hour = 12
    return f"{MONTHS[date.month - 1]} {date.day}, {date.year} {hour}:{date.minute:02d} {ampm}"


def status_for_exit_code(code: int, now: Optional[datetime] = None) -> StatusUpdate:
    """Map a core tool exit code to the status to show."""
    if code == ExitCode.SUCCESS:
        sent_at = format_date(now or datetime.now())
        return StatusUpdate(
            state=StatusState.ACTIVE,
            text=f"{STATUS_PREFIX} Active",
            tooltip=f"Last heartbeat sent at {sent_at}",
        )
    if code == ExitCode.API_ERROR:
        return StatusUpdate(
            state=StatusState.OFFLINE,
            text=f"{STATUS_PREFIX} Offline, coding activity will sync when online.",
            tooltip="API Error (102); Check your ~/.wakatime.log file for more details.",
        )
    if code == ExitCode.CONFIG_PARSE_ERROR:
        return StatusUpdate(
            state=StatusState.ERROR,
            text=f"{STATUS_PREFIX} Error",
            tooltip="Config Parsing Error (103); Check your ~/.wakatime.log file for more details.",
        )
    if code == ExitCode.AUTH_ERROR:
        return StatusUpdate(
            state=StatusState.ERROR,
            text=f"{STATUS_PREFIX} Error",
            tooltip="Invalid API Key (104); Make sure your API Key is correct!",
        )
    return StatusUpdate(
        state=StatusState.ERROR,
        text=f"{STATUS_PREFIX} Error",
        tooltip=f"Unknown Error ({code}); Check your ~/.wakatime.log file for more details.",
    )


def status_for_launch_error(error: OSError) -> StatusUpdate:
    """Status shown when the runtime could not be started at all."""
    return StatusUpdate(
        state=StatusState.ERROR,
        text=f"{STATUS_PREFIX} Error",
        tooltip=f"Could not start wakatime-core ({error}); Check your Python installation.",
    )
