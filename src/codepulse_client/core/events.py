"""Event models for the CodePulse client.

Editor notifications flow through the client as follows:
Editor Hooks → Heartbeat Trigger → Heartbeat Sender → core tool
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class EditorEventType(str, Enum):
    """Editor notifications the client subscribes to."""

    SELECTION_CHANGED = "selection_changed"
    ACTIVE_EDITOR_CHANGED = "active_editor_changed"
    DOCUMENT_SAVED = "document_saved"

    @property
    def is_write(self) -> bool:
        return self is EditorEventType.DOCUMENT_SAVED


class ClientState(str, Enum):
    """Lifecycle of the client's dependency provisioning."""

    INITIALIZING = "initializing"
    LOCATING = "locating"
    INSTALLING = "installing"
    READY = "ready"
    FAILED = "failed"


def now_ms() -> float:
    """Wall clock in milliseconds."""
    return time.time() * 1000


@dataclass(frozen=True)
class HeartbeatEvent:
    """A single unit of coding activity waiting to be dispatched."""

    file: str
    is_write: bool = False
    timestamp: float = field(default_factory=now_ms)


@dataclass
class SessionState:
    """Last dispatched heartbeat, held for the lifetime of the client."""

    last_file: Optional[str] = None
    last_heartbeat_ms: float = 0

    def record(self, event: HeartbeatEvent) -> None:
        self.last_file = event.file
        self.last_heartbeat_ms = event.timestamp
