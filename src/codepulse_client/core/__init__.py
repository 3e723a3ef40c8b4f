"""Core CodePulse client components."""

from .app import PulseClient
from .events import ClientState, EditorEventType, HeartbeatEvent, SessionState
from .headless import HeadlessEditor
from .trackers import Editor, HeartbeatTracker

__all__ = [
    # Event models
    "ClientState",
    "EditorEventType",
    "HeartbeatEvent",
    "SessionState",
    # Tracking components
    "Editor",
    "HeartbeatTracker",
    # Application
    "HeadlessEditor",
    "PulseClient",
]
