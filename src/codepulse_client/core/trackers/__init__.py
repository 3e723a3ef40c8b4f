"""Tracking components for CodePulse client."""

from .base import Editor
from .heartbeat_tracker import HeartbeatTracker

__all__ = ["Editor", "HeartbeatTracker"]
