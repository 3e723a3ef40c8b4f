"""Heartbeat trigger for CodePulse client.

This module turns raw editor notifications into heartbeats. Saves always
produce a heartbeat; other notifications only do so when the active file
changed or the heartbeat window has elapsed.
"""

from __future__ import annotations

from typing import Callable, Optional

from loguru import logger

from ...config.settings import HEARTBEAT_WINDOW_MS
from ..events import EditorEventType, HeartbeatEvent, SessionState, now_ms
from .base import Editor

DispatchFn = Callable[[HeartbeatEvent], None]


class HeartbeatTracker:
    """Decides, per editor notification, whether to emit a heartbeat."""

    def __init__(
        self,
        editor: Editor,
        dispatch: DispatchFn,
        window_ms: int = HEARTBEAT_WINDOW_MS,
        clock: Callable[[], float] = now_ms,
    ):
        """Initialize heartbeat tracker.

        Args:
            editor: Editor supplying the active document
            dispatch: Called with each heartbeat; must not block
            window_ms: Minimum interval between non-save heartbeats for one file
            clock: Returns the current time in milliseconds
        """
        self.editor = editor
        self.dispatch = dispatch
        self.window_ms = window_ms
        self.clock = clock
        self.session = SessionState()

    def on_selection_changed(self) -> Optional[HeartbeatEvent]:
        return self.handle(EditorEventType.SELECTION_CHANGED)

    def on_active_editor_changed(self) -> Optional[HeartbeatEvent]:
        return self.handle(EditorEventType.ACTIVE_EDITOR_CHANGED)

    def on_document_saved(self) -> Optional[HeartbeatEvent]:
        return self.handle(EditorEventType.DOCUMENT_SAVED)

    def handle(self, event_type: EditorEventType) -> Optional[HeartbeatEvent]:
        """Process one editor notification.

        Returns:
            The dispatched heartbeat, or None when nothing was sent
        """
        file = self.editor.active_file()
        if not file:
            return None

        event = HeartbeatEvent(file=file, is_write=event_type.is_write, timestamp=self.clock())
        if not self.should_dispatch(event):
            return None

        # Session state moves forward before the dispatch outcome is known
        self.session.record(event)
        logger.debug(f"Heartbeat for {file} ({event_type.value})")
        self.dispatch(event)
        return event

    def should_dispatch(self, event: HeartbeatEvent) -> bool:
        return (
            event.is_write
            or self._enough_time_passed(event.timestamp)
            or event.file != self.session.last_file
        )

    def _enough_time_passed(self, now: float) -> bool:
        return now - self.session.last_heartbeat_ms >= self.window_ms
