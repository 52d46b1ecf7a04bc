"""
Status display on the host page.
"""

from __future__ import annotations

from typing import Any, Callable

from orchestrator.state_dataclass import VoiceStatus


class RemoteStatusObserver:
    """Mirrors VoiceStatus to the host page's status indicator and toggle button."""

    def __init__(self, enqueue: Callable[[dict[str, Any]], None]) -> None:
        self._enqueue = enqueue
        self.last_status: VoiceStatus | None = None

    def publish(self, status: VoiceStatus) -> None:
        self.last_status = status
        self._enqueue({"type": "VOICE_STATUS", **status.to_json()})

    def show_message(self, message: str, kind: str) -> None:
        self._enqueue({"type": "STATUS_MESSAGE", "message": message, "kind": kind})
