"""
Speech recognition driven by the host page.

The browser owns the microphone and the recognition engine. This adapter
turns start/stop requests into control messages; the engine's signals
come back through the gateway (RECOGNITION_* messages).
"""

from __future__ import annotations

from typing import Any, Callable

from adapters.asr.base import SpeechRecognizer
from constants import (
    RECOGNITION_CONTINUOUS,
    RECOGNITION_INTERIM_RESULTS,
    RECOGNITION_MAX_ALTERNATIVES,
    SPEECH_LANG_DEFAULT,
)
from orchestrator.errors import CapabilityUnsupportedError


class RemoteSpeechRecognizer(SpeechRecognizer):
    """
    Recognizer proxy for the host page's engine.

    supported is unknown (None) until the host page announces its
    capabilities; acquisition fails unless it is explicitly True.
    """

    def __init__(
        self,
        enqueue: Callable[[dict[str, Any]], None],
        *,
        lang: str = SPEECH_LANG_DEFAULT,
    ) -> None:
        self._enqueue = enqueue
        self._lang = lang
        self.supported: bool | None = None

    def set_supported(self, supported: bool) -> None:
        self.supported = supported

    def acquire(self) -> None:
        if not self.supported:
            raise CapabilityUnsupportedError("host page has no speech recognition engine")

    def start(self) -> None:
        self._enqueue({
            "type": "START_RECOGNITION",
            "lang": self._lang,
            "continuous": RECOGNITION_CONTINUOUS,
            "interim_results": RECOGNITION_INTERIM_RESULTS,
            "max_alternatives": RECOGNITION_MAX_ALTERNATIVES,
        })

    def stop(self) -> None:
        self._enqueue({"type": "STOP_RECOGNITION"})
