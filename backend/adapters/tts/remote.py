"""
Speech synthesis performed by the host page.
"""

from __future__ import annotations

from typing import Any, Callable

from adapters.tts.base import SpeechOptions, SpeechSynthesizer
from constants import SPEECH_LANG_DEFAULT
from observability.logger import log_event


class RemoteSpeechSynthesizer(SpeechSynthesizer):
    """
    Sends SPEAK / STOP_SPEAKING messages.

    Every SPEAK carries interrupt=True: the host cancels in-flight speech
    before speaking. When the host reported no synthesis engine, speech is
    dropped and logged.
    """

    def __init__(
        self,
        enqueue: Callable[[dict[str, Any]], None],
        *,
        lang: str = SPEECH_LANG_DEFAULT,
        session_id: str | None = None,
    ) -> None:
        self._enqueue = enqueue
        self._lang = lang
        self._session_id = session_id
        self.supported: bool = True

    def set_supported(self, supported: bool) -> None:
        self.supported = supported

    def speak(self, text: str, options: SpeechOptions | None = None) -> None:
        if not self.supported:
            log_event({
                "level": "DEBUG",
                "event_type": "SPEECH_DROPPED",
                "session_id": self._session_id,
                "text": text,
            })
            return
        self._enqueue({
            "type": "SPEAK",
            "text": text,
            "lang": self._lang,
            "interrupt": True,
            "options": (options or SpeechOptions()).to_json(),
        })

    def stop(self) -> None:
        if self.supported:
            self._enqueue({"type": "STOP_SPEAKING"})
