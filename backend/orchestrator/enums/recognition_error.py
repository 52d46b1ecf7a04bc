"""
Recognition error kinds reported by the speech-to-text engine.

Values match the error strings emitted by browser speech engines.
"""

from __future__ import annotations

from enum import Enum


class RecognitionErrorKind(str, Enum):
    """
    Error kind carried by an engine error signal.

    NO_SPEECH / ABORTED:
        Transient. Recovered by a delayed restart while always-on.

    NOT_ALLOWED:
        Microphone permission denied. Terminal for the session until
        the user re-enables voice assistance.

    Anything else is logged only; the engine's end signal that follows
    decides whether to restart.
    """

    NO_SPEECH = "no-speech"
    ABORTED = "aborted"
    NOT_ALLOWED = "not-allowed"
    NETWORK = "network"
    AUDIO_CAPTURE = "audio-capture"
    SERVICE_NOT_ALLOWED = "service-not-allowed"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: str | None) -> RecognitionErrorKind:
        """Map an engine error string onto a kind; unknown strings map to OTHER."""
        if not raw:
            return cls.OTHER
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.OTHER


TRANSIENT_ERROR_KINDS: frozenset[RecognitionErrorKind] = frozenset({
    RecognitionErrorKind.NO_SPEECH,
    RecognitionErrorKind.ABORTED,
})
