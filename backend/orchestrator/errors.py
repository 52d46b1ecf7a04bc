"""
Error taxonomy for the voice engine.

Rules:
- Every failure the engine can meet has a named kind here.
- All of them are handled locally by speaking a corrective message.
- Only PERMISSION_DENIED ends the listening session.
- No exception defined here is allowed to cross the session boundary.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """
    Classification used in log records and dispatch outcomes.

    CAPABILITY_UNSUPPORTED:
        Speech engine missing; reported once, session cannot start.

    PERMISSION_DENIED:
        Microphone refused; always-on disabled, spoken explanation.

    TRANSIENT_RECOGNITION:
        no-speech / aborted; recovered by restart, never surfaced.

    TARGET_NOT_FOUND:
        Resolution chain exhausted after the single retry.

    AMBIGUOUS_ORDINAL:
        A vote was asked for but no usable ordinal was heard.

    UNRECOGNIZED_INTENT:
        No keyword matched; answered with contextual help.
    """

    CAPABILITY_UNSUPPORTED = "capability_unsupported"
    PERMISSION_DENIED = "permission_denied"
    TRANSIENT_RECOGNITION = "transient_recognition"
    TARGET_NOT_FOUND = "target_not_found"
    AMBIGUOUS_ORDINAL = "ambiguous_ordinal"
    UNRECOGNIZED_INTENT = "unrecognized_intent"


class VoiceEngineError(Exception):
    """
    Base class for engine-internal failures.

    spoken:
        Corrective message to speak to the user, if any.
    """

    kind: ErrorKind | None = None

    def __init__(self, message: str, *, spoken: str | None = None) -> None:
        super().__init__(message)
        self.spoken = spoken


class CapabilityUnsupportedError(VoiceEngineError):
    """Raised when a speech engine cannot be acquired."""

    kind = ErrorKind.CAPABILITY_UNSUPPORTED


class TargetNotFoundError(VoiceEngineError):
    """Raised when no lookup strategy produced an action target."""

    kind = ErrorKind.TARGET_NOT_FOUND


class AmbiguousOrdinalError(VoiceEngineError):
    """Raised when a vote command carries no usable ordinal."""

    kind = ErrorKind.AMBIGUOUS_ORDINAL


class SurfaceError(VoiceEngineError):
    """Raised by surface collaborators when an invocation cannot be delivered."""
