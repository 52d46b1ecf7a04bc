"""
Speech synthesis adapter contract.

This module defines the *interface only*: no phrase selection, no timing,
no orchestration decisions live here.

Key invariants:
- A new speak() cancels whatever is currently being spoken.
- Missing synthesis capability is not an error: speech is dropped.
- The adapter never calls the reducer or the dispatcher.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from constants import SPEECH_PITCH_DEFAULT, SPEECH_RATE_DEFAULT, SPEECH_VOLUME_DEFAULT


@dataclass(frozen=True)
class SpeechOptions:
    """Voice parameters for one utterance (browser ranges: rate/pitch 0-2, volume 0-1)."""
    rate: float = SPEECH_RATE_DEFAULT
    pitch: float = SPEECH_PITCH_DEFAULT
    volume: float = SPEECH_VOLUME_DEFAULT

    def to_json(self) -> dict[str, float]:
        return {"rate": self.rate, "pitch": self.pitch, "volume": self.volume}


class SpeechSynthesizer(ABC):
    """
    Abstract interface for a text-to-speech output.

    Implementations are responsible for:
    - Cancelling in-flight speech before speaking new text
    - Applying language and voice options
    - Dropping speech quietly when the host has no synthesis engine

    Non-responsibilities:
    - No choice of what to say
    - No retries
    """

    @abstractmethod
    def speak(self, text: str, options: SpeechOptions | None = None) -> None:
        """Speak text, interrupting any current utterance."""
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        """Cancel current speech. Idempotent."""
        raise NotImplementedError
