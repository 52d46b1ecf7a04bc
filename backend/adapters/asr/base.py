"""
Speech recognition adapter contract.

This module defines the *interface only*: no restart policy, no timers,
no orchestration decisions live here.

Key invariants:
- The adapter never decides to restart; the listening reducer does.
- Engine signals (started / result / error / ended) are delivered to the
  ListeningSessionManager by whoever observes the engine.
- start() while already running may raise; the runtime reports it as a
  failed start.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class SpeechRecognizer(ABC):
    """
    Abstract interface for a continuous speech recognition engine.

    Implementations are responsible for:
    - Reporting whether an engine exists (acquire)
    - Configuring it: language, continuous mode, final results only,
      a single alternative
    - Forwarding start/stop requests

    Non-responsibilities:
    - No state machine logic (IDLE/STARTING/LISTENING/RESTARTING)
    - No retry or restart decisions
    - No interpretation of transcripts
    """

    @abstractmethod
    def acquire(self) -> None:
        """
        Ensure an engine is available.

        Raises:
            CapabilityUnsupportedError if the host has no recognition engine.
        """
        raise NotImplementedError

    @abstractmethod
    def start(self) -> None:
        """Request a new recognition segment."""
        raise NotImplementedError

    @abstractmethod
    def stop(self) -> None:
        """Request the current segment to end. Idempotent."""
        raise NotImplementedError
