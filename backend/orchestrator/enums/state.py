"""
Listening state enumeration.

Rules:
- This enum defines ONLY the listening lifecycle states.
- No behavior, no helper methods, no side effects.
- Transitions are defined exclusively in the listening reducer.
"""

from __future__ import annotations

from enum import Enum


class ListeningState(str, Enum):
    """
    Lifecycle of the continuous listening session.

    IDLE:
        No recognition requested.

    STARTING:
        Start requested, engine has not yet signalled started.

    LISTENING:
        Engine confirmed it is capturing speech.

    RESTARTING:
        A delayed restart is pending after a transient error or an
        end-of-segment while always-on.
    """

    IDLE = "IDLE"
    STARTING = "STARTING"
    LISTENING = "LISTENING"
    RESTARTING = "RESTARTING"
