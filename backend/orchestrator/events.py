"""
Event definitions for the listening reducer.

Rules:
- Events describe facts that have occurred (or requests that arrived).
- Events carry data only (no behavior).
- All reducer decisions are based on these events.
- No clocks, no timers, no async, no side effects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from orchestrator.enums.recognition_error import RecognitionErrorKind


# =============================================================================
# Event Type Enumeration
# =============================================================================

class EventType(str, Enum):
    """
    Canonical event types understood by the listening reducer.

    Every (state, event_type) pair must be explicitly handled
    or explicitly ignored by the reducer.
    """

    # ------------------------------------------------------------------
    # User / page control
    # ------------------------------------------------------------------
    START_REQUESTED = "START_REQUESTED"
    STOP_REQUESTED = "STOP_REQUESTED"
    TOGGLE_REQUESTED = "TOGGLE_REQUESTED"
    ALWAYS_ON_SET = "ALWAYS_ON_SET"

    # ------------------------------------------------------------------
    # Engine acquisition
    # ------------------------------------------------------------------
    RECOGNIZER_ACQUIRED = "RECOGNIZER_ACQUIRED"
    RECOGNIZER_UNAVAILABLE = "RECOGNIZER_UNAVAILABLE"

    # ------------------------------------------------------------------
    # Engine signals
    # ------------------------------------------------------------------
    ENGINE_STARTED = "ENGINE_STARTED"
    ENGINE_START_FAILED = "ENGINE_START_FAILED"
    ENGINE_RESULT = "ENGINE_RESULT"
    ENGINE_ERROR = "ENGINE_ERROR"
    ENGINE_ENDED = "ENGINE_ENDED"

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------
    RESTART_READY = "RESTART_READY"


# =============================================================================
# Base Event
# =============================================================================

@dataclass(frozen=True)
class Event:
    """
    Base event type.

    All events must specify:
    - event_type: discriminant
    - ts_ms: timestamp provided by the source (or fake in tests)
    """

    event_type: EventType
    ts_ms: int


# =============================================================================
# Control Events
# =============================================================================

@dataclass(frozen=True)
class StartRequested(Event):
    """Begin listening (page init, explicit start)."""


@dataclass(frozen=True)
class StopRequested(Event):
    """Stop listening; never throws, idempotent."""


@dataclass(frozen=True)
class ToggleRequested(Event):
    """Flip always-on and announce the new mode."""


@dataclass(frozen=True)
class AlwaysOnSet(Event):
    """Set always-on explicitly (starts or stops accordingly)."""
    enabled: bool


# =============================================================================
# Acquisition Events
# =============================================================================

@dataclass(frozen=True)
class RecognizerAcquired(Event):
    """Speech engine exists and is configured."""


@dataclass(frozen=True)
class RecognizerUnavailable(Event):
    """No speech engine on this host."""
    reason: str | None = None


# =============================================================================
# Engine Events
# =============================================================================

@dataclass(frozen=True)
class EngineStarted(Event):
    """Engine confirmed it is capturing speech."""


@dataclass(frozen=True)
class EngineStartFailed(Event):
    """Engine refused a start request (e.g. already running)."""
    reason: str


@dataclass(frozen=True)
class EngineResult(Event):
    """Final recognized transcript for one phrase."""
    transcript: str


@dataclass(frozen=True)
class EngineError(Event):
    """Engine reported an error signal."""
    kind: RecognitionErrorKind
    raw: str | None = None


@dataclass(frozen=True)
class EngineEnded(Event):
    """Engine ended the current recognition segment."""


# =============================================================================
# Timer Events
# =============================================================================

@dataclass(frozen=True)
class RestartReady(Event):
    """The pending restart delay elapsed."""
