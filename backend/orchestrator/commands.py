"""
Side-effect command definitions for the listening reducer.

Rules:
- Commands are declarative requests for side effects.
- Commands are emitted by the reducer and executed by the runtime.
- No behavior, no async, no I/O, no clocks.
Invariant:
    - All concrete Command subclasses MUST be frozen dataclasses.
    - Commands are immutable value objects emitted by the reducer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from orchestrator.intents import Utterance
from orchestrator.retry import RestartReason
from orchestrator.state_dataclass import VoiceStatus


# =============================================================================
# Command Type Enumeration
# =============================================================================

class CommandType(str, Enum):
    """
    Canonical command types emitted by the reducer.

    These are stable discriminants used for logging and runtime dispatch.
    """

    # Recognition engine
    ACQUIRE_RECOGNIZER = "ACQUIRE_RECOGNIZER"
    START_RECOGNITION = "START_RECOGNITION"
    STOP_RECOGNITION = "STOP_RECOGNITION"

    # Timers
    SCHEDULE_RESTART = "SCHEDULE_RESTART"
    CANCEL_RESTART = "CANCEL_RESTART"

    # Feedback
    SPEAK = "SPEAK"
    PUBLISH_STATUS = "PUBLISH_STATUS"
    SHOW_STATUS_MESSAGE = "SHOW_STATUS_MESSAGE"

    # Commands
    DISPATCH_UTTERANCE = "DISPATCH_UTTERANCE"

    # Observability
    LOG_EVENT = "LOG_EVENT"


# =============================================================================
# Base Command
# =============================================================================

class Command:
    """
    Base command type.

    command_type is an explicit discriminant and must never be inferred
    from Python type identity.
    """

    command_type: CommandType


# =============================================================================
# Recognition Commands
# =============================================================================

@dataclass(frozen=True)
class AcquireRecognizer(Command):
    """
    Lazily acquire the recognition engine.

    The runtime answers with RecognizerAcquired or RecognizerUnavailable.
    """
    command_type: CommandType = CommandType.ACQUIRE_RECOGNIZER


@dataclass(frozen=True)
class StartRecognition(Command):
    """Request the engine to begin a recognition segment."""
    command_type: CommandType = CommandType.START_RECOGNITION


@dataclass(frozen=True)
class StopRecognition(Command):
    """Request the engine to stop the current segment."""
    command_type: CommandType = CommandType.STOP_RECOGNITION


# =============================================================================
# Timer Commands
# =============================================================================

@dataclass(frozen=True)
class ScheduleRestart(Command):
    """
    Start (or replace) the single restart timer.

    On expiry the runtime feeds RestartReady back into the reducer.
    """
    delay_ms: int
    reason: RestartReason
    command_type: CommandType = CommandType.SCHEDULE_RESTART


@dataclass(frozen=True)
class CancelRestart(Command):
    """Cancel the pending restart timer, if any."""
    command_type: CommandType = CommandType.CANCEL_RESTART


# =============================================================================
# Feedback Commands
# =============================================================================

@dataclass(frozen=True)
class Speak(Command):
    """Speak text; cancels any in-flight speech."""
    text: str
    command_type: CommandType = CommandType.SPEAK


@dataclass(frozen=True)
class PublishStatus(Command):
    """Push the derived status to the status observer."""
    status: VoiceStatus
    command_type: CommandType = CommandType.PUBLISH_STATUS


@dataclass(frozen=True)
class ShowStatusMessage(Command):
    """Transient status-line message (kind: "info" | "error")."""
    message: str
    kind: str = "info"
    command_type: CommandType = CommandType.SHOW_STATUS_MESSAGE


# =============================================================================
# Dispatch Commands
# =============================================================================

@dataclass(frozen=True)
class DispatchUtterance(Command):
    """Hand one final transcript to the command dispatcher."""
    utterance: Utterance
    command_type: CommandType = CommandType.DISPATCH_UTTERANCE


# =============================================================================
# Observability Commands
# =============================================================================

@dataclass(frozen=True)
class LogEvent(Command):
    """
    Emit a structured log event.

    event must be JSON-serializable.
    """
    event: dict[str, Any]
    command_type: CommandType = CommandType.LOG_EVENT
