"""
Pure listening reducer.

(state, event) -> (new_state, commands)

Rules:
- Pure: no side effects, no IO, no clocks.
- Deterministic: output depends only on inputs.
- Total: every (state, event) pair is handled or explicitly ignored (logged).
"""

# Restart policy:
#   ScheduleRestart always targets the single restart timer (replace semantics)
#   CancelRestart on stop / always-on disabled / permission denied
# Reducer owns timer semantics; runtime must not cancel timers implicitly.

from __future__ import annotations

from dataclasses import replace
from typing import Any

from orchestrator.commands import (
    AcquireRecognizer,
    CancelRestart,
    Command,
    DispatchUtterance,
    LogEvent,
    PublishStatus,
    ScheduleRestart,
    ShowStatusMessage,
    Speak,
    StartRecognition,
    StopRecognition,
)
from orchestrator.enums.recognition_error import (
    TRANSIENT_ERROR_KINDS,
    RecognitionErrorKind,
)
from orchestrator.enums.state import ListeningState
from orchestrator.errors import ErrorKind
from orchestrator.events import (
    AlwaysOnSet,
    EngineEnded,
    EngineError,
    EngineResult,
    EngineStarted,
    EngineStartFailed,
    Event,
    RecognizerAcquired,
    RecognizerUnavailable,
    RestartReady,
    StartRequested,
    StopRequested,
    ToggleRequested,
)
from orchestrator.intents import Utterance
from orchestrator.retry import RestartReason, restart_delay_ms
from orchestrator.state_dataclass import ListeningSessionState, status_for
from orchestrator.vocabulary import (
    SAY_PERMISSION_DENIED,
    SAY_RECOGNITION_UNSUPPORTED,
    SAY_VOICE_OFF,
    SAY_VOICE_ON,
)


# =============================================================================
# Timer IDs
# =============================================================================

TIMER_RESTART = "listening_restart"

_ACTIVE_STATES = (ListeningState.STARTING, ListeningState.LISTENING)

Result = tuple[ListeningSessionState, tuple[Command, ...]]


# =============================================================================
# Small helpers
# =============================================================================

def _log(
    state: ListeningSessionState,
    event: Event,
    decision: str,
    details: dict[str, Any] | None = None,
    *,
    level: str = "INFO",
) -> LogEvent:
    return LogEvent(
        event={
            "ts_ms": event.ts_ms,
            "level": level,
            "state": state.state.value,
            "always_on": state.always_on,
            "event_type": event.event_type.value,
            "decision": decision,
            "details": details or {},
        }
    )


def _state_changed(
    old: ListeningSessionState,
    new: ListeningSessionState,
    event: Event,
    source: str,
) -> LogEvent:
    return _log(
        new,
        event,
        "state_changed",
        {
            "from_state": old.state.value,
            "to_state": new.state.value,
            "source": source,
        },
    )


def _logs_last(commands: tuple[Command, ...]) -> tuple[Command, ...]:
    non_logs: list[Command] = []
    logs: list[Command] = []
    state_change_logs: list[Command] = []

    for command in commands:
        if isinstance(command, LogEvent):
            if command.event.get("decision") == "state_changed":
                state_change_logs.append(command)
            else:
                logs.append(command)
        else:
            non_logs.append(command)

    return tuple(non_logs + logs + state_change_logs)


def _ignore(state: ListeningSessionState, event: Event, reason: str) -> Result:
    return state, (_log(state, event, "ignore", {"reason": reason}, level="DEBUG"),)


# =============================================================================
# Transitions shared by several events
# =============================================================================

def _begin_start(state: ListeningSessionState, event: Event, source: str) -> Result:
    new_state = replace(state, state=ListeningState.STARTING, start_requested=False)
    cmds: list[Command] = []
    if state.state is ListeningState.RESTARTING:
        cmds.append(CancelRestart())
    cmds.append(StartRecognition())
    cmds.append(_state_changed(state, new_state, event, source))
    return new_state, tuple(cmds)


def _request_start(state: ListeningSessionState, event: Event, source: str) -> Result:
    if state.recognizer_available is False:
        return state, (
            ShowStatusMessage(message=SAY_RECOGNITION_UNSUPPORTED, kind="error"),
            _log(
                state,
                event,
                "start_rejected",
                {"error_kind": ErrorKind.CAPABILITY_UNSUPPORTED.value, "source": source},
                level="WARNING",
            ),
        )

    if state.recognizer_available is None:
        new_state = replace(state, start_requested=True)
        return new_state, (
            _log(new_state, event, "acquire_recognizer", {"source": source}),
            AcquireRecognizer(),
        )

    if state.state in _ACTIVE_STATES:
        return _ignore(state, event, "already_listening")

    return _begin_start(state, event, source)


def _halt(
    state: ListeningSessionState,
    event: Event,
    source: str,
    *,
    always_on: bool,
) -> Result:
    new_state = replace(
        state,
        state=ListeningState.IDLE,
        always_on=always_on,
        start_requested=False,
    )
    cmds: list[Command] = []
    if state.state is ListeningState.RESTARTING:
        cmds.append(CancelRestart())
    if state.state in _ACTIVE_STATES:
        cmds.append(StopRecognition())
    if new_state.state is not state.state:
        cmds.append(_state_changed(state, new_state, event, source))
    return new_state, tuple(cmds)


def _set_always_on(state: ListeningSessionState, event: Event, enabled: bool) -> Result:
    if enabled:
        return _request_start(replace(state, always_on=True), event, "always_on_enabled")
    return _halt(state, event, "always_on_disabled", always_on=False)


def _schedule_restart(
    state: ListeningSessionState,
    event: Event,
    reason: RestartReason,
) -> Result:
    new_state = replace(state, state=ListeningState.RESTARTING)
    cmds: list[Command] = [
        ScheduleRestart(delay_ms=restart_delay_ms(reason), reason=reason),
    ]
    if new_state.state is not state.state:
        cmds.append(_state_changed(state, new_state, event, reason.value))
    return new_state, tuple(cmds)


# =============================================================================
# Reducer
# =============================================================================

def reduce(state: ListeningSessionState, event: Event) -> Result:
    """
    Pure reducer for the listening session state machine.

    Given the current listening state and a single event, returns:
    - the next state
    - a tuple of commands describing required side effects

    Whenever the derived status display changes, a PublishStatus command
    leads the tuple: commands that feed events back (AcquireRecognizer)
    may publish a newer status, which must not be overwritten.
    """
    new_state, commands = _reduce(state, event)
    new_status = status_for(new_state)
    if new_status != status_for(state):
        commands = (PublishStatus(status=new_status),) + commands
    return new_state, _logs_last(commands)


def _reduce(state: ListeningSessionState, event: Event) -> Result:  # pylint: disable=too-many-return-statements,too-many-branches
    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------
    if isinstance(event, StartRequested):
        return _request_start(state, event, "start_requested")

    if isinstance(event, StopRequested):
        if state.state is ListeningState.IDLE and not state.start_requested:
            return _ignore(state, event, "already_idle")
        return _halt(state, event, "stop_requested", always_on=state.always_on)

    if isinstance(event, AlwaysOnSet):
        return _set_always_on(state, event, event.enabled)

    if isinstance(event, ToggleRequested):
        enabling = not state.always_on
        if enabling and state.recognizer_available is False:
            return _request_start(state, event, "toggle")
        new_state, cmds = _set_always_on(state, event, enabling)
        announcement = Speak(text=SAY_VOICE_ON if enabling else SAY_VOICE_OFF)
        return new_state, (announcement,) + cmds

    # ------------------------------------------------------------------
    # Acquisition
    # ------------------------------------------------------------------
    if isinstance(event, RecognizerAcquired):
        acquired = replace(state, recognizer_available=True)
        if state.start_requested and state.state not in _ACTIVE_STATES:
            return _begin_start(acquired, event, "recognizer_acquired")
        return acquired, (_log(acquired, event, "recognizer_acquired"),)

    if isinstance(event, RecognizerUnavailable):
        new_state = replace(
            state,
            recognizer_available=False,
            start_requested=False,
            always_on=False,
            last_error=ErrorKind.CAPABILITY_UNSUPPORTED.value,
        )
        return new_state, (
            ShowStatusMessage(message=SAY_RECOGNITION_UNSUPPORTED, kind="error"),
            Speak(text=SAY_RECOGNITION_UNSUPPORTED),
            _log(
                new_state,
                event,
                "recognizer_unavailable",
                {
                    "error_kind": ErrorKind.CAPABILITY_UNSUPPORTED.value,
                    "reason": event.reason,
                },
                level="WARNING",
            ),
        )

    # ------------------------------------------------------------------
    # Engine signals
    # ------------------------------------------------------------------
    if isinstance(event, EngineStarted):
        if state.state is ListeningState.LISTENING:
            return _ignore(state, event, "already_listening")
        if state.state is ListeningState.IDLE:
            # Stop arrived before the engine confirmed; undo the late start
            return state, (
                StopRecognition(),
                _log(state, event, "late_start_stopped"),
            )
        new_state = replace(state, state=ListeningState.LISTENING, last_error=None)
        return new_state, (_state_changed(state, new_state, event, "engine_started"),)

    if isinstance(event, EngineStartFailed):
        new_state = replace(state, state=ListeningState.IDLE, last_error=event.reason)
        cmds: tuple[Command, ...] = (
            _log(new_state, event, "start_failed", {"reason": event.reason}, level="ERROR"),
        )
        if new_state.state is not state.state:
            cmds += (_state_changed(state, new_state, event, "start_failed"),)
        return new_state, cmds

    if isinstance(event, EngineResult):
        transcript = event.transcript.strip()
        if not transcript:
            return _ignore(state, event, "empty_transcript")
        seq = state.utterance_seq + 1
        new_state = replace(state, utterance_seq=seq)
        return new_state, (
            DispatchUtterance(utterance=Utterance(text=transcript, seq=seq)),
            _log(new_state, event, "utterance_received", {"seq": seq, "transcript": transcript}),
        )

    if isinstance(event, EngineError):
        return _on_engine_error(state, event)

    if isinstance(event, EngineEnded):
        if state.state is ListeningState.IDLE:
            return _ignore(state, event, "ended_while_idle")
        if state.always_on:
            return _schedule_restart(state, event, RestartReason.SEGMENT_ENDED)
        new_state = replace(state, state=ListeningState.IDLE)
        return new_state, (_state_changed(state, new_state, event, "engine_ended"),)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------
    if isinstance(event, RestartReady):
        if not state.always_on:
            return _ignore(state, event, "always_on_disabled")
        if state.state is not ListeningState.RESTARTING:
            return _ignore(state, event, "no_restart_pending")
        return _begin_start(state, event, "restart")

    return _ignore(state, event, "unhandled_event")


def _on_engine_error(state: ListeningSessionState, event: EngineError) -> Result:
    if event.kind is RecognitionErrorKind.NOT_ALLOWED:
        halted, cmds = _halt(state, event, "permission_denied", always_on=False)
        new_state = replace(halted, last_error=ErrorKind.PERMISSION_DENIED.value)
        return new_state, (
            Speak(text=SAY_PERMISSION_DENIED),
            *cmds,
            _log(
                new_state,
                event,
                "permission_denied",
                {"error_kind": ErrorKind.PERMISSION_DENIED.value, "raw": event.raw},
                level="WARNING",
            ),
        )

    if event.kind in TRANSIENT_ERROR_KINDS:
        if state.always_on and state.state is not ListeningState.IDLE:
            new_state, cmds = _schedule_restart(state, event, RestartReason.TRANSIENT_ERROR)
            return new_state, cmds + (
                _log(
                    new_state,
                    event,
                    "transient_error",
                    {"error_kind": ErrorKind.TRANSIENT_RECOGNITION.value, "raw": event.raw},
                    level="DEBUG",
                ),
            )
        return _ignore(state, event, "transient_error_not_always_on")

    # Other engine errors: the ended signal that follows decides
    new_state = replace(state, last_error=event.kind.value)
    return new_state, (
        _log(
            new_state,
            event,
            "engine_error",
            {"error": event.kind.value, "raw": event.raw},
            level="ERROR",
        ),
    )
