"""
Runtime execution shell for a single listening session.

Responsibilities:
- Own listening state
- Call the pure reducer
- Execute commands with side effects (engine, speech, status, timers)
- Convert timer expiry into events
- Hand final transcripts to the dispatcher and keep its failures local

Non-responsibilities:
- Classifying or acting on commands (dispatcher)
- Transport concerns (gateway)
"""

from __future__ import annotations

import time
from typing import Callable

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
from orchestrator.enums.recognition_error import RecognitionErrorKind
from orchestrator.errors import CapabilityUnsupportedError
from orchestrator.events import (
    AlwaysOnSet,
    EngineEnded,
    EngineError,
    EngineResult,
    EngineStarted,
    EngineStartFailed,
    Event,
    EventType,
    RecognizerAcquired,
    RecognizerUnavailable,
    RestartReady,
    StartRequested,
    StopRequested,
    ToggleRequested,
)
from orchestrator.intents import Utterance
from orchestrator.reducer import TIMER_RESTART, reduce
from orchestrator.runtime_context import RuntimeExecutionContext
from orchestrator.state_dataclass import ListeningSessionState, VoiceStatus, status_for
from orchestrator.timers import TimerRegistry
from orchestrator.vocabulary import SAY_DISPATCH_FAILED

from observability.logger import log_event


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class ListeningSessionManager:
    """
    Runtime execution boundary for the listening session.

    Responsibilities:
    - Own the authoritative listening state
    - Act as the universal event sink for the session
      (page control, engine signals, timer events)
    - Invoke the pure reducer deterministically
    - Execute emitted commands with side effects

    Guarantees:
    - Reducer is called exactly once per incoming event
    - State is updated before any side effects execute
    - Commands are executed in reducer-emitted order
    - No exception raised while dispatching an utterance escapes;
      the user hears an apology instead
    """

    def __init__(
        self,
        *,
        context: RuntimeExecutionContext,
        timers: TimerRegistry,
        on_utterance: Callable[[Utterance], object],
        initial_state: ListeningSessionState | None = None,
    ) -> None:
        self._ctx = context
        self._timers = timers
        self._on_utterance = on_utterance
        self._state = initial_state or ListeningSessionState()

    @property
    def state(self) -> ListeningSessionState:
        """Current immutable listening state (read-only)."""
        return self._state

    @property
    def status(self) -> VoiceStatus:
        return status_for(self._state)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        self.handle_event(StartRequested(event_type=EventType.START_REQUESTED, ts_ms=_now_ms()))

    def stop(self) -> None:
        self.handle_event(StopRequested(event_type=EventType.STOP_REQUESTED, ts_ms=_now_ms()))

    def toggle(self) -> None:
        self.handle_event(ToggleRequested(event_type=EventType.TOGGLE_REQUESTED, ts_ms=_now_ms()))

    def set_always_on(self, enabled: bool) -> None:
        self.handle_event(
            AlwaysOnSet(event_type=EventType.ALWAYS_ON_SET, ts_ms=_now_ms(), enabled=enabled)
        )

    def publish_status(self) -> None:
        """Push the current status unconditionally (page init)."""
        self._ctx.observer.publish(self.status)

    # ------------------------------------------------------------------
    # Engine signals
    # ------------------------------------------------------------------

    def on_engine_started(self) -> None:
        self.handle_event(EngineStarted(event_type=EventType.ENGINE_STARTED, ts_ms=_now_ms()))

    def on_engine_result(self, transcript: str) -> None:
        self.handle_event(
            EngineResult(event_type=EventType.ENGINE_RESULT, ts_ms=_now_ms(), transcript=transcript)
        )

    def on_engine_error(self, raw: str | None) -> None:
        self.handle_event(
            EngineError(
                event_type=EventType.ENGINE_ERROR,
                ts_ms=_now_ms(),
                kind=RecognitionErrorKind.parse(raw),
                raw=raw,
            )
        )

    def on_engine_ended(self) -> None:
        self.handle_event(EngineEnded(event_type=EventType.ENGINE_ENDED, ts_ms=_now_ms()))

    # ------------------------------------------------------------------
    # Event pipeline
    # ------------------------------------------------------------------

    def handle_event(self, event: Event) -> None:
        """
        Process a single event through the listening pipeline.

        1. Pass the current state and event to the pure reducer
        2. Swap in the new state
        3. Execute all emitted commands sequentially

        Command execution may feed follow-up events (acquisition result,
        start failure) back into this method.
        """
        new_state, commands = reduce(self._state, event)
        self._state = new_state

        for cmd in commands:
            self._execute_command(cmd)

    def dispose(self) -> None:
        """Stop listening and drop the restart timer. Idempotent."""
        self._timers.cancel(TIMER_RESTART)
        self.set_always_on(False)

    # ------------------------------------------------------------------
    # Command execution (side effects)
    # ------------------------------------------------------------------

    def _execute_command(self, cmd: Command) -> None:  # pylint: disable=too-many-branches
        """Execute a single command with side effects."""

        if isinstance(cmd, LogEvent):
            log_event({
                **cmd.event,
                "session_id": self._ctx.session_id,
                "connection_status": self._ctx.connection_status.value,
            })

        elif isinstance(cmd, AcquireRecognizer):
            try:
                self._ctx.recognizer.acquire()
            except CapabilityUnsupportedError as e:
                self.handle_event(
                    RecognizerUnavailable(
                        event_type=EventType.RECOGNIZER_UNAVAILABLE,
                        ts_ms=_now_ms(),
                        reason=str(e),
                    )
                )
                return
            self.handle_event(
                RecognizerAcquired(event_type=EventType.RECOGNIZER_ACQUIRED, ts_ms=_now_ms())
            )

        elif isinstance(cmd, StartRecognition):
            try:
                self._ctx.recognizer.start()
            except Exception as e:  # pylint: disable=broad-exception-caught
                self.handle_event(
                    EngineStartFailed(
                        event_type=EventType.ENGINE_START_FAILED,
                        ts_ms=_now_ms(),
                        reason=str(e) or type(e).__name__,
                    )
                )

        elif isinstance(cmd, StopRecognition):
            try:
                self._ctx.recognizer.stop()
            except Exception as e:  # pylint: disable=broad-exception-caught
                # stop() never throws to callers
                log_event({
                    "level": "WARNING",
                    "event_type": "STOP_RECOGNITION_FAILED",
                    "session_id": self._ctx.session_id,
                    "error": str(e),
                })

        elif isinstance(cmd, ScheduleRestart):
            self._timers.start(TIMER_RESTART, cmd.delay_ms, self._on_restart_timer)
            log_event({
                "event_type": "RESTART_SCHEDULED",
                "session_id": self._ctx.session_id,
                "delay_ms": cmd.delay_ms,
                "reason": cmd.reason.value,
            })

        elif isinstance(cmd, CancelRestart):
            self._timers.cancel(TIMER_RESTART)

        elif isinstance(cmd, Speak):
            self._ctx.synthesizer.speak(cmd.text)

        elif isinstance(cmd, PublishStatus):
            self._ctx.observer.publish(cmd.status)

        elif isinstance(cmd, ShowStatusMessage):
            self._ctx.observer.show_message(cmd.message, cmd.kind)

        elif isinstance(cmd, DispatchUtterance):
            self._dispatch(cmd.utterance)

        else:
            raise RuntimeError(f"Unhandled command: {cmd!r}")

    def _on_restart_timer(self) -> None:
        self.handle_event(RestartReady(event_type=EventType.RESTART_READY, ts_ms=_now_ms()))

    def _dispatch(self, utterance: Utterance) -> None:
        try:
            self._on_utterance(utterance)
        except Exception as e:  # pylint: disable=broad-exception-caught
            log_event({
                "level": "ERROR",
                "event_type": "DISPATCH_FAILED",
                "session_id": self._ctx.session_id,
                "seq": utterance.seq,
                "error": repr(e),
            })
            self._ctx.synthesizer.speak(SAY_DISPATCH_FAILED)
