"""
Voice session container.

- Owns the engine objects of one host page connection: page context,
  timers, resolver/router/dispatcher, listening runtime
- Owns the outbound control queue (drained by SessionGateway)
- Owned and mutated by SessionGateway
- NOT a state machine: listening decisions live in the reducer
"""

from __future__ import annotations

import itertools
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable

from adapters.asr.remote import RemoteSpeechRecognizer
from adapters.host.navigation import RemoteNavigator
from adapters.host.status import RemoteStatusObserver
from adapters.host.surface import RemoteSurface
from adapters.tts.remote import RemoteSpeechSynthesizer
from constants import PAGE_GREETING_DELAY_MS, SPEECH_LANG_DEFAULT
from observability.logger import log_event
from orchestrator.dispatcher import CommandDispatcher, DispatchOutcome
from orchestrator.enums.page_context import PageContext
from orchestrator.intents import Utterance
from orchestrator.resolver import TargetKind
from orchestrator.runtime import ListeningSessionManager
from orchestrator.runtime_context import RuntimeExecutionContext, SessionStoreProtocol
from orchestrator.timers import AsyncioScheduler, Scheduler, TimerRegistry
from orchestrator.vocabulary import GREETING_BY_CONTEXT, SAY_NOW_ON_PAGE
from session.connection_status import ConnectionStatus
from store.voting_store import VotingStore


TIMER_PAGE_GREETING = "page_greeting"


@dataclass
class VoiceSession:
    """Mutable runtime container for a single host page connection."""

    # ------------------------------------------------------------------
    # Identity / lifecycle
    # ------------------------------------------------------------------

    session_id: str
    created_at: float = field(default_factory=time.time)

    page_context: PageContext = PageContext.LOGIN
    speech_lang: str = SPEECH_LANG_DEFAULT

    # ------------------------------------------------------------------
    # Connection / gateway-controlled state
    # ------------------------------------------------------------------

    connection_status: ConnectionStatus = ConnectionStatus.CONNECTING

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    store: SessionStoreProtocol = field(default_factory=VotingStore)
    scheduler: Scheduler = field(default_factory=AsyncioScheduler)

    # Called after every timer callback (gateway pushes queued messages)
    on_timer_fired: Callable[[str], None] | None = None

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def __post_init__(self) -> None:
        """Construct session-owned engine objects that require session_id."""
        self._control_out: deque[dict[str, Any]] = deque()
        self._disposed = False
        # Typed commands count down from -1; spoken utterances count up from 1
        self._typed_seq = itertools.count(-1, -1)

        self.recognizer = RemoteSpeechRecognizer(self.enqueue_control, lang=self.speech_lang)
        self.synthesizer = RemoteSpeechSynthesizer(
            self.enqueue_control,
            lang=self.speech_lang,
            session_id=self.session_id,
        )
        self.surface = RemoteSurface(self.enqueue_control)
        self.navigator = RemoteNavigator(self.enqueue_control)
        self.observer = RemoteStatusObserver(self.enqueue_control)

        self.timers = TimerRegistry(
            scheduler=self.scheduler,
            session_id=self.session_id,
            on_fire=self._timer_fired,
        )
        self.dispatcher = CommandDispatcher(
            session_id=self.session_id,
            surface=self.surface,
            synthesizer=self.synthesizer,
            navigator=self.navigator,
            store=self.store,
            timers=self.timers,
            get_context=lambda: self.page_context,
        )
        self.runtime_context = RuntimeExecutionContext(
            session_id=self.session_id,
            recognizer=self.recognizer,
            synthesizer=self.synthesizer,
            observer=self.observer,
            connection_status=self.connection_status,
        )
        self.listening = ListeningSessionManager(
            context=self.runtime_context,
            timers=self.timers,
            on_utterance=self.dispatcher.dispatch,
        )

    # ------------------------------------------------------------------
    # Page lifecycle
    # ------------------------------------------------------------------

    def set_page_context(self, page: PageContext) -> None:
        self.page_context = page
        log_event({
            "event_type": "PAGE_CONTEXT_SET",
            **self.log_context(),
        })

    def init_voice_for_page(self, page: PageContext, *, auto_start: bool = True) -> None:
        """
        Set the context, enable always-on when requested, and greet on
        pages that have a greeting once the page had time to render.
        """
        self.set_page_context(page)
        self.listening.publish_status()

        if auto_start and not self.listening.state.always_on:
            self.listening.set_always_on(True)

        greeting = GREETING_BY_CONTEXT.get(page)
        if greeting is not None:
            self.timers.start(
                TIMER_PAGE_GREETING,
                PAGE_GREETING_DELAY_MS,
                lambda: self.synthesizer.speak(greeting),
            )
        else:
            self.timers.cancel(TIMER_PAGE_GREETING)

    def announce_navigation(self, page_name: str) -> None:
        self.synthesizer.speak(SAY_NOW_ON_PAGE.format(name=page_name))

    # ------------------------------------------------------------------
    # Debug helpers
    # ------------------------------------------------------------------

    def test_voice_command(self, command: str) -> DispatchOutcome:
        """Dispatch a typed command as if spoken, forcing VOTING handling."""
        utterance = Utterance(text=command, seq=next(self._typed_seq))
        log_event({
            "event_type": "TEST_COMMAND",
            "command": command,
            **self.log_context(),
        })
        return self.dispatcher.dispatch(utterance, context=PageContext.VOTING)

    def lookup_report(self, kind: TargetKind, ordinal: int | None = None) -> dict[str, Any]:
        return {
            "type": "LOOKUP_REPORT",
            "target": kind.value,
            "ordinal": ordinal,
            "strategies": self.dispatcher.resolver.explain(kind, ordinal=ordinal),
        }

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def set_connection_status(self, status: ConnectionStatus) -> None:
        self.connection_status = status
        self.runtime_context.connection_status = status

    def dispose(self) -> None:
        """Stop listening and cancel every pending timer. Idempotent."""
        if self._disposed:
            return
        self._disposed = True
        self.listening.dispose()
        self.timers.cancel_all()
        self.set_connection_status(ConnectionStatus.DOWN)
        log_event({"event_type": "SESSION_DISPOSED", **self.log_context()})

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Observability helpers (read-only)
    # ------------------------------------------------------------------

    def log_context(self) -> dict[str, Any]:
        """Standard logging context for this session."""
        state = self.listening.state
        return {
            "session_id": self.session_id,
            "connection_status": self.connection_status.value,
            "page_context": self.page_context.value,
            "listening_state": state.state.value,
            "always_on": state.always_on,
        }

    # ------------------------------------------------------------------
    # Outbound control queue
    # ------------------------------------------------------------------

    def enqueue_control(self, msg: dict[str, Any]) -> None:
        """
        Enqueue a control message for delivery to the host page.

        Messages are buffered in FIFO order and retrieved via drain_control().
        """
        self._control_out.append(msg)

    def drain_control(self) -> tuple[dict[str, Any], ...]:
        """Atomically drain all pending control messages."""
        items = tuple(self._control_out)
        self._control_out.clear()
        return items

    def _timer_fired(self, timer_id: str) -> None:
        if self.on_timer_fired is not None:
            self.on_timer_fired(timer_id)
