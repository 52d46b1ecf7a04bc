"""
Session gateway: host page messages <-> voice engine.

Responsibilities:
- Create and dispose the VoiceSession of one connection
- Translate inbound JSON messages into engine calls
- Return produced control messages in a GatewayResult
- Push messages produced by timers through the send callback

Non-responsibilities:
- No listening decisions (reducer)
- No command interpretation (dispatcher)

Malformed JSON, unknown message types, invalid payloads and messages
before HELLO are logged and dropped, never raised.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable
from uuid import uuid4

from config import AppConfig
from constants import SPEECH_PITCH_DEFAULT, SPEECH_RATE_DEFAULT, SPEECH_VOLUME_DEFAULT
from observability.logger import log_event
from orchestrator.enums.page_context import PageContext
from orchestrator.resolver import TargetKind
from orchestrator.timers import Scheduler
from session.connection_status import ConnectionStatus
from session.voice_session import VoiceSession
from store.voting_store import VotingStore
from surface.elements import Surface


SendCallback = Callable[[dict[str, Any]], Awaitable[None]]


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _new_session_id() -> str:
    return f"sess_{uuid4().hex[:12]}"


def _join_transcript(data: dict[str, Any]) -> str:
    """Single transcript, or several segment transcripts joined by spaces."""
    results = data.get("results")
    if isinstance(results, list):
        return " ".join(str(r).strip() for r in results if str(r).strip()).strip()
    return str(data.get("transcript") or "").strip()


def _optional_ordinal(raw: Any) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    raise ValueError(f"ordinal must be an integer, got {raw!r}")


# ------------------------------------------------------------------
# Gateway result
# ------------------------------------------------------------------

@dataclass(frozen=True)
class GatewayResult:
    """
    Return value for gateway boundary methods.

    outbound_json:
        JSON messages to send to the host page, in production order
    """
    outbound_json: tuple[dict[str, Any], ...] = ()


# ------------------------------------------------------------------
# SessionGateway
# ------------------------------------------------------------------

class SessionGateway:
    """One gateway == one host page connection == one voice session."""

    def __init__(
        self,
        *,
        config: AppConfig,
        store: VotingStore,
        send: SendCallback | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._send = send
        self._scheduler = scheduler
        self._push_tasks: set[asyncio.Task[None]] = set()
        self.session: VoiceSession | None = None

        self._handlers: dict[str, Callable[[dict[str, Any]], None]] = {
            "HELLO": self._on_hello,
            "SET_PAGE": self._on_set_page,
            "SURFACE_SNAPSHOT": self._on_surface_snapshot,
            "RECOGNITION_STARTED": self._on_recognition_started,
            "RECOGNITION_RESULT": self._on_recognition_result,
            "RECOGNITION_ERROR": self._on_recognition_error,
            "RECOGNITION_ENDED": self._on_recognition_ended,
            "VOICE_TOGGLE": self._on_voice_toggle,
            "VOICE_START": self._on_voice_start,
            "VOICE_STOP": self._on_voice_stop,
            "ANNOUNCE_NAVIGATION": self._on_announce_navigation,
            "TEST_COMMAND": self._on_test_command,
            "DEBUG_LOOKUP": self._on_debug_lookup,
            "SESSION_END": self._on_session_end,
        }

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def on_ws_connect(self) -> GatewayResult:
        """Called when a WebSocket connection is established."""
        session_id = _new_session_id()

        kwargs: dict[str, Any] = {}
        if self._scheduler is not None:
            kwargs["scheduler"] = self._scheduler

        self.session = VoiceSession(
            session_id=session_id,
            page_context=self._config.default_page,
            speech_lang=self._config.speech_lang,
            store=self._store.for_session(session_id),
            on_timer_fired=self._on_timer_fired,
            **kwargs,
        )

        log_event({
            "ts_ms": _now_ms(),
            "event_type": "WS_CONNECTED",
            **self.session.log_context(),
        })

        init_msg: dict[str, Any] = {
            "type": "SESSION_INIT",
            "session_id": session_id,
            "lang": self._config.speech_lang,
            "speech_defaults": {
                "rate": SPEECH_RATE_DEFAULT,
                "pitch": SPEECH_PITCH_DEFAULT,
                "volume": SPEECH_VOLUME_DEFAULT,
            },
            "auto_start": self._config.auto_start_voice,
        }
        return GatewayResult(outbound_json=(init_msg,) + self._drain_control_out())

    async def on_ws_disconnect(self, reason: str | None = None) -> GatewayResult:
        """Called when the WebSocket disconnects."""
        if self.session is None:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "WS_DISCONNECT_WITHOUT_SESSION",
                "reason": reason,
            })
            return GatewayResult()

        self.session.dispose()
        log_event({
            "ts_ms": _now_ms(),
            "event_type": "WS_DISCONNECTED",
            "reason": reason,
            **self.session.log_context(),
        })
        for task in list(self._push_tasks):
            task.cancel()
        return GatewayResult()

    # ------------------------------------------------------------------
    # Inbound messages
    # ------------------------------------------------------------------

    async def on_json_message(self, payload: str) -> GatewayResult:
        """Route inbound JSON to the session."""
        if self.session is None:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "MESSAGE_WITHOUT_SESSION",
                "payload_preview": payload[:100],
            })
            return GatewayResult()

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            log_event({
                "ts_ms": _now_ms(),
                "level": "WARNING",
                "event_type": "JSON_DECODE_ERROR",
                "session_id": self.session.session_id,
                "error": str(e),
                "payload_preview": payload[:100],
            })
            return GatewayResult()

        if not isinstance(data, dict):
            log_event({
                "ts_ms": _now_ms(),
                "level": "WARNING",
                "event_type": "INVALID_MESSAGE",
                "session_id": self.session.session_id,
                "payload_preview": payload[:100],
            })
            return GatewayResult()

        msg_type = data.get("type")

        if msg_type != "HELLO" and self.session.connection_status is not ConnectionStatus.UP:
            log_event({
                "ts_ms": _now_ms(),
                "level": "WARNING",
                "event_type": "MESSAGE_BEFORE_HELLO",
                "msg_type": msg_type,
                "session_id": self.session.session_id,
            })
            return GatewayResult()

        handler = self._handlers.get(str(msg_type))
        if handler is None:
            log_event({
                "ts_ms": _now_ms(),
                "level": "WARNING",
                "event_type": "UNKNOWN_MESSAGE_TYPE",
                "msg_type": msg_type,
                "session_id": self.session.session_id,
            })
            return GatewayResult()

        try:
            handler(data)
        except (ValueError, TypeError) as e:
            log_event({
                "ts_ms": _now_ms(),
                "level": "WARNING",
                "event_type": "INVALID_PAYLOAD",
                "msg_type": msg_type,
                "session_id": self.session.session_id,
                "error": str(e),
            })

        return GatewayResult(outbound_json=self._drain_control_out())

    # ------------------------------------------------------------------
    # Handlers (session is guaranteed to exist)
    # ------------------------------------------------------------------

    def _require_session(self) -> VoiceSession:
        assert self.session is not None, "Session must exist before dispatch"
        return self.session

    def _on_hello(self, data: dict[str, Any]) -> None:
        session = self._require_session()
        page = PageContext.parse(str(data.get("page") or session.page_context.value))
        surface = Surface.from_snapshot(data) if "elements" in data else None

        capabilities = data.get("capabilities") or {}
        if not isinstance(capabilities, dict):
            raise ValueError("HELLO capabilities must be an object")
        session.recognizer.set_supported(bool(capabilities.get("speech_recognition", False)))
        session.synthesizer.set_supported(bool(capabilities.get("speech_synthesis", True)))
        session.set_connection_status(ConnectionStatus.UP)

        log_event({
            "ts_ms": _now_ms(),
            "event_type": "HELLO",
            "capabilities": capabilities,
            **session.log_context(),
        })

        if surface is not None:
            session.surface.update(surface)

        session.init_voice_for_page(page, auto_start=self._auto_start(data))

    def _on_set_page(self, data: dict[str, Any]) -> None:
        session = self._require_session()
        page = PageContext.parse(str(data.get("page") or ""))
        session.init_voice_for_page(page, auto_start=self._auto_start(data))

    def _on_surface_snapshot(self, data: dict[str, Any]) -> None:
        session = self._require_session()
        surface = Surface.from_snapshot(data)
        session.surface.update(surface)
        log_event({
            "ts_ms": _now_ms(),
            "level": "DEBUG",
            "event_type": "SURFACE_UPDATED",
            "session_id": session.session_id,
            "element_count": len(surface),
        })

    def _on_recognition_started(self, data: dict[str, Any]) -> None:
        self._require_session().listening.on_engine_started()

    def _on_recognition_result(self, data: dict[str, Any]) -> None:
        self._require_session().listening.on_engine_result(_join_transcript(data))

    def _on_recognition_error(self, data: dict[str, Any]) -> None:
        error = data.get("error")
        self._require_session().listening.on_engine_error(str(error) if error else None)

    def _on_recognition_ended(self, data: dict[str, Any]) -> None:
        self._require_session().listening.on_engine_ended()

    def _on_voice_toggle(self, data: dict[str, Any]) -> None:
        self._require_session().listening.toggle()

    def _on_voice_start(self, data: dict[str, Any]) -> None:
        self._require_session().listening.start()

    def _on_voice_stop(self, data: dict[str, Any]) -> None:
        self._require_session().listening.stop()

    def _on_announce_navigation(self, data: dict[str, Any]) -> None:
        name = str(data.get("page_name") or "").strip()
        if not name:
            raise ValueError("ANNOUNCE_NAVIGATION requires page_name")
        self._require_session().announce_navigation(name)

    def _on_test_command(self, data: dict[str, Any]) -> None:
        command = str(data.get("command") or "")
        outcome = self._require_session().test_voice_command(command)
        log_event({
            "ts_ms": _now_ms(),
            "event_type": "TEST_COMMAND_RESULT",
            "session_id": self._require_session().session_id,
            "outcome": outcome.value,
        })

    def _on_debug_lookup(self, data: dict[str, Any]) -> None:
        session = self._require_session()
        kind = TargetKind(str(data.get("target", TargetKind.VOTE_BUTTON.value)))
        report = session.lookup_report(kind, _optional_ordinal(data.get("ordinal")))
        session.enqueue_control(report)

    def _on_session_end(self, data: dict[str, Any]) -> None:
        self._require_session().dispose()

    def _auto_start(self, data: dict[str, Any]) -> bool:
        value = data.get("auto_start")
        return self._config.auto_start_voice if value is None else bool(value)

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def _drain_control_out(self) -> tuple[dict[str, Any], ...]:
        if self.session is None:
            return ()
        return self.session.drain_control()

    def _on_timer_fired(self, timer_id: str) -> None:
        """Push whatever the timer callback produced; no-op without a send callback."""
        if self._send is None:
            return
        messages = self._drain_control_out()
        if not messages:
            return
        task = asyncio.get_running_loop().create_task(self._send_all(messages, timer_id))
        self._push_tasks.add(task)
        task.add_done_callback(self._push_tasks.discard)

    async def _send_all(self, messages: tuple[dict[str, Any], ...], timer_id: str) -> None:
        assert self._send is not None
        try:
            for msg in messages:
                await self._send(msg)
        except Exception as e:  # pylint: disable=broad-exception-caught
            log_event({
                "ts_ms": _now_ms(),
                "level": "WARNING",
                "event_type": "TIMER_PUSH_FAILED",
                "session_id": self.session.session_id if self.session else None,
                "timer_id": timer_id,
                "error": str(e),
            })
