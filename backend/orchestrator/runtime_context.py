"""
Runtime execution context.

Provides the listening runtime and the dispatcher with live access to
the session-owned collaborators they drive (speech engines, the hosting
page, navigation, status display, storage).

This module contains:
- Narrow Protocols (capabilities, not implementations)
- Zero orchestration logic
- Zero state mutation
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Protocol, runtime_checkable

from session.connection_status import ConnectionStatus

if TYPE_CHECKING:
    from adapters.tts.base import SpeechOptions
    from orchestrator.state_dataclass import VoiceStatus
    from surface.elements import Element, Surface


# ---------------------------------------------------------------------
# Speech Protocols
# ---------------------------------------------------------------------

@runtime_checkable
class SpeechRecognizerProtocol(Protocol):
    """
    Continuous speech recognition engine.

    Contract:
    - acquire() raises CapabilityUnsupportedError when no engine exists
    - start()/stop() are requests; the engine reports back through
      started / result / error / ended signals delivered to the runtime
    - start() may raise if the engine is already running
    """

    def acquire(self) -> None: ...
    def start(self) -> None: ...
    def stop(self) -> None: ...


@runtime_checkable
class SpeechSynthesizerProtocol(Protocol):
    """
    Text-to-speech output.

    Contract:
    - A new speak() cancels any in-flight utterance first
    - Never raises for missing capability; silently drops instead
    """

    def speak(self, text: str, options: SpeechOptions | None = None) -> None: ...
    def stop(self) -> None: ...


# ---------------------------------------------------------------------
# Hosting page Protocols
# ---------------------------------------------------------------------

@runtime_checkable
class InteractionSurfaceProtocol(Protocol):
    """
    Read access to the hosting page plus the two mutations the engine
    performs on it. Lookups always read the latest snapshot.
    """

    def snapshot(self) -> Surface: ...
    def invoke(self, target: Element) -> None: ...
    def clear_value(self, target: Element) -> None: ...


@runtime_checkable
class NavigatorProtocol(Protocol):
    def redirect(self, page: str, params: Mapping[str, str] | None = None) -> None: ...


@runtime_checkable
class StatusObserverProtocol(Protocol):
    """Receives status changes for display (text, indicator, labels)."""

    def publish(self, status: VoiceStatus) -> None: ...
    def show_message(self, message: str, kind: str) -> None: ...


@runtime_checkable
class SessionStoreProtocol(Protocol):
    def clear_session(self) -> None: ...


# ---------------------------------------------------------------------
# Runtime Execution Context
# ---------------------------------------------------------------------

class RuntimeExecutionContext:
    """
    Imperative execution context for the listening runtime.

    This object provides *live views* into session-owned collaborators
    so the runtime does not need to synchronize or cache anything.

    The runtime is allowed to:
    - Call the speech engines
    - Publish status
    - Observe connection state

    The runtime is NOT allowed to:
    - Replace collaborators
    - Touch the hosting page directly (that is the dispatcher's job)
    """

    def __init__(
        self,
        *,
        session_id: str,
        recognizer: SpeechRecognizerProtocol,
        synthesizer: SpeechSynthesizerProtocol,
        observer: StatusObserverProtocol,
        connection_status: ConnectionStatus = ConnectionStatus.UP,
    ) -> None:
        self._session_id = session_id
        self._recognizer = recognizer
        self._synthesizer = synthesizer
        self._observer = observer
        self.connection_status = connection_status

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def recognizer(self) -> SpeechRecognizerProtocol:
        return self._recognizer

    @property
    def synthesizer(self) -> SpeechSynthesizerProtocol:
        return self._synthesizer

    @property
    def observer(self) -> StatusObserverProtocol:
        return self._observer
