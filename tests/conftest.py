# pylint: disable=missing-module-docstring,missing-function-docstring
from __future__ import annotations

import heapq
import itertools
import json
from typing import Any, Callable, Iterator, Mapping

import pytest

from adapters.tts.base import SpeechOptions
from config import AppConfig
from observability import logger
from orchestrator.enums.page_context import PageContext
from orchestrator.errors import CapabilityUnsupportedError, SurfaceError
from orchestrator.runtime_context import RuntimeExecutionContext
from orchestrator.state_dataclass import VoiceStatus
from orchestrator.timers import TimerRegistry
from surface.elements import Element, Surface


# ---------------------------------------------------------------------
# Logger isolation
# ---------------------------------------------------------------------

@pytest.fixture(autouse=True)
def quiet_logger(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Silence stdout and restore default logger settings after each test."""
    monkeypatch.setattr(logger, "_print", lambda line: None)
    logger.configure()
    yield
    logger.configure()


@pytest.fixture
def captured_logs(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    """Every log_event record, across all modules."""
    records: list[dict[str, Any]] = []

    def fake_print(line: str) -> None:
        records.append(json.loads(line))

    monkeypatch.setattr(logger, "_print", fake_print)
    logger.configure(level="DEBUG")
    return records


# ---------------------------------------------------------------------
# Manual clock
# ---------------------------------------------------------------------

class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> bool:
        self.cancelled = True
        return True


class ManualScheduler:
    """Scheduler driven by advance(ms); callbacks fire in due-time order."""

    def __init__(self) -> None:
        self.now_ms = 0
        self._queue: list[tuple[int, int, _ManualHandle, Callable[[], None]]] = []
        self._order = itertools.count()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle()
        heapq.heappush(self._queue, (self.now_ms + delay_ms, next(self._order), handle, callback))
        return handle

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            self.now_ms = due
            if not handle.cancelled:
                callback()
        self.now_ms = target

    @property
    def pending(self) -> int:
        return sum(1 for entry in self._queue if not entry[2].cancelled)


# ---------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------

def make_config(**overrides: Any) -> AppConfig:
    values: dict[str, Any] = {
        "env": "test",
        "log_level": "INFO",
        "enable_json_logs": True,
        "host": "127.0.0.1",
        "port": 8000,
        "cors_origins": ("*",),
        "speech_lang": "en-US",
        "auto_start_voice": True,
        "default_page": PageContext.LOGIN,
        "store_path": None,
    }
    values.update(overrides)
    return AppConfig(**values)


# ---------------------------------------------------------------------
# Recording collaborators
# ---------------------------------------------------------------------

class FakeRecognizer:
    def __init__(self, *, supported: bool = True, fail_start: bool = False) -> None:
        self.supported = supported
        self.fail_start = fail_start
        self.calls: list[str] = []

    def acquire(self) -> None:
        self.calls.append("acquire")
        if not self.supported:
            raise CapabilityUnsupportedError("no engine")

    def start(self) -> None:
        self.calls.append("start")
        if self.fail_start:
            raise RuntimeError("already started")

    def stop(self) -> None:
        self.calls.append("stop")


class FakeSynthesizer:
    def __init__(self) -> None:
        self.spoken: list[str] = []
        self.stops = 0

    def speak(self, text: str, options: SpeechOptions | None = None) -> None:
        self.spoken.append(text)

    def stop(self) -> None:
        self.stops += 1


class FakeObserver:
    def __init__(self) -> None:
        self.statuses: list[VoiceStatus] = []
        self.messages: list[tuple[str, str]] = []

    def publish(self, status: VoiceStatus) -> None:
        self.statuses.append(status)

    def show_message(self, message: str, kind: str) -> None:
        self.messages.append((message, kind))


class FakeNavigator:
    def __init__(self) -> None:
        self.redirects: list[tuple[str, Mapping[str, str] | None]] = []

    def redirect(self, page: str, params: Mapping[str, str] | None = None) -> None:
        self.redirects.append((page, params))


class FakeStore:
    def __init__(self) -> None:
        self.cleared = 0

    def clear_session(self) -> None:
        self.cleared += 1


class FakeSurface:
    """Holds a swappable snapshot and records invocations by ref."""

    def __init__(self, surface: Surface | None = None) -> None:
        self.current = surface or Surface.empty()
        self.invoked: list[str] = []
        self.cleared: list[str] = []

    def snapshot(self) -> Surface:
        return self.current

    def invoke(self, target: Element) -> None:
        if self.current.get_by_ref(target.ref) is None:
            raise SurfaceError(f"stale {target.ref}")
        self.invoked.append(target.ref)

    def clear_value(self, target: Element) -> None:
        self.cleared.append(target.ref)


# ---------------------------------------------------------------------
# Surface builders
# ---------------------------------------------------------------------

_refs = itertools.count(1)


def el(
    tag: str = "div",
    *children: Element,
    ref: str | None = None,
    id: str | None = None,  # pylint: disable=redefined-builtin
    cls: str = "",
    text: str = "",
    visible: bool = True,
    disabled: bool = False,
    **attrs: str,
) -> Element:
    """Element builder; attrs use underscores for dashes (data_candidate_number)."""
    return Element(
        ref=ref or f"el-{next(_refs)}",
        tag=tag,
        element_id=id,
        classes=frozenset(cls.split()),
        attrs={k.replace("_", "-"): v for k, v in attrs.items()},
        text=text,
        visible=visible,
        disabled=disabled,
        children=list(children),
    )


def surface(*roots: Element) -> Surface:
    return Surface(roots)


def candidate_card(n: int, name: str, party: str = "", description: str = "") -> Element:
    """Card in the layout the voting page renders."""
    return el(
        "div",
        el("h3", cls="card-title", text=name),
        el("p", cls="card-subtitle", text=party),
        el("p", cls="card-description", text=description),
        el("button", ref=f"vote-{n}", cls="btn btn-vote", text="Vote"),
        cls="card",
        data_candidate_number=str(n),
    )


def ballot(*cards: Element, visible: bool = True) -> Element:
    return el("section", *cards, id="voting-section", visible=visible)


def confirmation_modal() -> Element:
    return el(
        "div",
        el("button", ref="modal-confirm", id="modal-confirm-btn", cls="btn btn-success"),
        el("button", ref="modal-cancel", id="modal-cancel-btn", cls="btn btn-secondary"),
        id="confirmation-modal",
        cls="modal-overlay",
    )


# ---------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------

@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def timers(scheduler: ManualScheduler) -> TimerRegistry:
    return TimerRegistry(scheduler=scheduler, session_id="test")


@pytest.fixture
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def observer() -> FakeObserver:
    return FakeObserver()


@pytest.fixture
def navigator() -> FakeNavigator:
    return FakeNavigator()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def runtime_context(
    recognizer: FakeRecognizer,
    synthesizer: FakeSynthesizer,
    observer: FakeObserver,
) -> RuntimeExecutionContext:
    return RuntimeExecutionContext(
        session_id="test",
        recognizer=recognizer,
        synthesizer=synthesizer,
        observer=observer,
    )

