# pylint: disable=missing-module-docstring,missing-function-docstring
from typing import Any

import pytest

from constants import STATUS_TEXT_LISTENING, STATUS_TEXT_OFF, STATUS_TEXT_STARTING
from orchestrator.enums.state import ListeningState
from orchestrator.intents import Utterance
from orchestrator.runtime import ListeningSessionManager
from orchestrator.runtime_context import RuntimeExecutionContext
from orchestrator.timers import TimerRegistry
from orchestrator.vocabulary import (
    SAY_DISPATCH_FAILED,
    SAY_PERMISSION_DENIED,
    SAY_RECOGNITION_UNSUPPORTED,
    SAY_VOICE_ON,
)

from conftest import FakeObserver, FakeRecognizer, FakeSynthesizer, ManualScheduler


def make_manager(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    on_utterance: Any = None,
) -> tuple[ListeningSessionManager, list[Utterance]]:
    received: list[Utterance] = []
    manager = ListeningSessionManager(
        context=runtime_context,
        timers=timers,
        on_utterance=on_utterance or received.append,
    )
    return manager, received


def listening(manager: ListeningSessionManager) -> ListeningSessionManager:
    manager.set_always_on(True)
    manager.on_engine_started()
    return manager


def test_toggle_goes_starting_then_listening(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    recognizer: FakeRecognizer,
    synthesizer: FakeSynthesizer,
    observer: FakeObserver,
) -> None:
    manager, _ = make_manager(runtime_context, timers)

    manager.toggle()

    assert recognizer.calls == ["acquire", "start"]
    assert synthesizer.spoken == [SAY_VOICE_ON]
    assert manager.state.state is ListeningState.STARTING
    assert observer.statuses[-1].text == STATUS_TEXT_STARTING

    manager.on_engine_started()

    assert manager.state.state is ListeningState.LISTENING
    assert observer.statuses[-1].text == STATUS_TEXT_LISTENING
    assert observer.statuses[-1].listening is True


def test_recognizer_is_acquired_once(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    recognizer: FakeRecognizer,
) -> None:
    manager, _ = make_manager(runtime_context, timers)
    manager.start()
    manager.stop()
    manager.start()

    assert recognizer.calls.count("acquire") == 1


def test_no_speech_then_end_restarts_exactly_once(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    scheduler: ManualScheduler,
    recognizer: FakeRecognizer,
) -> None:
    manager = listening(make_manager(runtime_context, timers)[0])

    manager.on_engine_error("no-speech")
    manager.on_engine_ended()

    assert manager.state.state is ListeningState.RESTARTING
    assert scheduler.pending == 1

    scheduler.advance(1000)

    assert recognizer.calls.count("start") == 2
    assert manager.state.state is ListeningState.STARTING


def test_restart_waits_for_the_fixed_delay(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    scheduler: ManualScheduler,
    recognizer: FakeRecognizer,
) -> None:
    manager = listening(make_manager(runtime_context, timers)[0])

    manager.on_engine_ended()
    scheduler.advance(299)
    assert recognizer.calls.count("start") == 1
    scheduler.advance(1)
    assert recognizer.calls.count("start") == 2


def test_stop_cancels_pending_restart(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    scheduler: ManualScheduler,
    recognizer: FakeRecognizer,
) -> None:
    manager = listening(make_manager(runtime_context, timers)[0])
    manager.on_engine_ended()

    manager.stop()
    scheduler.advance(1000)

    assert recognizer.calls.count("start") == 1
    assert manager.state.state is ListeningState.IDLE


def test_stop_holds_when_engine_reports_end_afterwards(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    scheduler: ManualScheduler,
    recognizer: FakeRecognizer,
) -> None:
    manager = listening(make_manager(runtime_context, timers)[0])

    manager.stop()
    manager.on_engine_ended()
    scheduler.advance(1000)

    assert recognizer.calls == ["acquire", "start", "stop"]
    assert manager.state.state is ListeningState.IDLE


def test_permission_denied_stops_and_explains(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    scheduler: ManualScheduler,
    recognizer: FakeRecognizer,
    synthesizer: FakeSynthesizer,
    observer: FakeObserver,
) -> None:
    manager = listening(make_manager(runtime_context, timers)[0])

    manager.on_engine_error("not-allowed")
    manager.on_engine_ended()
    scheduler.advance(1000)

    assert synthesizer.spoken[-1] == SAY_PERMISSION_DENIED
    assert manager.state.always_on is False
    assert manager.state.state is ListeningState.IDLE
    assert recognizer.calls.count("start") == 1
    assert observer.statuses[-1].text == STATUS_TEXT_OFF


def test_unsupported_recognizer_reports_error_and_stays_off(
    timers: TimerRegistry,
    synthesizer: FakeSynthesizer,
    observer: FakeObserver,
) -> None:
    recognizer = FakeRecognizer(supported=False)
    context = RuntimeExecutionContext(
        session_id="test",
        recognizer=recognizer,
        synthesizer=synthesizer,
        observer=observer,
    )
    manager, _ = make_manager(context, timers)

    manager.set_always_on(True)

    assert "start" not in recognizer.calls
    assert observer.messages == [(SAY_RECOGNITION_UNSUPPORTED, "error")]
    assert synthesizer.spoken == [SAY_RECOGNITION_UNSUPPORTED]
    assert manager.state.always_on is False
    assert observer.statuses[-1].text == STATUS_TEXT_OFF

    # Later starts only repeat the status message
    manager.start()
    assert recognizer.calls == ["acquire"]
    assert len(observer.messages) == 2


def test_start_failure_falls_back_to_idle(
    timers: TimerRegistry,
    synthesizer: FakeSynthesizer,
    observer: FakeObserver,
) -> None:
    context = RuntimeExecutionContext(
        session_id="test",
        recognizer=FakeRecognizer(fail_start=True),
        synthesizer=synthesizer,
        observer=observer,
    )
    manager, _ = make_manager(context, timers)

    manager.start()

    assert manager.state.state is ListeningState.IDLE


def test_results_are_dispatched_in_order(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
) -> None:
    manager, received = make_manager(runtime_context, timers)
    listening(manager)

    manager.on_engine_result("vote for candidate 2")
    manager.on_engine_result("")
    manager.on_engine_result("confirm")

    assert [(u.text, u.seq) for u in received] == [("vote for candidate 2", 1), ("confirm", 2)]


def test_dispatch_failure_is_spoken_and_listening_continues(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    synthesizer: FakeSynthesizer,
    captured_logs: list[dict[str, Any]],
) -> None:
    def explode(utterance: Utterance) -> None:
        raise KeyError("boom")

    manager, _ = make_manager(runtime_context, timers, on_utterance=explode)
    listening(manager)

    manager.on_engine_result("vote for candidate 2")

    assert synthesizer.spoken[-1] == SAY_DISPATCH_FAILED
    assert manager.state.state is ListeningState.LISTENING
    assert any(r["event_type"] == "DISPATCH_FAILED" for r in captured_logs)


def test_runtime_logs_carry_session_id(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    captured_logs: list[dict[str, Any]],
) -> None:
    manager, _ = make_manager(runtime_context, timers)
    manager.start()

    decisions = [r for r in captured_logs if "decision" in r]
    assert decisions
    assert all(r["session_id"] == "test" for r in decisions)


def test_dispose_stops_everything(
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    scheduler: ManualScheduler,
    recognizer: FakeRecognizer,
) -> None:
    manager = listening(make_manager(runtime_context, timers)[0])
    manager.on_engine_ended()

    manager.dispose()
    manager.dispose()
    scheduler.advance(1000)

    assert manager.state.always_on is False
    assert recognizer.calls.count("start") == 1
    assert not timers.is_pending("listening_restart")


@pytest.mark.parametrize("raw", ["network", "audio-capture", None, "weird"])
def test_other_engine_errors_leave_the_decision_to_the_end_signal(
    raw: str | None,
    runtime_context: RuntimeExecutionContext,
    timers: TimerRegistry,
    scheduler: ManualScheduler,
    recognizer: FakeRecognizer,
) -> None:
    manager = listening(make_manager(runtime_context, timers)[0])

    manager.on_engine_error(raw)
    assert manager.state.state is ListeningState.LISTENING

    manager.on_engine_ended()
    scheduler.advance(300)
    assert recognizer.calls.count("start") == 2
