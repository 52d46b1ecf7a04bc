# pylint: disable=missing-module-docstring,missing-function-docstring
from typing import Any

import pytest

from orchestrator.dispatcher import DispatchOutcome
from orchestrator.enums.page_context import PageContext
from orchestrator.enums.state import ListeningState
from orchestrator.resolver import TargetKind
from orchestrator.vocabulary import GREETING_BY_CONTEXT
from session.connection_status import ConnectionStatus
from session.voice_session import VoiceSession

from conftest import FakeStore, ManualScheduler, ballot, candidate_card, surface


@pytest.fixture
def session(scheduler: ManualScheduler) -> VoiceSession:
    voice = VoiceSession(session_id="s1", store=FakeStore(), scheduler=scheduler)
    voice.recognizer.set_supported(True)
    return voice


def spoken(messages: tuple[dict[str, Any], ...]) -> list[str]:
    return [m["text"] for m in messages if m["type"] == "SPEAK"]


@pytest.mark.parametrize("page", [PageContext.HOME, PageContext.VOTING])
def test_greeting_is_spoken_after_render_delay(
    page: PageContext,
    session: VoiceSession,
    scheduler: ManualScheduler,
) -> None:
    session.init_voice_for_page(page)
    first = session.drain_control()

    assert GREETING_BY_CONTEXT[page] not in spoken(first)

    scheduler.advance(999)
    assert spoken(session.drain_control()) == []
    scheduler.advance(1)
    assert spoken(session.drain_control()) == [GREETING_BY_CONTEXT[page]]


def test_login_page_has_no_greeting(session: VoiceSession, scheduler: ManualScheduler) -> None:
    session.init_voice_for_page(PageContext.LOGIN)
    session.drain_control()

    scheduler.advance(5000)

    assert spoken(session.drain_control()) == []


def test_init_enables_always_on_once(session: VoiceSession) -> None:
    session.init_voice_for_page(PageContext.LOGIN)
    messages = session.drain_control()

    assert session.listening.state.always_on is True
    assert [m["type"] for m in messages].count("START_RECOGNITION") == 1

    session.init_voice_for_page(PageContext.HOME)
    assert "START_RECOGNITION" not in [m["type"] for m in session.drain_control()]


def test_init_without_auto_start_only_publishes_status(session: VoiceSession) -> None:
    session.init_voice_for_page(PageContext.LOGIN, auto_start=False)

    messages = session.drain_control()

    assert session.page_context is PageContext.LOGIN


def test_back_to_back_test_commands_both_invoke(
    session: VoiceSession,
    scheduler: ManualScheduler,
) -> None:
    session.surface.update(surface(ballot(candidate_card(1, "Asha"), candidate_card(2, "Ravi"))))

    session.test_voice_command("vote for candidate 1")
    scheduler.advance(100)
    session.test_voice_command("vote for candidate 2")
    scheduler.advance(300)

    invoked = [m["ref"] for m in session.drain_control() if m["type"] == "INVOKE"]
    assert invoked == ["vote-1", "vote-2"]


def test_test_commands_do_not_share_timers_with_spoken_utterances(
    session: VoiceSession,
    scheduler: ManualScheduler,
) -> None:
    session.surface.update(surface(ballot(candidate_card(1, "Asha"), candidate_card(2, "Ravi"))))
    session.init_voice_for_page(PageContext.VOTING)
    session.listening.on_engine_started()

    session.listening.on_engine_result("vote for candidate 1")
    session.test_voice_command("vote for candidate 2")
    scheduler.advance(300)

    invoked = [m["ref"] for m in session.drain_control() if m["type"] == "INVOKE"]
    assert invoked == ["vote-1", "vote-2"]
    assert session.listening.state.always_on is False
    assert [m["type"] for m in messages] == ["VOICE_STATUS"]


def test_announce_navigation(session: VoiceSession) -> None:
    session.announce_navigation("Home")
    assert spoken(session.drain_control()) == ["You are now on the Home page."]


def test_test_voice_command_forces_voting_handling(session: VoiceSession) -> None:
    session.surface.update(surface(ballot(candidate_card(1, "Asha"))))

    outcome = session.test_voice_command("vote for candidate 1")

    assert outcome is DispatchOutcome.HANDLED
    assert session.page_context is PageContext.LOGIN


def test_lookup_report_lists_every_strategy(session: VoiceSession) -> None:
    session.surface.update(surface(ballot(candidate_card(1, "Asha"))))

    report = session.lookup_report(TargetKind.VOTE_BUTTON, ordinal=1)

    assert report["type"] == "LOOKUP_REPORT"
    assert report["target"] == "vote_button"
    assert report["strategies"]
    assert any(s["found"] for s in report["strategies"])


def test_dispose_is_idempotent(session: VoiceSession, scheduler: ManualScheduler) -> None:
    session.init_voice_for_page(PageContext.HOME)
    session.listening.on_engine_started()
    session.drain_control()

    session.dispose()
    session.dispose()
    scheduler.advance(10_000)

    assert session.disposed
    assert session.connection_status is ConnectionStatus.DOWN
    assert session.listening.state.state is ListeningState.IDLE
    assert spoken(session.drain_control()) == []


def test_log_context_shape(session: VoiceSession) -> None:
    assert session.log_context() == {
        "session_id": "s1",
        "connection_status": "CONNECTING",
        "page_context": "login",
        "listening_state": "IDLE",
        "always_on": False,
    }
