"""
Command dispatch.

One utterance in, at most one action out:

    Utterance -> NormalizedCommand -> CommandRouter -> Intent -> action

Responsibilities:
- Run the action bound to each intent (speak, invoke, clear, navigate)
- Speak before acting; vote and confirm invocations are delayed so the
  spoken feedback starts first
- Map failures onto spoken corrections and a DispatchOutcome

Non-responsibilities:
- Listening lifecycle (runtime)
- Keeping exceptions inside the session (the runtime's dispatch boundary)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from constants import INVOKE_DELAY_MS, PAGE_URL_HOME, PAGE_URL_LOGIN, PAGE_URL_VOTING
from observability.logger import log_event
from observability.metrics import timed
from orchestrator.enums.intent import IntentType
from orchestrator.enums.page_context import PageContext
from orchestrator.errors import (
    AmbiguousOrdinalError,
    ErrorKind,
    TargetNotFoundError,
    VoiceEngineError,
)
from orchestrator.intents import Intent, NormalizedCommand, Utterance
from orchestrator.resolver import ActionTargetResolver, TargetKind, TargetQuery
from orchestrator.router import CommandRouter
from orchestrator.runtime_context import (
    InteractionSurfaceProtocol,
    NavigatorProtocol,
    SessionStoreProtocol,
    SpeechSynthesizerProtocol,
)
from orchestrator.timers import TimerRegistry
from orchestrator import vocabulary as vocab
from surface.elements import Element, Surface


_WHITESPACE = re.compile(r"\s+")


class DispatchOutcome(str, Enum):
    """Result of dispatching one utterance."""

    HANDLED = "handled"
    PENDING = "pending"  # resolution retry scheduled
    TARGET_NOT_FOUND = "target_not_found"
    AMBIGUOUS_ORDINAL = "ambiguous_ordinal"
    UNRECOGNIZED = "unrecognized"
    FAILED = "failed"


_OUTCOME_BY_ERROR_KIND: dict[ErrorKind | None, DispatchOutcome] = {
    ErrorKind.TARGET_NOT_FOUND: DispatchOutcome.TARGET_NOT_FOUND,
    ErrorKind.AMBIGUOUS_ORDINAL: DispatchOutcome.AMBIGUOUS_ORDINAL,
}


@dataclass(frozen=True)
class NamedControlAction:
    """Invoke one control by id, optionally announcing it first."""
    control_id: str
    label: str
    say: str | None = None


# (intent, context) -> named control; context None matches any context
NAMED_CONTROL_ACTIONS: dict[tuple[IntentType, PageContext | None], NamedControlAction] = {
    (IntentType.LOGIN, None): NamedControlAction(
        vocab.ID_BTN_LOGIN, "Login button", vocab.SAY_LOGGING_IN
    ),
    (IntentType.OPEN_PROFILE, None): NamedControlAction(
        vocab.ID_BTN_PROFILE, "Profile button"
    ),
    (IntentType.START_VERIFICATION, PageContext.FACE_VERIFICATION): NamedControlAction(
        vocab.ID_BTN_START_VERIFICATION,
        "Start verification button",
        vocab.SAY_STARTING_FACE_VERIFICATION,
    ),
    (IntentType.RETRY_VERIFICATION, None): NamedControlAction(
        vocab.ID_BTN_RETRY, "Retry button"
    ),
}

ACKNOWLEDGEMENTS: dict[PageContext, str] = {
    PageContext.LOGIN: vocab.SAY_ON_LOGIN_PAGE,
    PageContext.HOME: vocab.SAY_ALREADY_HOME,
}


class CommandDispatcher:
    """
    Executes intents against the session's collaborators.

    Targets are resolved fresh for every dispatch and never cached.
    """

    def __init__(
        self,
        *,
        session_id: str,
        surface: InteractionSurfaceProtocol,
        synthesizer: SpeechSynthesizerProtocol,
        navigator: NavigatorProtocol,
        store: SessionStoreProtocol,
        timers: TimerRegistry,
        get_context: Callable[[], PageContext],
        resolver: ActionTargetResolver | None = None,
        router: CommandRouter | None = None,
    ) -> None:
        self._session_id = session_id
        self._surface = surface
        self._synth = synthesizer
        self._navigator = navigator
        self._store = store
        self._timers = timers
        self._get_context = get_context
        self._resolver = resolver or ActionTargetResolver(surface, session_id=session_id)
        self._router = router or CommandRouter(surface, self._resolver, session_id=session_id)

        self._handlers: dict[IntentType, Callable[[Intent, Utterance], DispatchOutcome]] = {
            IntentType.CLEAR_FORM: self._clear_form,
            IntentType.ACKNOWLEDGE: self._acknowledge,
            IntentType.NAVIGATE_TO_VOTING: self._navigate_to_voting,
            IntentType.READ_RULES: self._read_rules,
            IntentType.LOGOUT: self._logout,
            IntentType.START_VERIFICATION: self._start_verification,
            IntentType.CONFIRM_VOTE: self._confirm_vote,
            IntentType.CANCEL_VOTE: self._cancel_vote,
            IntentType.VOTE_FOR_ORDINAL: self._vote_for_ordinal,
            IntentType.READ_CANDIDATE_LIST: self._read_candidate_list,
            IntentType.GO_BACK: self._go_back,
            IntentType.UNRECOGNIZED: self._help,
        }

    @property
    def resolver(self) -> ActionTargetResolver:
        return self._resolver

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def dispatch(self, utterance: Utterance, *, context: PageContext | None = None) -> DispatchOutcome:
        """
        Route and act on one utterance.

        context overrides the session's current page context (debug
        commands force VOTING this way).

        Engine errors raised by actions are answered with their spoken
        correction here. Anything else propagates to the runtime boundary.
        """
        page_context = context or self._get_context()
        command = NormalizedCommand.from_text(utterance.text)

        with timed(
            "dispatch_ms",
            session_id=self._session_id,
            page_context=page_context.value,
            details={"seq": utterance.seq},
        ) as details:
            intent = self._router.route(page_context, command)
            details["intent"] = intent.intent_type.value

            log_event({
                "event_type": "INTENT_ROUTED",
                "session_id": self._session_id,
                "seq": utterance.seq,
                "command": command.text,
                "page_context": page_context.value,
                "effective_context": intent.context.value,
                "intent": intent.intent_type.value,
                "ordinal": intent.ordinal,
                "matched_phrase": intent.matched_phrase,
            })

            try:
                outcome = self.handle_intent(intent, utterance)
            except VoiceEngineError as e:
                outcome = _OUTCOME_BY_ERROR_KIND.get(e.kind, DispatchOutcome.FAILED)
                log_event({
                    "level": "WARNING",
                    "event_type": "DISPATCH_ERROR",
                    "session_id": self._session_id,
                    "seq": utterance.seq,
                    "error_kind": e.kind.value if e.kind else None,
                    "error": str(e),
                })
                if e.spoken:
                    self._speak(e.spoken)

            details["outcome"] = outcome.value

        return outcome

    def handle_intent(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        named = (
            NAMED_CONTROL_ACTIONS.get((intent.intent_type, intent.context))
            or NAMED_CONTROL_ACTIONS.get((intent.intent_type, None))
        )
        if named is not None:
            return self._invoke_named_control(named, utterance)

        handler = self._handlers.get(intent.intent_type)
        if handler is None:
            raise ValueError(f"No handler for intent {intent.intent_type}")
        return handler(intent, utterance)

    # ------------------------------------------------------------------
    # Feedback helpers
    # ------------------------------------------------------------------

    def _speak(self, text: str) -> None:
        self._synth.speak(text)

    def _invoke_later(self, target: Element, utterance: Utterance) -> None:
        """Invoke after INVOKE_DELAY_MS so speech starts first."""
        self._timers.start(
            f"invoke:{utterance.seq}",
            INVOKE_DELAY_MS,
            lambda: self._guarded_invoke(target, utterance),
        )

    def _guarded_invoke(self, target: Element, utterance: Utterance) -> None:
        """Invoke from a timer or resolver callback; failures are logged and spoken."""
        try:
            self._surface.invoke(target)
        except Exception as e:  # pylint: disable=broad-exception-caught
            # May run from a timer, outside the runtime's dispatch boundary
            log_event({
                "level": "ERROR",
                "event_type": "INVOKE_FAILED",
                "session_id": self._session_id,
                "seq": utterance.seq,
                "target": target.describe(),
                "error": repr(e),
            })
            self._speak(vocab.SAY_DISPATCH_FAILED)

    def _resolve_then(
        self,
        query: TargetQuery,
        utterance: Utterance,
        *,
        on_found: Callable[[Element], None],
        missing_spoken: str | Callable[[], str],
    ) -> DispatchOutcome:
        """Resolve with a single delayed retry; speak missing_spoken when both attempts fail."""

        def _on_missing() -> None:
            self._speak(missing_spoken() if callable(missing_spoken) else missing_spoken)

        target = self._resolver.resolve_with_retry(
            query,
            timers=self._timers,
            timer_id=f"resolve:{utterance.seq}",
            on_found=on_found,
            on_missing=_on_missing,
        )
        if target is not None:
            return DispatchOutcome.HANDLED
        if self._timers.is_pending(f"resolve:{utterance.seq}"):
            return DispatchOutcome.PENDING
        return DispatchOutcome.TARGET_NOT_FOUND

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _invoke_named_control(self, action: NamedControlAction, utterance: Utterance) -> DispatchOutcome:
        def _found(target: Element) -> None:
            if action.say:
                self._speak(action.say)
            self._guarded_invoke(target, utterance)

        return self._resolve_then(
            TargetQuery(kind=TargetKind.NAMED_CONTROL, control_id=action.control_id),
            utterance,
            on_found=_found,
            missing_spoken=vocab.SAY_CONTROL_NOT_FOUND.format(label=action.label),
        )

    def _clear_form(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        snapshot = self._surface.snapshot()
        for input_id in vocab.LOGIN_FORM_INPUT_IDS:
            field = snapshot.get_by_id(input_id)
            if field is not None:
                self._surface.clear_value(field)
        self._speak(vocab.SAY_FORM_CLEARED)
        return DispatchOutcome.HANDLED

    def _acknowledge(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        message = ACKNOWLEDGEMENTS.get(intent.context)
        if message is None:
            return self._help(intent, utterance)
        self._speak(message)
        return DispatchOutcome.HANDLED

    def _navigate_to_voting(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        link = self._surface.snapshot().query(vocab.SELECTOR_VOTING_LINK)
        if link is None:
            self._navigator.redirect(PAGE_URL_VOTING)
            return DispatchOutcome.HANDLED
        self._speak(vocab.SAY_NAVIGATING_TO_VOTING)
        self._surface.invoke(link)
        return DispatchOutcome.HANDLED

    def _read_rules(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        snapshot = self._surface.snapshot()
        main = next(
            (el for el in map(snapshot.query, vocab.SELECTORS_MAIN_CONTENT) if el is not None),
            None,
        )
        if main is None:
            self._speak(vocab.SAY_NO_CONTENT_FOUND)
            return DispatchOutcome.HANDLED
        text = _WHITESPACE.sub(" ", main.text_content()).strip()
        self._speak(text or vocab.SAY_NO_CONTENT_AVAILABLE)
        return DispatchOutcome.HANDLED

    def _logout(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        self._speak(vocab.SAY_LOGGING_OUT)
        self._store.clear_session()
        self._navigator.redirect(PAGE_URL_LOGIN)
        return DispatchOutcome.HANDLED

    def _start_verification(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        def _found(button: Element) -> None:
            if button.disabled:
                self._speak(vocab.SAY_VERIFICATION_IN_PROGRESS)
                return
            # A hidden verification section still gets the click
            self._speak(vocab.SAY_STARTING_IDENTITY_VERIFICATION)
            self._guarded_invoke(button, utterance)

        return self._resolve_then(
            TargetQuery(kind=TargetKind.NAMED_CONTROL, control_id=vocab.ID_BTN_VERIFY_FACE),
            utterance,
            on_found=_found,
            missing_spoken=vocab.SAY_VERIFY_BUTTON_MISSING,
        )

    def _confirm_vote(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        def _found(target: Element) -> None:
            self._speak(vocab.SAY_CONFIRMING_VOTE)
            self._invoke_later(target, utterance)

        def _missing() -> str:
            if self._surface.snapshot().is_visible(vocab.ID_VOTING_SECTION):
                return vocab.SAY_SELECT_CANDIDATE_FIRST
            return vocab.SAY_NOTHING_TO_CONFIRM

        return self._resolve_then(
            TargetQuery(kind=TargetKind.MODAL_CONFIRM),
            utterance,
            on_found=_found,
            missing_spoken=_missing,
        )

    def _cancel_vote(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        target = self._resolver.resolve_target(TargetKind.MODAL_CANCEL)
        if target is None:
            raise TargetNotFoundError(
                "cancel button not found",
                spoken=vocab.SAY_NOTHING_TO_CONFIRM,
            )
        self._speak(vocab.SAY_VOTE_CANCELLED)
        self._surface.invoke(target)
        return DispatchOutcome.HANDLED

    def _vote_for_ordinal(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        ordinal = intent.ordinal
        if ordinal is None:
            raise AmbiguousOrdinalError(
                "vote requested without a usable candidate number",
                spoken=vocab.SAY_WHICH_CANDIDATE,
            )

        def _found(target: Element) -> None:
            self._speak(vocab.SAY_VOTING_FOR.format(n=ordinal))
            self._invoke_later(target, utterance)

        return self._resolve_then(
            TargetQuery(kind=TargetKind.VOTE_BUTTON, ordinal=ordinal),
            utterance,
            on_found=_found,
            missing_spoken=vocab.SAY_CANDIDATE_NOT_FOUND.format(n=ordinal),
        )

    def _read_candidate_list(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        snapshot = self._surface.snapshot()
        cards = snapshot.query_all(vocab.SELECTOR_CANDIDATE_CARD)
        if not cards:
            self._speak(vocab.SAY_NO_CANDIDATES)
            return DispatchOutcome.HANDLED

        parts = [vocab.SAY_CANDIDATE_COUNT.format(count=len(cards))]
        for index, card in enumerate(cards, start=1):
            parts.append(vocab.SAY_CANDIDATE_ENTRY.format(
                index=index,
                name=_card_text(snapshot, card, vocab.SELECTOR_CARD_TITLE) or f"Candidate {index}",
                party=_card_text(snapshot, card, vocab.SELECTOR_CARD_SUBTITLE),
                description=_card_text(snapshot, card, vocab.SELECTOR_CARD_DESCRIPTION),
            ))
        self._speak("".join(parts))
        return DispatchOutcome.HANDLED

    def _go_back(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        self._speak(vocab.SAY_GOING_BACK)
        self._navigator.redirect(PAGE_URL_HOME)
        return DispatchOutcome.HANDLED

    def _help(self, intent: Intent, utterance: Utterance) -> DispatchOutcome:
        self._speak(help_for(intent.context, self._surface.snapshot()))
        return DispatchOutcome.UNRECOGNIZED


def help_for(context: PageContext, snapshot: Surface) -> str:
    """Contextual help; on the voting page it depends on the visible section."""
    if context is PageContext.LOGIN:
        return vocab.HELP_LOGIN
    if context is PageContext.HOME:
        return vocab.HELP_HOME
    if context is PageContext.FACE_VERIFICATION:
        return vocab.HELP_FACE_VERIFICATION
    if snapshot.is_visible(vocab.ID_FACE_VERIFY_SECTION):
        return vocab.HELP_VOTING_VERIFY
    if snapshot.is_visible(vocab.ID_VOTING_SECTION):
        return vocab.HELP_VOTING_BALLOT
    return vocab.HELP_VOTING_DEFAULT


def _card_text(snapshot: Surface, card: Element, selector: str) -> str:
    element = snapshot.query(selector, within=card)
    return element.text_content().strip() if element is not None else ""
