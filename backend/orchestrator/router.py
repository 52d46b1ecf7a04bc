"""
Context-scoped command routing.

Classifies one normalized command into exactly one Intent using the
rule table of the effective page context.

Effective context:
- The declared page context, unless the surface carries a voting
  marker element, which forces VOTING handling.

Routing never acts on the surface; it only reads it (override detection,
guard evaluation, vote gate).
"""

from __future__ import annotations

from observability.logger import log_event
from orchestrator.enums.intent import IntentType
from orchestrator.enums.page_context import PageContext
from orchestrator.intents import Intent, NormalizedCommand
from orchestrator.ordinals import contains_word_number, extract_ordinal, is_valid_ordinal
from orchestrator.resolver import ActionTargetResolver, TargetKind
from orchestrator.runtime_context import InteractionSurfaceProtocol
from orchestrator.vocabulary import (
    GUARD_MODAL_CANCEL_PRESENT,
    ID_VOTING_SECTION,
    RULES_BY_CONTEXT,
    VOTE_CONTEXT_WORDS,
    VOTE_VERBS,
    VOTING_MARKER_IDS,
    KeywordRule,
    MissingOrdinalStep,
    OrdinalVoteStep,
    Rule,
)
from surface.elements import Surface


def detect_context_override(surface: Surface) -> PageContext | None:
    """VOTING when any voting marker element is present, else None."""
    for marker_id in VOTING_MARKER_IDS:
        if surface.get_by_id(marker_id) is not None:
            return PageContext.VOTING
    return None


def looks_like_vote(command: NormalizedCommand, ordinal: int | None, voting_visible: bool) -> bool:
    """
    Vote gate: keeps stray digits from becoming votes.

    Passes when any of:
    - a vote verb is present
    - the voting section is visible and "candidate"/"number" is present
    - a word number is present
    - the voting section is visible and an ordinal was found
    """
    if command.contains_any(VOTE_VERBS):
        return True
    if voting_visible and command.contains_any(VOTE_CONTEXT_WORDS):
        return True
    if contains_word_number(command):
        return True
    return voting_visible and ordinal is not None


class CommandRouter:
    """Maps (page context, command) to an Intent."""

    def __init__(
        self,
        surface: InteractionSurfaceProtocol,
        resolver: ActionTargetResolver,
        *,
        session_id: str | None = None,
    ) -> None:
        self._surface = surface
        self._resolver = resolver
        self._session_id = session_id

    def route(self, context: PageContext, command: NormalizedCommand) -> Intent:
        snapshot = self._surface.snapshot()
        effective = detect_context_override(snapshot) or context

        if effective is not context:
            log_event({
                "level": "DEBUG",
                "event_type": "CONTEXT_OVERRIDDEN",
                "session_id": self._session_id,
                "declared": context.value,
                "effective": effective.value,
            })

        for rule in RULES_BY_CONTEXT.get(effective, ()):
            intent = self._apply(rule, effective, command, snapshot)
            if intent is not None:
                return intent

        return Intent(intent_type=IntentType.UNRECOGNIZED, context=effective)

    # ------------------------------------------------------------------
    # Rule evaluation
    # ------------------------------------------------------------------

    def _apply(
        self,
        rule: Rule,
        context: PageContext,
        command: NormalizedCommand,
        snapshot: Surface,
    ) -> Intent | None:
        if isinstance(rule, KeywordRule):
            phrase = command.first_match(rule.phrases)
            if phrase is None or not self._guard_holds(rule.guard):
                return None
            return Intent(intent_type=rule.intent, context=context, matched_phrase=phrase)

        if isinstance(rule, OrdinalVoteStep):
            ordinal = extract_ordinal(command)
            if not is_valid_ordinal(ordinal):
                return None
            if not looks_like_vote(command, ordinal, snapshot.is_visible(ID_VOTING_SECTION)):
                return None
            return Intent(
                intent_type=IntentType.VOTE_FOR_ORDINAL,
                context=context,
                ordinal=ordinal,
            )

        if isinstance(rule, MissingOrdinalStep):
            verb = command.first_match(VOTE_VERBS)
            if verb is None:
                return None
            return Intent(
                intent_type=IntentType.VOTE_FOR_ORDINAL,
                context=context,
                matched_phrase=verb,
            )

        raise TypeError(f"Unknown rule: {rule!r}")

    def _guard_holds(self, guard: str | None) -> bool:
        if guard is None:
            return True
        if guard == GUARD_MODAL_CANCEL_PRESENT:
            return self._resolver.resolve_target(TargetKind.MODAL_CANCEL) is not None
        raise ValueError(f"Unknown guard: {guard}")
