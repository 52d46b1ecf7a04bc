"""
Utterance, normalized command, and intent value objects.

Rules:
- Value objects only; never mutated after creation.
- An Utterance exists only for the duration of one dispatch.
- At most one Intent is produced per utterance.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from orchestrator.enums.intent import IntentType
from orchestrator.enums.page_context import PageContext


_PUNCTUATION = re.compile(r"[^\w\s]", re.ASCII)


@dataclass(frozen=True)
class Utterance:
    """Raw recognized text plus its receipt order within the session."""
    text: str
    seq: int


@dataclass(frozen=True)
class NormalizedCommand:
    """Lower-cased, punctuation-free, trimmed command text."""
    text: str

    @classmethod
    def from_text(cls, raw: str) -> NormalizedCommand:
        return cls(text=_PUNCTUATION.sub("", raw.lower()).strip())

    def contains(self, phrase: str) -> bool:
        return phrase in self.text

    def first_match(self, phrases: Iterable[str]) -> str | None:
        """Return the first phrase (in the given order) contained in the command."""
        for phrase in phrases:
            if phrase in self.text:
                return phrase
        return None

    def contains_any(self, phrases: Iterable[str]) -> bool:
        return self.first_match(phrases) is not None


@dataclass(frozen=True)
class Intent:
    """
    Classified meaning of one command.

    context:
        The handler set that produced the intent (after any override).
        Several intents act differently per context (ACKNOWLEDGE,
        START_VERIFICATION, UNRECOGNIZED).

    ordinal:
        Only set for VOTE_FOR_ORDINAL; None there means the user asked
        to vote without naming a usable candidate number.
    """
    intent_type: IntentType
    context: PageContext
    ordinal: int | None = None
    matched_phrase: str | None = None
