"""
Ordinal extraction.

Pure functions. Never raise; absence is None.

Search order:
1. Numeric patterns in fixed priority ("candidate N", "number N",
   "vote N", "select N", "choose N", bare digit). The first pattern that
   matches decides; a captured 0 counts as "no number" and falls
   through to step 2.
2. Word numbers ("one".."ten") as substrings, scanned in TABLE order,
   not utterance order. "choose nine or two" therefore yields 2.
   This is observed behavior kept on purpose; see DESIGN.md.
"""

from __future__ import annotations

from constants import ORDINAL_MAX, ORDINAL_MIN
from orchestrator.intents import NormalizedCommand
from orchestrator.vocabulary import ORDINAL_PATTERNS, WORD_NUMBERS


def extract_ordinal(command: NormalizedCommand) -> int | None:
    """Return the ordinal referenced by the command, or None."""
    for pattern in ORDINAL_PATTERNS:
        match = pattern.search(command.text)
        if match:
            value = int(match.group(1))
            if value:
                return value
            break

    for word, value in WORD_NUMBERS:
        if word in command.text:
            return value

    return None


def contains_word_number(command: NormalizedCommand) -> bool:
    """True if any word number occurs in the command (substring match)."""
    return any(word in command.text for word, _ in WORD_NUMBERS)


def is_valid_ordinal(value: int | None) -> bool:
    """True if value can address a selectable item."""
    return value is not None and ORDINAL_MIN <= value <= ORDINAL_MAX
