"""
Intent vocabulary (static data).

Rules:
- Data only: keyword tables, ordinal tables, spoken phrases.
- Rule tuples are evaluated in order, first match wins.
- Each page context owns its own order; the order IS the disambiguation
  policy (e.g. "back" on login acknowledges, "go back" on voting navigates).
- Keyword matching is substring matching on the normalized command.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from orchestrator.enums.intent import IntentType
from orchestrator.enums.page_context import PageContext


# =============================================================================
# Rule shapes
# =============================================================================

@dataclass(frozen=True)
class KeywordRule:
    """
    Emit `intent` when the command contains any of `phrases`.

    guard:
        Optional name of a surface condition that must also hold.
        When it does not, evaluation continues with the next rule.
    """
    intent: IntentType
    phrases: tuple[str, ...]
    guard: str | None = None


@dataclass(frozen=True)
class OrdinalVoteStep:
    """Emit VOTE_FOR_ORDINAL when an in-range ordinal passes the vote gate."""


@dataclass(frozen=True)
class MissingOrdinalStep:
    """Emit VOTE_FOR_ORDINAL without ordinal when a vote verb carries none."""


Rule = KeywordRule | OrdinalVoteStep | MissingOrdinalStep

# Surface guards understood by the router
GUARD_MODAL_CANCEL_PRESENT: Final[str] = "modal_cancel_present"


# =============================================================================
# Ordinals
# =============================================================================

# Priority order: first matching pattern wins
ORDINAL_PATTERNS: Final[tuple[re.Pattern[str], ...]] = tuple(
    re.compile(p, re.IGNORECASE | re.ASCII)
    for p in (
        r"candidate\s*(\d+)",
        r"number\s*(\d+)",
        r"vote\s*(\d+)",
        r"select\s*(\d+)",
        r"choose\s*(\d+)",
        r"\b(\d+)\b",
    )
)

# Table order is the search order for the word fallback
WORD_NUMBERS: Final[tuple[tuple[str, int], ...]] = (
    ("one", 1),
    ("two", 2),
    ("three", 3),
    ("four", 4),
    ("five", 5),
    ("six", 6),
    ("seven", 7),
    ("eight", 8),
    ("nine", 9),
    ("ten", 10),
)


# =============================================================================
# Vote gate
# =============================================================================

VOTE_VERBS: Final[tuple[str, ...]] = ("vote", "select", "choose")
VOTE_CONTEXT_WORDS: Final[tuple[str, ...]] = ("candidate", "number")


# =============================================================================
# Per-context rule tables
# =============================================================================

LOGIN_RULES: Final[tuple[Rule, ...]] = (
    KeywordRule(IntentType.LOGIN, ("login", "log in")),
    KeywordRule(IntentType.CLEAR_FORM, ("clear",)),
    KeywordRule(IntentType.ACKNOWLEDGE, ("back",)),
)

HOME_RULES: Final[tuple[Rule, ...]] = (
    KeywordRule(
        IntentType.NAVIGATE_TO_VOTING,
        ("voting page", "vote now", "go to voting"),
    ),
    KeywordRule(IntentType.READ_RULES, ("read rules", "rules")),
    KeywordRule(IntentType.LOGOUT, ("log out", "logout")),
    KeywordRule(IntentType.OPEN_PROFILE, ("profile", "open profile")),
    KeywordRule(IntentType.ACKNOWLEDGE, ("home",)),
)

VOTING_RULES: Final[tuple[Rule, ...]] = (
    KeywordRule(
        IntentType.START_VERIFICATION,
        ("verify identity", "verify", "start verification", "begin verification"),
    ),
    KeywordRule(IntentType.CONFIRM_VOTE, ("confirm", "yes", "confirm vote")),
    KeywordRule(
        IntentType.CANCEL_VOTE,
        ("cancel", "no"),
        guard=GUARD_MODAL_CANCEL_PRESENT,
    ),
    OrdinalVoteStep(),
    KeywordRule(
        IntentType.READ_CANDIDATE_LIST,
        ("read candidate", "candidate list", "list candidates"),
    ),
    KeywordRule(IntentType.GO_BACK, ("go back", "back", "return")),
    MissingOrdinalStep(),
)

FACE_VERIFICATION_RULES: Final[tuple[Rule, ...]] = (
    KeywordRule(IntentType.START_VERIFICATION, ("start", "verify", "begin")),
    KeywordRule(IntentType.RETRY_VERIFICATION, ("retry", "try again")),
)

RULES_BY_CONTEXT: Final[dict[PageContext, tuple[Rule, ...]]] = {
    PageContext.LOGIN: LOGIN_RULES,
    PageContext.HOME: HOME_RULES,
    PageContext.VOTING: VOTING_RULES,
    PageContext.FACE_VERIFICATION: FACE_VERIFICATION_RULES,
}


# =============================================================================
# Surface identifiers
# =============================================================================

# Presence of any of these forces voting-context handling
VOTING_MARKER_IDS: Final[tuple[str, ...]] = (
    "btn-verify-face",
    "voting-section",
    "candidates-container",
)

ID_VOTING_SECTION: Final[str] = "voting-section"
ID_FACE_VERIFY_SECTION: Final[str] = "face-verify-section"
ID_BTN_VERIFY_FACE: Final[str] = "btn-verify-face"
ID_BTN_LOGIN: Final[str] = "btn-login"
ID_BTN_PROFILE: Final[str] = "btn-profile"
ID_BTN_START_VERIFICATION: Final[str] = "btn-start-verification"
ID_BTN_RETRY: Final[str] = "btn-retry"
LOGIN_FORM_INPUT_IDS: Final[tuple[str, ...]] = ("aadhar-input", "password-input")

SELECTOR_VOTING_LINK: Final[str] = 'a[href="voting.html"]'
SELECTORS_MAIN_CONTENT: Final[tuple[str, ...]] = ("main", ".container", ".content-center")
SELECTOR_CANDIDATE_CARD: Final[str] = ".card"
SELECTOR_CARD_TITLE: Final[str] = ".card-title"
SELECTOR_CARD_SUBTITLE: Final[str] = ".card-subtitle"
SELECTOR_CARD_DESCRIPTION: Final[str] = ".card-description"


# =============================================================================
# Spoken phrases
# =============================================================================

SAY_LOGGING_IN: Final[str] = "Logging in..."
SAY_FORM_CLEARED: Final[str] = "Form cleared."
SAY_ON_LOGIN_PAGE: Final[str] = "You are on the login page."
SAY_ALREADY_HOME: Final[str] = "You are already on the home page."
SAY_NAVIGATING_TO_VOTING: Final[str] = "Navigating to voting page..."
SAY_NO_CONTENT_FOUND: Final[str] = "No content found to read."
SAY_NO_CONTENT_AVAILABLE: Final[str] = "No content available to read."
SAY_LOGGING_OUT: Final[str] = "Logging out..."
SAY_STARTING_IDENTITY_VERIFICATION: Final[str] = "Starting identity verification..."
SAY_VERIFICATION_IN_PROGRESS: Final[str] = "Verification is already in progress. Please wait."
SAY_VERIFY_BUTTON_MISSING: Final[str] = "Verify button not found. Please refresh the page."
SAY_STARTING_FACE_VERIFICATION: Final[str] = "Starting face verification..."
SAY_CONFIRMING_VOTE: Final[str] = "Confirming your vote..."
SAY_SELECT_CANDIDATE_FIRST: Final[str] = (
    'Please select a candidate first by saying "Vote for candidate" followed by the number.'
)
SAY_NOTHING_TO_CONFIRM: Final[str] = "There is no vote waiting for confirmation."
SAY_VOTE_CANCELLED: Final[str] = "Vote cancelled."
SAY_VOTING_FOR: Final[str] = "Voting for candidate {n}..."
SAY_CANDIDATE_NOT_FOUND: Final[str] = (
    "Candidate {n} not found. Please check the candidate list or try again."
)
SAY_WHICH_CANDIDATE: Final[str] = (
    'Which candidate? Say "Vote for candidate" followed by the number.'
)
SAY_NO_CANDIDATES: Final[str] = "No candidates found."
SAY_CANDIDATE_COUNT: Final[str] = "There are {count} candidates. "
SAY_CANDIDATE_ENTRY: Final[str] = "Candidate {index}: {name}. {party}. {description}. "
SAY_GOING_BACK: Final[str] = "Going back to home page..."
SAY_CONTROL_NOT_FOUND: Final[str] = "{label} not found. Please try again."
SAY_DISPATCH_FAILED: Final[str] = (
    "Sorry, there was an error processing your command. Please try again."
)

SAY_VOICE_ON: Final[str] = "Voice assistance turned on. I am listening."
SAY_VOICE_OFF: Final[str] = "Voice assistance turned off."
SAY_PERMISSION_DENIED: Final[str] = (
    "Microphone access denied. Please enable microphone permissions."
)
SAY_RECOGNITION_UNSUPPORTED: Final[str] = (
    "Speech recognition is not available in this browser."
)
SAY_NOW_ON_PAGE: Final[str] = "You are now on the {name} page."

HELP_LOGIN: Final[str] = 'Say "Login" to proceed, or "Clear" to clear the form.'
HELP_HOME: Final[str] = 'Say "Go to voting page", "Read rules", "Open profile", or "Log out".'
HELP_VOTING_VERIFY: Final[str] = (
    'Say "Verify identity" to begin verification, or "Go back" to return to home.'
)
HELP_VOTING_BALLOT: Final[str] = (
    'Say "Vote for candidate" followed by the number, "Read candidate list", or "Go back".'
)
HELP_VOTING_DEFAULT: Final[str] = (
    'Say "Verify identity" to begin, "Vote for candidate" followed by the number, '
    'or "Read candidate list".'
)
HELP_FACE_VERIFICATION: Final[str] = 'Say "Start verification" to begin face recognition.'

GREETING_BY_CONTEXT: Final[dict[PageContext, str]] = {
    PageContext.HOME: (
        'Welcome to the home page. Say "Go to voting page", "Read rules", '
        '"Open profile", or "Log out".'
    ),
    PageContext.VOTING: (
        'You are on the voting page. Say "Vote for candidate" followed by the number, '
        'or "Read candidate list".'
    ),
}
