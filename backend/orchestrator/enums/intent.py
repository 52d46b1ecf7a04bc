"""
Intent type enumeration.

Rules:
- Closed vocabulary of meanings a spoken command can carry.
- Which intents are reachable depends on the page context (see router).
"""

from __future__ import annotations

from enum import Enum


class IntentType(str, Enum):
    """Classified meaning of a spoken command within a page context."""

    LOGIN = "LOGIN"
    CLEAR_FORM = "CLEAR_FORM"
    ACKNOWLEDGE = "ACKNOWLEDGE"
    NAVIGATE_TO_VOTING = "NAVIGATE_TO_VOTING"
    READ_RULES = "READ_RULES"
    OPEN_PROFILE = "OPEN_PROFILE"
    LOGOUT = "LOGOUT"
    START_VERIFICATION = "START_VERIFICATION"
    RETRY_VERIFICATION = "RETRY_VERIFICATION"
    CONFIRM_VOTE = "CONFIRM_VOTE"
    CANCEL_VOTE = "CANCEL_VOTE"
    VOTE_FOR_ORDINAL = "VOTE_FOR_ORDINAL"
    READ_CANDIDATE_LIST = "READ_CANDIDATE_LIST"
    GO_BACK = "GO_BACK"
    UNRECOGNIZED = "UNRECOGNIZED"
