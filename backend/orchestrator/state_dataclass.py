"""
Authoritative listening state container.

Rules:
- ListeningSessionState is a pure data model.
- It contains ALL state the listening reducer may ever need.
- The only derived logic is status_for(), which maps state to the
  three user-visible status texts.
"""
from __future__ import annotations

from dataclasses import dataclass

from constants import (
    STATUS_ARIA_LISTENING,
    STATUS_ARIA_OFF,
    STATUS_ARIA_STARTING,
    STATUS_TEXT_LISTENING,
    STATUS_TEXT_OFF,
    STATUS_TEXT_STARTING,
    STATUS_TOGGLE_TITLE_OFF,
    STATUS_TOGGLE_TITLE_ON,
)
from orchestrator.enums.state import ListeningState


# =============================================================================
# Listening State
# =============================================================================

@dataclass(frozen=True)
class ListeningSessionState:
    """Immutable snapshot of all listening-session state."""

    state: ListeningState = ListeningState.IDLE

    # AlwaysOn: re-arm listening after every segment end / transient error
    always_on: bool = False

    # None until the first acquisition attempt
    recognizer_available: bool | None = None

    # A start is waiting for acquisition to finish
    start_requested: bool = False

    # Receipt order of final transcripts
    utterance_seq: int = 0

    last_error: str | None = None


# =============================================================================
# Status
# =============================================================================

@dataclass(frozen=True)
class VoiceStatus:
    """What the status display should show."""
    text: str
    listening: bool
    always_on: bool
    aria_label: str
    toggle_title: str

    def to_json(self) -> dict[str, object]:
        return {
            "text": self.text,
            "listening": self.listening,
            "always_on": self.always_on,
            "aria_label": self.aria_label,
            "toggle_title": self.toggle_title,
        }


def status_for(state: ListeningSessionState) -> VoiceStatus:
    """
    Derive the status display from listening state.

    - always-on and LISTENING      -> "Voice: Listening (Always On)"
    - always-on, not yet listening -> "Voice: Starting..."
    - otherwise                    -> "Voice: Off"
    """
    toggle_title = STATUS_TOGGLE_TITLE_ON if state.always_on else STATUS_TOGGLE_TITLE_OFF

    if state.always_on and state.state is ListeningState.LISTENING:
        return VoiceStatus(
            text=STATUS_TEXT_LISTENING,
            listening=True,
            always_on=True,
            aria_label=STATUS_ARIA_LISTENING,
            toggle_title=toggle_title,
        )
    if state.always_on:
        return VoiceStatus(
            text=STATUS_TEXT_STARTING,
            listening=False,
            always_on=True,
            aria_label=STATUS_ARIA_STARTING,
            toggle_title=toggle_title,
        )
    return VoiceStatus(
        text=STATUS_TEXT_OFF,
        listening=False,
        always_on=False,
        aria_label=STATUS_ARIA_OFF,
        toggle_title=toggle_title,
    )
