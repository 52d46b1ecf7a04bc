"""
BEHAVIOR-AS-CONSTANTS
---------------------
Single source of truth for all behavioral invariants of the voice engine.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Timings are fixed constants, never per-call options.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Listening session timing
# =============================================================================

# Restart after a transient recognition error (no-speech / aborted)
RESTART_DELAY_TRANSIENT_MS: Final[int] = 500

# Restart after the engine ended a segment while always-on
RESTART_DELAY_ENDED_MS: Final[int] = 300

# =============================================================================
# Dispatch timing
# =============================================================================

# Delay between spoken feedback and the visible effect of an action
INVOKE_DELAY_MS: Final[int] = 300

# Single bounded re-resolution after an empty first lookup
RESOLVER_RETRY_DELAY_MS: Final[int] = 200
RESOLVER_MAX_RETRIES: Final[int] = 1

# Page greeting is spoken after the page had time to render
PAGE_GREETING_DELAY_MS: Final[int] = 1000

# =============================================================================
# Ordinals
# =============================================================================

ORDINAL_MIN: Final[int] = 1
ORDINAL_MAX: Final[int] = 10

# =============================================================================
# Speech defaults
# =============================================================================

SPEECH_LANG_DEFAULT: Final[str] = "en-US"
SPEECH_RATE_DEFAULT: Final[float] = 1.0
SPEECH_PITCH_DEFAULT: Final[float] = 1.0
SPEECH_VOLUME_DEFAULT: Final[float] = 1.0

RECOGNITION_CONTINUOUS: Final[bool] = True
RECOGNITION_INTERIM_RESULTS: Final[bool] = False
RECOGNITION_MAX_ALTERNATIVES: Final[int] = 1

# =============================================================================
# Status surface
# =============================================================================

STATUS_TEXT_LISTENING: Final[str] = "Voice: Listening (Always On)"
STATUS_TEXT_STARTING: Final[str] = "Voice: Starting..."
STATUS_TEXT_OFF: Final[str] = "Voice: Off"

STATUS_ARIA_LISTENING: Final[str] = "Voice assistance is active and listening"
STATUS_ARIA_STARTING: Final[str] = "Voice assistance is starting"
STATUS_ARIA_OFF: Final[str] = "Voice assistance is off"

STATUS_TOGGLE_TITLE_ON: Final[str] = "Turn off voice assistance"
STATUS_TOGGLE_TITLE_OFF: Final[str] = "Turn on voice assistance"

# =============================================================================
# Persistent store keys
# =============================================================================

STORAGE_KEY_SESSION: Final[str] = "voting_session"
STORAGE_KEY_FACE_DESCRIPTORS: Final[str] = "face_descriptors"
STORAGE_KEY_VOTES: Final[str] = "votes"
STORAGE_KEY_HAS_VOTED_PREFIX: Final[str] = "has_voted_"

# =============================================================================
# Navigation targets
# =============================================================================

PAGE_URL_LOGIN: Final[str] = "index.html"
PAGE_URL_HOME: Final[str] = "home.html"
PAGE_URL_VOTING: Final[str] = "voting.html"
