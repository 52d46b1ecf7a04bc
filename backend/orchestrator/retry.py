"""
Retry policy helpers.

Purpose:
- Centralize the engine's two retry rules:
    * listening restarts after transient failures / segment ends
    * the single bounded re-resolution of an absent action target
- Keep the listening reducer pure
- Allow runtime and resolver to make deterministic retry decisions

This module contains NO timers, NO async, NO side effects.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from constants import (
    RESOLVER_MAX_RETRIES,
    RESOLVER_RETRY_DELAY_MS,
    RESTART_DELAY_ENDED_MS,
    RESTART_DELAY_TRANSIENT_MS,
)


# =============================================================================
# Restart reasons
# =============================================================================

class RestartReason(str, Enum):
    """
    Why the listening session schedules a restart.

    TRANSIENT_ERROR:
        Engine reported no-speech or aborted while always-on.

    SEGMENT_ENDED:
        Engine ended a recognition segment while always-on.

    Notes:
    - Permission denial is NOT a restart reason; it ends the session.
    - Restarts are unbounded in count but never overlap: all reasons
      share one restart timer.
    """

    TRANSIENT_ERROR = "transient_error"
    SEGMENT_ENDED = "segment_ended"


def restart_delay_ms(reason: RestartReason) -> int:
    """Fixed delay before a restart for the given reason."""
    if reason is RestartReason.TRANSIENT_ERROR:
        return RESTART_DELAY_TRANSIENT_MS
    return RESTART_DELAY_ENDED_MS


# =============================================================================
# Resolution retry
# =============================================================================

@dataclass(frozen=True)
class RetryAttempt:
    """
    Immutable retry attempt counter.

    Semantics:
    - attempt == 0 represents the initial attempt (no retry yet).
    - attempt >= 1 represents the Nth retry attempt.
    """
    attempt: int = 0


def next_attempt(current: RetryAttempt) -> RetryAttempt:
    """Return a new RetryAttempt with attempt incremented by 1."""
    return RetryAttempt(attempt=current.attempt + 1)


def should_retry_resolution(attempt: RetryAttempt) -> bool:
    """
    Returns True if another resolution attempt is allowed.

    attempt = number of retries already performed.
    One retry at most: the first attempt plus one re-resolution.
    """
    return attempt.attempt < RESOLVER_MAX_RETRIES


def resolution_retry_delay_ms(attempt: RetryAttempt) -> int:  # pylint: disable=unused-argument
    """Fixed delay before re-resolving; not a backoff."""
    return RESOLVER_RETRY_DELAY_MS
