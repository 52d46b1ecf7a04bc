"""
Action target resolution.

Maps an intent's target description (control id, candidate ordinal,
modal confirm/cancel) onto a concrete element of the current surface.

Rules:
- Each target kind owns an ordered chain of lookup strategies.
  The first strategy producing an element wins.
- Every lookup reads the latest surface snapshot; targets are never
  cached beyond one dispatch.
- An empty first lookup may be retried once after a fixed delay
  (resolve_with_retry). There is never a third attempt.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

from observability.logger import log_event
from orchestrator.retry import (
    RetryAttempt,
    next_attempt,
    resolution_retry_delay_ms,
    should_retry_resolution,
)
from orchestrator.runtime_context import InteractionSurfaceProtocol
from orchestrator.timers import TimerRegistry
from surface.elements import Element, Surface


class TargetKind(str, Enum):
    NAMED_CONTROL = "named_control"
    VOTE_BUTTON = "vote_button"
    MODAL_CONFIRM = "modal_confirm"
    MODAL_CANCEL = "modal_cancel"


@dataclass(frozen=True)
class TargetQuery:
    """What to look for. `control_id` for named controls, `ordinal` for vote buttons."""
    kind: TargetKind
    control_id: str | None = None
    ordinal: int | None = None

    def describe(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "control_id": self.control_id, "ordinal": self.ordinal}


Finder = Callable[[Surface, TargetQuery], "Element | None"]


@dataclass(frozen=True)
class LookupStrategy:
    name: str
    find: Finder


# =============================================================================
# Strategy building blocks
# =============================================================================

def _first_selector(*templates: str) -> Finder:
    """Finder trying selector templates in order; {n} is the ordinal."""

    def _find(surface: Surface, query: TargetQuery) -> Element | None:
        for template in templates:
            element = surface.query(template.format(n=query.ordinal))
            if element is not None:
                return element
        return None

    return _find


def _by_control_id(surface: Surface, query: TargetQuery) -> Element | None:
    if not query.control_id:
        return None
    return surface.get_by_id(query.control_id)


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_VOTE_BTN_ID = re.compile(r"vote-btn-(\d+)")


def _leading_int(raw: str | None) -> int | None:
    """Integer prefix of raw ("03" -> 3, "2nd" -> 2), or None."""
    if raw is None:
        return None
    match = _LEADING_INT.match(raw)
    return int(match.group(1)) if match else None


def _scan_vote_buttons(surface: Surface, query: TargetQuery) -> Element | None:
    """
    Last resort: inspect every vote button and derive its ordinal from,
    in order, its own attribute, its nearest ancestor carrying the
    attribute, or the numeric suffix of its id.
    """
    for button in surface.query_all(".btn-vote"):
        number = _leading_int(button.get_attribute("data-candidate-number"))
        if number is None:
            holder = button.closest_with_attribute("data-candidate-number")
            if holder is not None:
                number = _leading_int(holder.get_attribute("data-candidate-number"))
        if number is None and button.element_id:
            match = _VOTE_BTN_ID.search(button.element_id)
            if match:
                number = int(match.group(1))
        if number == query.ordinal:
            return button
    return None


# =============================================================================
# Strategy chains
# =============================================================================

VOTE_BUTTON_STRATEGIES: tuple[LookupStrategy, ...] = (
    LookupStrategy(
        "container_vote_button",
        _first_selector('[data-candidate-number="{n}"] .btn-vote'),
    ),
    LookupStrategy(
        "card_vote_button",
        _first_selector('.card[data-candidate-number="{n}"] .btn-vote'),
    ),
    LookupStrategy(
        "container_any_button",
        _first_selector('[data-candidate-number="{n}"] button'),
    ),
    LookupStrategy(
        "button_attribute",
        _first_selector('.btn-vote[data-candidate-number="{n}"]', "#vote-btn-{n}"),
    ),
    LookupStrategy("scan_vote_buttons", _scan_vote_buttons),
)

MODAL_CONFIRM_STRATEGIES: tuple[LookupStrategy, ...] = (
    LookupStrategy("confirm_id", _first_selector("#modal-confirm-btn")),
    LookupStrategy("confirmation_modal_success", _first_selector("#confirmation-modal .btn-success")),
    LookupStrategy(
        "confirmation_modal_action",
        _first_selector('#confirmation-modal [data-action="confirm"]'),
    ),
    LookupStrategy("overlay_success", _first_selector(".modal-overlay .btn-success")),
    LookupStrategy("content_success", _first_selector(".modal-content .btn-success")),
)

MODAL_CANCEL_STRATEGIES: tuple[LookupStrategy, ...] = (
    LookupStrategy("cancel_id", _first_selector("#modal-cancel-btn")),
    LookupStrategy(
        "confirmation_modal_secondary",
        _first_selector("#confirmation-modal .btn-secondary"),
    ),
    LookupStrategy(
        "confirmation_modal_action",
        _first_selector('#confirmation-modal [data-action="cancel"]'),
    ),
    LookupStrategy("overlay_secondary", _first_selector(".modal-overlay .btn-secondary")),
    LookupStrategy("content_secondary", _first_selector(".modal-content .btn-secondary")),
)

NAMED_CONTROL_STRATEGIES: tuple[LookupStrategy, ...] = (
    LookupStrategy("element_id", _by_control_id),
)

DEFAULT_STRATEGIES: Mapping[TargetKind, tuple[LookupStrategy, ...]] = {
    TargetKind.NAMED_CONTROL: NAMED_CONTROL_STRATEGIES,
    TargetKind.VOTE_BUTTON: VOTE_BUTTON_STRATEGIES,
    TargetKind.MODAL_CONFIRM: MODAL_CONFIRM_STRATEGIES,
    TargetKind.MODAL_CANCEL: MODAL_CANCEL_STRATEGIES,
}


# =============================================================================
# Resolver
# =============================================================================

class ActionTargetResolver:
    """Resolves target queries against the live surface."""

    def __init__(
        self,
        surface: InteractionSurfaceProtocol,
        *,
        strategies: Mapping[TargetKind, tuple[LookupStrategy, ...]] | None = None,
        session_id: str | None = None,
    ) -> None:
        self._surface = surface
        self._strategies = dict(strategies or DEFAULT_STRATEGIES)
        self._session_id = session_id

    def resolve_target(
        self,
        kind: TargetKind,
        *,
        control_id: str | None = None,
        ordinal: int | None = None,
    ) -> Element | None:
        """Single pass over the strategy chain; None when every strategy misses."""
        query = TargetQuery(kind=kind, control_id=control_id, ordinal=ordinal)
        return self._resolve(query)

    def resolve_with_retry(
        self,
        query: TargetQuery,
        *,
        timers: TimerRegistry,
        timer_id: str,
        on_found: Callable[[Element], None],
        on_missing: Callable[[], None],
    ) -> Element | None:
        """
        Resolve now; if nothing is found, try once more after a fixed delay.

        Returns the element when the first attempt succeeds (on_found has
        already run). Returns None when resolution is pending or, with
        retries disabled, has already failed (on_missing has run).
        """

        def _attempt(attempt: RetryAttempt) -> Element | None:
            target = self._resolve(query)
            if target is not None:
                on_found(target)
                return target
            if should_retry_resolution(attempt):
                retry = next_attempt(attempt)
                timers.start(
                    timer_id,
                    resolution_retry_delay_ms(retry),
                    lambda: _attempt(retry),
                )
                log_event({
                    "event_type": "TARGET_RETRY_SCHEDULED",
                    "session_id": self._session_id,
                    "query": query.describe(),
                    "attempt": retry.attempt,
                })
                return None
            log_event({
                "level": "WARNING",
                "event_type": "TARGET_NOT_FOUND",
                "session_id": self._session_id,
                "query": query.describe(),
                "attempts": attempt.attempt + 1,
            })
            on_missing()
            return None

        return _attempt(RetryAttempt())

    def explain(
        self,
        kind: TargetKind,
        *,
        control_id: str | None = None,
        ordinal: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Run every strategy (not only up to the first hit) and report what
        each one finds. Diagnostic aid for the host page.
        """
        query = TargetQuery(kind=kind, control_id=control_id, ordinal=ordinal)
        surface = self._surface.snapshot()
        report: list[dict[str, Any]] = []
        for strategy in self._strategies.get(kind, ()):
            element = strategy.find(surface, query)
            report.append({
                "strategy": strategy.name,
                "found": element is not None,
                "element": element.describe() if element is not None else None,
            })
        return report

    def _resolve(self, query: TargetQuery) -> Element | None:
        surface = self._surface.snapshot()
        for strategy in self._strategies.get(query.kind, ()):
            element = strategy.find(surface, query)
            if element is not None:
                log_event({
                    "level": "DEBUG",
                    "event_type": "TARGET_RESOLVED",
                    "session_id": self._session_id,
                    "query": query.describe(),
                    "strategy": strategy.name,
                    "element": element.describe(),
                })
                return element
        return None
