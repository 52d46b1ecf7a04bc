"""
Interaction surface mirrored from the host page.

The host page pushes SURFACE_SNAPSHOT messages whenever it re-renders;
the latest snapshot answers every lookup. Invocations and value clears
are sent back as INVOKE / CLEAR_VALUE messages addressed by element ref.
"""

from __future__ import annotations

from typing import Any, Callable

from orchestrator.errors import SurfaceError
from surface.elements import Element, Surface


class RemoteSurface:
    def __init__(self, enqueue: Callable[[dict[str, Any]], None]) -> None:
        self._enqueue = enqueue
        self._current = Surface.empty()

    def update(self, surface: Surface) -> None:
        self._current = surface

    def snapshot(self) -> Surface:
        return self._current

    def invoke(self, target: Element) -> None:
        self._require_current(target)
        self._enqueue({"type": "INVOKE", "ref": target.ref})

    def clear_value(self, target: Element) -> None:
        self._require_current(target)
        self._enqueue({"type": "CLEAR_VALUE", "ref": target.ref})

    def _require_current(self, target: Element) -> None:
        # A snapshot pushed after resolution may no longer hold the element
        if self._current.get_by_ref(target.ref) is None:
            raise SurfaceError(f"element {target.ref!r} is not on the current surface")
