"""
Page navigation on the host page.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping
from urllib.parse import urlencode


def redirect_url(page: str, params: Mapping[str, str] | None = None) -> str:
    """page, plus an url-encoded query string when params are given."""
    if not params:
        return page
    return f"{page}?{urlencode(dict(params))}"


class RemoteNavigator:
    def __init__(self, enqueue: Callable[[dict[str, Any]], None]) -> None:
        self._enqueue = enqueue

    def redirect(self, page: str, params: Mapping[str, str] | None = None) -> None:
        self._enqueue({"type": "NAVIGATE", "url": redirect_url(page, params)})
