"""
Page context enumeration.

Rules:
- Identifies which logical page the hosting application currently shows.
- Set only by an explicit context-set call from the hosting page.
- Values match the identifiers the host page sends over the wire.
"""

from __future__ import annotations

from enum import Enum


class PageContext(str, Enum):
    """
    Logical page / screen the user currently occupies.

    The router reads this on every utterance to pick a handler set.
    """

    LOGIN = "login"
    HOME = "home"
    VOTING = "voting"
    FACE_VERIFICATION = "face-verification"

    @classmethod
    def parse(cls, raw: str) -> PageContext:
        """
        Parse a wire identifier into a PageContext.

        Accepts the wire value ("face-verification") as well as the
        enum name ("FACE_VERIFICATION"), case-insensitively.

        Raises:
            ValueError if the identifier names no known page.
        """
        value = raw.strip().lower()
        for member in cls:
            if value in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown page context: {raw!r}")
