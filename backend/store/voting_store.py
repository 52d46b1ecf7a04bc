"""
Voting application state on top of a key-value backend.

Responsibilities:
- Current voter session (logged-in identifier)
- Stored face descriptors per voter
- Vote records and per-voter "has voted" flags

Non-responsibilities:
- No tallying or reporting
- No credential validation
- No decision about when to vote (the host page's verification flow)

Keys match the ones the host pages use: voting_session,
face_descriptors, votes, has_voted_<voter id>. A per-connection view
keeps its voter under voting_session:<session id>.
"""

from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from constants import (
    STORAGE_KEY_FACE_DESCRIPTORS,
    STORAGE_KEY_HAS_VOTED_PREFIX,
    STORAGE_KEY_SESSION,
    STORAGE_KEY_VOTES,
)
from observability.logger import log_event
from store.key_value import InMemoryBackend, JsonFileBackend, KeyValueBackend


class VotingStore:
    def __init__(
        self,
        backend: KeyValueBackend | None = None,
        *,
        session_key: str = STORAGE_KEY_SESSION,
    ) -> None:
        self._backend = backend or InMemoryBackend()
        self._session_key = session_key

    @classmethod
    def from_path(cls, path: str | None) -> VotingStore:
        """JSON-file store at path, or an in-memory store when path is None."""
        return cls(JsonFileBackend(path) if path else InMemoryBackend())

    def for_session(self, session_id: str) -> VotingStore:
        """
        View sharing this backend whose current-voter key belongs to one connection.

        Votes, has-voted flags and face descriptors stay shared.
        """
        return VotingStore(self._backend, session_key=f"{STORAGE_KEY_SESSION}:{session_id}")

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def get_current_session(self) -> str | None:
        return self._backend.get(self._session_key)

    def set_current_session(self, voter_id: str) -> None:
        self._backend.set(self._session_key, voter_id)

    def clear_session(self) -> None:
        self._backend.remove(self._session_key)
        log_event({"event_type": "SESSION_CLEARED", "key": self._session_key})

    def is_logged_in(self) -> bool:
        return self.get_current_session() is not None

    # ------------------------------------------------------------------
    # Face descriptors
    # ------------------------------------------------------------------

    def store_face_descriptor(self, voter_id: str, descriptor: Sequence[float]) -> None:
        descriptors = self.get_face_descriptors()
        descriptors[voter_id] = [float(v) for v in descriptor]
        self._backend.set(STORAGE_KEY_FACE_DESCRIPTORS, json.dumps(descriptors))

    def get_face_descriptor(self, voter_id: str) -> list[float] | None:
        return self.get_face_descriptors().get(voter_id)

    def get_face_descriptors(self) -> dict[str, list[float]]:
        return self._load_json(STORAGE_KEY_FACE_DESCRIPTORS, {})

    # ------------------------------------------------------------------
    # Votes
    # ------------------------------------------------------------------

    def has_user_voted(self, voter_id: str) -> bool:
        return self._backend.get(STORAGE_KEY_HAS_VOTED_PREFIX + voter_id) == "true"

    def mark_user_as_voted(self, voter_id: str) -> None:
        self._backend.set(STORAGE_KEY_HAS_VOTED_PREFIX + voter_id, "true")

    def store_vote(self, voter_id: str, candidate: Mapping[str, Any]) -> bool:
        """
        Append a vote record and mark the voter.

        Returns False (and logs) if the record could not be stored.
        """
        now = time.time()
        record = {
            "aadhar": voter_id,
            "candidate": dict(candidate),
            "timestamp": int(now * 1000),
            "date": datetime.fromtimestamp(now, tz=timezone.utc).isoformat(),
        }
        try:
            votes = self.get_votes()
            votes.append(record)
            self._backend.set(STORAGE_KEY_VOTES, json.dumps(votes))
        except (TypeError, ValueError, OSError) as e:
            log_event({
                "level": "ERROR",
                "event_type": "VOTE_STORE_FAILED",
                "error": str(e),
            })
            return False
        self.mark_user_as_voted(voter_id)
        return True

    def get_votes(self) -> list[dict[str, Any]]:
        return self._load_json(STORAGE_KEY_VOTES, [])

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_json(self, key: str, default: Any) -> Any:
        raw = self._backend.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            log_event({
                "level": "WARNING",
                "event_type": "STORE_VALUE_CORRUPT",
                "key": key,
            })
            return default
