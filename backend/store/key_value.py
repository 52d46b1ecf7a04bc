"""
String key-value backends for the persistent store.

Values are strings, like browser localStorage; structured values are
JSON-encoded by the caller.

Backends:
- InMemoryBackend: per-process, lost on restart (default)
- JsonFileBackend: one JSON object on disk, rewritten on every change
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from observability.logger import log_event


class KeyValueBackend(Protocol):
    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class InMemoryBackend:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileBackend:
    """
    File-backed store.

    Invariants:
    - The file always holds a single JSON object of string -> string
    - A missing file is an empty store; it is created on first write
    - A corrupt file is logged and treated as empty (next write replaces it)
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._data: dict[str, str] = self._load()

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            log_event({
                "level": "ERROR",
                "event_type": "STORE_LOAD_FAILED",
                "path": str(self._path),
                "error": str(e),
            })
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self._path)
