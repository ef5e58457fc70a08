"""
Durable key-value storage.

The client persists a handful of string values between runs: the session
record, two mirror keys the API client reads directly, and the pending
registration. Values are plain strings (JSON-encoded by callers), matching a
browser's local storage so the persisted layout stays the same everywhere.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


# Storage layout
AUTH_STORAGE_KEY = "auth-storage"
TOKEN_KEY = "token"
USER_KEY = "user"
REGISTRATION_KEY = "registrationData"


@runtime_checkable
class KeyValueStore(Protocol):
    """Synchronous string key-value store."""

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None when the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    def remove_item(self, key: str) -> None:
        """Remove ``key``. Removing a missing key is a no-op."""
        ...


class MemoryStorage:
    """In-process store. Used by tests and as a throwaway store."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileStorage:
    """
    Store backed by a single JSON object on disk.

    The file is shared by every process using the same path (the CLI and a
    long-running landing server), so reads always go to disk and each write
    applies its one change on top of the file's current contents. Writes go
    through a temporary sibling and an atomic rename, so a crash never leaves
    a half-written store behind.
    """

    def __init__(self, path: Path):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable storage file {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring storage file {self._path}: not a JSON object")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(items, indent=2), encoding="utf-8")
        tmp.replace(self._path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._flush(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._flush(items)
