"""Durable record of automatically sent activation links (one per session + email)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol, Set

from services.json_state_store import JsonStateStore

logger = logging.getLogger(__name__)

_KEY_PREFIX = "activation-link"


class SentLinkStore(Protocol):
    def has(self, key: str) -> bool: ...

    def set(self, key: str) -> None: ...


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def sent_link_key(session_id: str, email: str) -> str:
    return f"{_KEY_PREFIX}:{session_id}:{normalize_email(email)}"


class MemorySentLinkStore:
    """Process-local store; forgets everything on exit."""

    def __init__(self) -> None:
        self._keys: Set[str] = set()

    def has(self, key: str) -> bool:
        return key in self._keys

    def set(self, key: str) -> None:
        self._keys.add(key)

    def __len__(self) -> int:
        return len(self._keys)


class JsonSentLinkStore:
    """Presence flags persisted to a JSON file.

    Entries are never removed. Two processes racing on the same pair may both
    see it as absent; a duplicate email is accepted rather than locking.
    """

    def __init__(self, path: Path) -> None:
        self._store = JsonStateStore(path, "sent_links", logger=logger)

    @property
    def path(self) -> Path:
        return self._store.path

    def has(self, key: str) -> bool:
        return any(entry.get("key") == key for entry in self._store.load(reload=True))

    def set(self, key: str) -> None:
        if self.has(key):
            return
        self._store.append({"key": key, "sent_at": datetime.now(timezone.utc).isoformat()})
        logger.debug("Recorded sent activation link %s", key)


__all__ = [
    "JsonSentLinkStore",
    "MemorySentLinkStore",
    "SentLinkStore",
    "normalize_email",
    "sent_link_key",
]
