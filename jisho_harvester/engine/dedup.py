"""Canonical-key deduplication of parsed entries."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

from ..models import Entry


@dataclass
class DeduplicationResult:
    key: str
    duplicate: bool


class Deduplicator:
    """Registry of canonical keys; the first entry seen for a key wins."""

    def __init__(self) -> None:
        self._entries: dict[str, Entry] = {}
        self._lock = Lock()

    def check_and_store(self, entry: Entry) -> DeduplicationResult:
        key = entry.canonical_key
        with self._lock:
            if key in self._entries:
                return DeduplicationResult(key, duplicate=True)
            self._entries[key] = entry
        return DeduplicationResult(key, duplicate=False)

    def entries(self) -> dict[str, Entry]:
        with self._lock:
            return dict(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["DeduplicationResult", "Deduplicator"]
