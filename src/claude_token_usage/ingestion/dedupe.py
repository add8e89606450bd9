"""Run-scoped deduplication of repeated usage events."""

from __future__ import annotations

from .schemas import UsageEvent


class Deduplicator:
    """Tracks fingerprints seen during one run and rejects repeats."""

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self.duplicates_skipped = 0

    def admit(self, event: UsageEvent) -> bool:
        """Return True on the first occurrence of the event's fingerprint."""
        if event.fingerprint in self._seen:
            self.duplicates_skipped += 1
            return False
        self._seen.add(event.fingerprint)
        return True

    def __len__(self) -> int:
        return len(self._seen)
