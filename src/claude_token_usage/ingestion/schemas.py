"""Typed schemas used by the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UsageEvent:
    """One billable assistant usage event extracted from a log record."""

    timestamp: str
    model: str
    input_tokens: int
    output_tokens: int
    cache_create_tokens: int
    cache_read_tokens: int
    fingerprint: str

    @property
    def total_tokens(self) -> int:
        """Return the sum of all four token categories."""
        return self.input_tokens + self.output_tokens + self.cache_create_tokens + self.cache_read_tokens


@dataclass
class RunCounters:
    """Counters collected during one report run."""

    files_scanned: int = 0
    lines_read: int = 0
    malformed_lines: int = 0
    non_usage_records: int = 0
    events_counted: int = 0
    duplicates_skipped: int = 0
    invalid_timestamps: int = 0
