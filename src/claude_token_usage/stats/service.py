"""Aggregation service for daily Claude token usage statistics."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, date, datetime
import logging
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from model_pricing import PriceTable, calculate_event_cost

from claude_token_usage.ingestion.dedupe import Deduplicator
from claude_token_usage.ingestion.parser import extract_usage_event
from claude_token_usage.ingestion.reader import iter_raw_records
from claude_token_usage.ingestion.schemas import RunCounters, UsageEvent

from .schemas import DailyUsageStatistics, UsageStats

LOGGER = logging.getLogger(__name__)


class UsageAggregator:
    """Folds priced usage events into a (day, model) grid of running sums."""

    def __init__(self) -> None:
        self._cells: dict[tuple[date, str], UsageStats] = {}

    def fold(self, day: date, model: str, event: UsageEvent, cost: float) -> None:
        """Add one event and its cost to the (day, model) cell."""
        cell = self._cells.get((day, model))
        if cell is None:
            cell = self._cells[(day, model)] = UsageStats()
        cell.input_tokens += event.input_tokens
        cell.output_tokens += event.output_tokens
        cell.cache_create_tokens += event.cache_create_tokens
        cell.cache_read_tokens += event.cache_read_tokens
        cell.total_tokens += event.total_tokens
        cell.cost += cost
        cell.count += 1

    def snapshot(self) -> dict[tuple[date, str], UsageStats]:
        """Return a copy of the grid for reporting."""
        return {key: stats + UsageStats() for key, stats in self._cells.items()}


class PricingLedger:
    """Tracks which models were priced during one run."""

    def __init__(self) -> None:
        self._priced: set[str] = set()
        self._unpriced: set[str] = set()

    def record(self, model: str, priced: bool) -> None:
        (self._priced if priced else self._unpriced).add(model)

    def unpriced_models(self) -> tuple[str, ...]:
        """Return models for which no event resolved a tier, sorted."""
        return tuple(sorted(self._unpriced - self._priced))


class UsageReportService:
    """Collect daily usage and cost statistics from Claude Code JSONL logs."""

    def __init__(self, price_table: PriceTable | None, timezone: ZoneInfo | None = None) -> None:
        self._price_table = price_table
        self._timezone = timezone

    def collect_daily_statistics(self, log_roots: Iterable[Path]) -> DailyUsageStatistics:
        """Aggregate token usage and costs by day and model over every log file."""
        counters = RunCounters()
        return self.collect_daily_statistics_from_records(iter_raw_records(log_roots, counters), counters)

    def collect_daily_statistics_from_records(
        self,
        records: Iterable[Any],
        counters: RunCounters | None = None,
    ) -> DailyUsageStatistics:
        """Aggregate token usage and costs from already decoded records."""
        counters = counters if counters is not None else RunCounters()
        deduplicator = Deduplicator()
        aggregator = UsageAggregator()
        ledger = PricingLedger()

        for record in records:
            event = extract_usage_event(record)
            if event is None:
                counters.non_usage_records += 1
                continue

            if not deduplicator.admit(event):
                continue

            event_day = resolve_event_day(event.timestamp, self._timezone)
            if event_day is None:
                counters.invalid_timestamps += 1
                continue

            tier = self._price_table.resolve(event.model, event.input_tokens) if self._price_table else None
            cost = calculate_event_cost(event, tier) if tier is not None else 0.0
            ledger.record(event.model, priced=tier is not None)

            aggregator.fold(event_day, event.model, event, cost)
            counters.events_counted += 1

        counters.duplicates_skipped = deduplicator.duplicates_skipped
        LOGGER.debug("counted=%d, skipped_dupes=%d", counters.events_counted, counters.duplicates_skipped)
        LOGGER.debug(
            "files_scanned=%d, lines_read=%d, malformed_lines=%d, non_usage_records=%d, invalid_timestamps=%d",
            counters.files_scanned,
            counters.lines_read,
            counters.malformed_lines,
            counters.non_usage_records,
            counters.invalid_timestamps,
        )

        return DailyUsageStatistics(
            usage_by_day_model=aggregator.snapshot(),
            counters=counters,
            unpriced_models=ledger.unpriced_models(),
            prices_loaded=self._price_table is not None,
        )


def resolve_event_day(timestamp: str, timezone: ZoneInfo | None) -> date | None:
    """Resolve the calendar day of a timestamp in the selected timezone (or local system timezone)."""
    event_timestamp = _parse_timestamp(timestamp)
    if event_timestamp is None:
        return None
    try:
        return event_timestamp.astimezone(timezone).date()
    except (OverflowError, ValueError) as exc:
        LOGGER.debug("Timestamp out of range after timezone conversion: %s (%s)", timestamp, exc)
        return None


def _parse_timestamp(raw_value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp into an aware datetime; naive values are UTC."""
    normalized = raw_value.strip().replace("Z", "+00:00")
    if not normalized:
        return None
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        LOGGER.debug("Invalid timestamp format: %s", raw_value)
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
