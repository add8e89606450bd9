"""Typed schemas used by the stats pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from claude_token_usage.ingestion.schemas import RunCounters


@dataclass
class UsageStats:
    """Accumulates token usage and cost statistics for one (day, model) cell."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_create_tokens: int = 0
    cache_read_tokens: int = 0
    total_tokens: int = 0
    count: int = 0
    cost: float = 0.0

    def __add__(self, other: "UsageStats") -> "UsageStats":
        """Return a new object with summed stats."""
        return UsageStats(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            cache_create_tokens=self.cache_create_tokens + other.cache_create_tokens,
            cache_read_tokens=self.cache_read_tokens + other.cache_read_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
            count=self.count + other.count,
            cost=self.cost + other.cost,
        )

    def __iadd__(self, other: "UsageStats") -> "UsageStats":
        """Mutate this object by adding stats in-place."""
        self.input_tokens += other.input_tokens
        self.output_tokens += other.output_tokens
        self.cache_create_tokens += other.cache_create_tokens
        self.cache_read_tokens += other.cache_read_tokens
        self.total_tokens += other.total_tokens
        self.count += other.count
        self.cost += other.cost
        return self


@dataclass(frozen=True)
class DailyUsageRow:
    """One report row: a (day, model) cell and its stats."""

    day: date
    model: str
    stats: UsageStats


@dataclass(frozen=True)
class DailyUsageStatistics:
    """Aggregated daily usage statistics for one run."""

    usage_by_day_model: dict[tuple[date, str], UsageStats]
    counters: RunCounters = field(default_factory=RunCounters)
    unpriced_models: tuple[str, ...] = ()
    prices_loaded: bool = True

    def sorted_rows(self) -> list[DailyUsageRow]:
        """Return rows sorted by day, then model name."""
        return [
            DailyUsageRow(day=day, model=model, stats=self.usage_by_day_model[(day, model)])
            for day, model in sorted(self.usage_by_day_model)
        ]

    def totals(self) -> UsageStats:
        """Return the column-wise sum of every cell."""
        total = UsageStats()
        for stats in self.usage_by_day_model.values():
            total += stats
        return total
