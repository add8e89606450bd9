"""Unit tests for report rendering."""

from __future__ import annotations

from datetime import date

import orjson
import pytest
from rich.console import Console

from claude_token_usage.stats.render import (
    format_json,
    format_money,
    format_tsv,
    render_daily_usage_table,
    round_money,
)
from claude_token_usage.stats.schemas import DailyUsageStatistics, UsageStats


def test_format_json_emits_sorted_flat_records() -> None:
    """JSON output should be sorted by day then model with costs rounded to 6 decimals."""
    output = orjson.loads(format_json(_report()))

    assert [(item["date"], item["model"]) for item in output] == [
        ("2026-02-15", "claude-haiku"),
        ("2026-02-15", "claude-sonnet"),
        ("2026-02-16", "claude-haiku"),
    ]
    assert output[1] == {
        "date": "2026-02-15",
        "model": "claude-sonnet",
        "input": 2_000_000,
        "output": 100_000,
        "cache_create": 0,
        "cache_read": 500_000,
        "total_tokens": 2_600_000,
        "cost_usd": 7.65,
    }
    assert output[0]["cost_usd"] == 0.123457


def test_format_tsv_has_header_and_no_totals_row() -> None:
    """TSV output should contain a header and one tab-separated line per cell."""
    lines = format_tsv(_report()).splitlines()

    assert lines[0] == "date\tmodel\tinput\toutput\tcache_create\tcache_read\ttotal_tokens\tcost_usd"
    assert lines[2] == "2026-02-15\tclaude-sonnet\t2000000\t100000\t0\t500000\t2600000\t7.65"
    assert len(lines) == 4
    assert not any(line.startswith("TOTAL") for line in lines)


def test_render_daily_usage_table_includes_totals_footer() -> None:
    """The table should end with a TOTAL row summing every numeric column."""
    console = Console(record=True, width=220)

    render_daily_usage_table(_report(), console)

    output = console.export_text()
    assert "Claude Code Token Usage – Daily" in output
    assert "claude-sonnet" in output
    assert "2,000,000" in output
    assert "$7.6500" in output
    total_line = next(line for line in output.splitlines() if "TOTAL" in line)
    assert "all models" in total_line
    assert "2,000,300" in total_line
    assert "2,601,000" in total_line
    assert "$7.8235" in total_line


def test_render_daily_usage_table_prints_zero_totals_for_empty_report() -> None:
    """An empty report should still render the header and a zero TOTAL row."""
    console = Console(record=True, width=220)

    render_daily_usage_table(DailyUsageStatistics(usage_by_day_model={}), console)

    output = console.export_text()
    assert "Cache Create" in output
    total_line = next(line for line in output.splitlines() if "TOTAL" in line)
    assert "all models" in total_line
    assert "$0.0000" in total_line


def test_format_tsv_keeps_small_costs_in_fixed_point() -> None:
    """Small costs should not switch to scientific notation in TSV output."""
    report = DailyUsageStatistics(
        usage_by_day_model={
            (date(2026, 2, 15), "claude-haiku"): UsageStats(input_tokens=10, total_tokens=10, count=1, cost=0.00005),
            (date(2026, 2, 16), "claude-haiku"): UsageStats(input_tokens=10, total_tokens=10, count=1, cost=0.0),
            (date(2026, 2, 17), "claude-haiku"): UsageStats(input_tokens=10, total_tokens=10, count=1, cost=100.0),
        }
    )

    costs = [line.split("\t")[-1] for line in format_tsv(report).splitlines()[1:]]

    assert costs == ["0.00005", "0", "100"]


def test_totals_equal_column_sums() -> None:
    """The totals cell should be the column-wise sum of every cell."""
    report = _report()

    totals = report.totals()

    cells = list(report.usage_by_day_model.values())
    assert totals.input_tokens == sum(cell.input_tokens for cell in cells)
    assert totals.output_tokens == sum(cell.output_tokens for cell in cells)
    assert totals.cache_create_tokens == sum(cell.cache_create_tokens for cell in cells)
    assert totals.cache_read_tokens == sum(cell.cache_read_tokens for cell in cells)
    assert totals.total_tokens == sum(cell.total_tokens for cell in cells)
    assert totals.cost == pytest.approx(sum(cell.cost for cell in cells))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0.0000005, 0.000001),
        (-0.0000005, -0.000001),
        (0.1234564, 0.123456),
        (7.65, 7.65),
    ],
)
def test_round_money_rounds_half_away_from_zero(value: float, expected: float) -> None:
    """Money rounding should round halves away from zero at the sixth decimal."""
    assert round_money(value) == expected


def test_format_money_uses_four_decimals() -> None:
    """Display costs should use a dollar sign and four decimals."""
    assert format_money(7.65) == "$7.6500"
    assert format_money(0) == "$0.0000"
    assert format_money(1234.56789) == "$1,234.5679"


def _report() -> DailyUsageStatistics:
    """Build a small report for tests."""
    return DailyUsageStatistics(
        usage_by_day_model={
            (date(2026, 2, 16), "claude-haiku"): UsageStats(
                input_tokens=100,
                output_tokens=50,
                cache_create_tokens=0,
                cache_read_tokens=0,
                total_tokens=150,
                count=1,
                cost=0.05,
            ),
            (date(2026, 2, 15), "claude-sonnet"): UsageStats(
                input_tokens=2_000_000,
                output_tokens=100_000,
                cache_create_tokens=0,
                cache_read_tokens=500_000,
                total_tokens=2_600_000,
                count=1,
                cost=7.65,
            ),
            (date(2026, 2, 15), "claude-haiku"): UsageStats(
                input_tokens=200,
                output_tokens=400,
                cache_create_tokens=250,
                cache_read_tokens=0,
                total_tokens=850,
                count=2,
                cost=0.1234567,
            ),
        }
    )
