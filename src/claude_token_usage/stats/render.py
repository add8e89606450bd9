"""Rendering helpers for daily Claude token usage statistics."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

import orjson
from rich.console import Console
from rich.table import Table

from .schemas import DailyUsageStatistics, UsageStats

TABLE_TITLE = "Claude Code Token Usage – Daily"
TABLE_ROW_STYLES = ["white", "yellow"]
TSV_COLUMNS: tuple[str, ...] = (
    "date",
    "model",
    "input",
    "output",
    "cache_create",
    "cache_read",
    "total_tokens",
    "cost_usd",
)
MONEY_QUANTUM = Decimal("0.000001")


class OutputFormat(str, Enum):
    """Supported report output formats."""

    TABLE = "table"
    JSON = "json"
    TSV = "tsv"


def round_money(value: float) -> float:
    """Round a USD amount to 6 decimals, halves away from zero."""
    return float(_quantize_money(value))


def format_plain_money(value: float) -> str:
    """Format a rounded USD amount in fixed-point notation without trailing zeros, e.g. `0.00005`."""
    return format(_quantize_money(value).normalize(), "f")


def format_money(value: float) -> str:
    """Format a USD amount for display, e.g. `$7.6500`."""
    return f"${round_money(value):,.4f}"


def format_json(report: DailyUsageStatistics) -> str:
    """Return the report as a JSON array of flat (day, model) records."""
    records: list[dict[str, Any]] = [
        {
            "date": row.day.isoformat(),
            "model": row.model,
            "input": row.stats.input_tokens,
            "output": row.stats.output_tokens,
            "cache_create": row.stats.cache_create_tokens,
            "cache_read": row.stats.cache_read_tokens,
            "total_tokens": row.stats.total_tokens,
            "cost_usd": round_money(row.stats.cost),
        }
        for row in report.sorted_rows()
    ]
    return orjson.dumps(records, option=orjson.OPT_INDENT_2).decode()


def format_tsv(report: DailyUsageStatistics) -> str:
    """Return the report as tab-separated lines with a header and no totals row."""
    lines = ["\t".join(TSV_COLUMNS)]
    for row in report.sorted_rows():
        values = [
            row.day.isoformat(),
            row.model,
            *(str(value) for value in _token_values(row.stats)),
            format_plain_money(row.stats.cost),
        ]
        lines.append("\t".join(values))
    return "\n".join(lines)


def render_daily_usage_table(report: DailyUsageStatistics, console: Console) -> None:
    """Render the daily usage table with a totals footer."""
    table = Table(
        title=TABLE_TITLE,
        show_footer=True,
        footer_style="bold",
        title_justify="left",
    )
    table.add_column("Date", footer="TOTAL", justify="left")
    table.add_column("Model", footer="all models", justify="left")
    table.add_column("Input", justify="right")
    table.add_column("Output", justify="right")
    table.add_column("Cache Create", justify="right")
    table.add_column("Cache Read", justify="right")
    table.add_column("Total Tokens", justify="right")
    table.add_column("Cost USD", justify="right")

    last_day = None
    style_index = 0
    for row in report.sorted_rows():
        if last_day is not None and row.day != last_day:
            style_index = (style_index + 1) % len(TABLE_ROW_STYLES)
        last_day = row.day
        table.add_row(
            row.day.isoformat(),
            row.model,
            *_format_usage_columns(row.stats),
            style=TABLE_ROW_STYLES[style_index],
        )

    for column, footer in zip(table.columns[2:], _format_usage_columns(report.totals()), strict=True):
        column.footer = footer

    console.print(table)


def _quantize_money(value: float) -> Decimal:
    return Decimal(repr(value)).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def _format_usage_columns(stats: UsageStats) -> list[str]:
    return [*(f"{value:,}" for value in _token_values(stats)), format_money(stats.cost)]


def _token_values(stats: UsageStats) -> tuple[int, ...]:
    return (
        stats.input_tokens,
        stats.output_tokens,
        stats.cache_create_tokens,
        stats.cache_read_tokens,
        stats.total_tokens,
    )
