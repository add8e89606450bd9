"""CLI entrypoints for Claude token usage reports."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from model_pricing import load_price_table

from .config import DEFAULT_PRICES_FILE, UsageReportConfig, debug_enabled_from_env, parse_roots, parse_timezone
from .ingestion.errors import LogReadError, LogRootNotFoundError
from .ingestion.reader import resolve_log_roots
from .stats.render import OutputFormat, format_json, format_tsv, render_daily_usage_table
from .stats.schemas import DailyUsageStatistics
from .stats.service import UsageReportService

LOGGER = logging.getLogger(__name__)

TYPER_APP = typer.Typer(help="Claude Code token usage tooling.")


@TYPER_APP.callback()
def main() -> None:
    """Root CLI callback."""


@TYPER_APP.command("report")
def report_command(
    projects_dir: str | None = typer.Option(
        None,
        "--projects-dir",
        "-p",
        envvar="CLAUDE_PROJECTS_DIR",
        help="Colon-separated Claude projects directories to scan recursively for JSONL logs.",
    ),
    prices_file: Path = typer.Option(
        DEFAULT_PRICES_FILE,
        "--prices-file",
        envvar="PRICES_FILE",
        help="JSON price table with per-model tiers.",
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.TABLE,
        "--output",
        "-o",
        envvar="OUTPUT",
        case_sensitive=False,
        help="Output format.",
    ),
    timezone: str | None = typer.Option(
        None,
        "--timezone",
        "-tz",
        help="Timezone to use for daily stats (e.g., 'UTC', 'America/New_York'). Defaults to local system time.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Log skipped lines and run counters to stderr (also enabled by DEBUG=1).",
    ),
) -> None:
    """Aggregate and print daily token usage and costs per model."""
    debug = debug or debug_enabled_from_env()
    _configure_logging(debug)
    try:
        resolved_timezone = parse_timezone(timezone)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    config = UsageReportConfig(
        log_roots=tuple(parse_roots(projects_dir)),
        prices_path=prices_file,
        output_format=output,
        timezone=resolved_timezone,
        debug=debug,
    )

    try:
        log_roots = resolve_log_roots(config.log_roots)
    except LogRootNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    price_table = load_price_table(config.prices_path)
    if price_table is None:
        LOGGER.warning('Could not read prices file at "%s". Cost will be 0.', config.prices_path)

    service = UsageReportService(price_table=price_table, timezone=config.timezone)
    try:
        report = service.collect_daily_statistics(log_roots)
    except LogReadError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    _warn_unpriced_models(report)
    _emit_report(report, config.output_format)


def _configure_logging(debug: bool) -> None:
    """Initialize default logging for CLI usage."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="[%(asctime)s][%(levelname)s][%(name)s] %(message)s",
    )


def _warn_unpriced_models(report: DailyUsageStatistics) -> None:
    """Log one warning listing every model reported at zero cost for lack of pricing."""
    if not report.unpriced_models:
        return
    listing = "\n".join(f"  - {model}" for model in report.unpriced_models)
    LOGGER.warning(
        "Missing pricing for %d model(s). Costs for these models are shown as $0.0000:\n%s\n"
        'Fix: add model keys to the prices file (or add a "default" tier).',
        len(report.unpriced_models),
        listing,
    )


def _emit_report(report: DailyUsageStatistics, output_format: OutputFormat) -> None:
    """Write the report to stdout in the selected format."""
    if output_format is OutputFormat.JSON:
        typer.echo(format_json(report))
    elif output_format is OutputFormat.TSV:
        typer.echo(format_tsv(report))
    else:
        render_daily_usage_table(report, Console())


def module_cli_entry_point():
    TYPER_APP()
