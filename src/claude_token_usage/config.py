"""Run configuration for the usage report."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from zoneinfo import ZoneInfo

from .stats.render import OutputFormat

DEFAULT_PROJECTS_DIR = Path("claude-config/.claude/projects")
DEFAULT_PRICES_FILE = Path("scripts/vertex-claude-prices.json")
DEBUG_ENV_VAR = "DEBUG"


@dataclass(frozen=True)
class UsageReportConfig:
    """Resolved settings for one report run.

    Attributes:
        log_roots: Candidate directories holding Claude Code JSONL logs.
        prices_path: Location of the tiered price table.
        output_format: Report format written to stdout.
        timezone: Timezone used for day buckets; `None` means local system time.
        debug: Whether per-line diagnostics and run counters are logged.
    """

    log_roots: tuple[Path, ...]
    prices_path: Path
    output_format: OutputFormat = OutputFormat.TABLE
    timezone: ZoneInfo | None = None
    debug: bool = False


def default_log_roots() -> list[Path]:
    """Return the conventional log root, resolved against the working directory."""
    return [DEFAULT_PROJECTS_DIR.resolve()]


def debug_enabled_from_env() -> bool:
    """Return True only when `DEBUG` is exactly `1`; any other value leaves diagnostics off."""
    return os.environ.get(DEBUG_ENV_VAR) == "1"


def parse_roots(value: str | None) -> list[Path]:
    """Split an `os.pathsep`-separated list of log roots; empty input yields the default root."""
    if not value:
        return default_log_roots()
    roots = [Path(part.strip()).expanduser().resolve() for part in value.split(os.pathsep) if part.strip()]
    return roots or default_log_roots()


def parse_timezone(timezone: str | None) -> ZoneInfo | None:
    """Parse an IANA timezone name.

    Raises:
        ValueError: If the name is not a known timezone.
    """
    if timezone is None:
        return None
    try:
        return ZoneInfo(timezone)
    except Exception as exc:
        raise ValueError(f"Invalid timezone: {timezone}.") from exc
