"""Discovery and line streaming for Claude Code JSONL logs."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import orjson

from .errors import LogReadError, LogRootNotFoundError
from .schemas import RunCounters

LOGGER = logging.getLogger(__name__)
LOG_FILE_SUFFIX = ".jsonl"


def resolve_log_roots(candidates: Iterable[Path]) -> list[Path]:
    """Return the candidates that are existing directories.

    Raises:
        LogRootNotFoundError: If no candidate is a directory.
    """
    checked = list(candidates)
    roots = [path for path in checked if path.is_dir()]
    if not roots:
        raise LogRootNotFoundError(checked)
    return roots


def discover_log_files(roots: Iterable[Path]) -> Iterator[Path]:
    """Yield JSONL log files under each root, recursively, in sorted path order per root."""
    for root in roots:
        yield from sorted(path for path in root.rglob(f"*{LOG_FILE_SUFFIX}") if path.is_file())


def iter_log_records(log_file_path: Path, counters: RunCounters | None = None) -> Iterator[dict[str, Any]]:
    """Yield decoded JSON objects from one log file, skipping blank and malformed lines."""
    try:
        with log_file_path.open("rb") as handle:
            for line_number, raw_line in enumerate(handle, start=1):
                line = raw_line.strip()
                if not line:
                    continue
                if counters is not None:
                    counters.lines_read += 1
                try:
                    record = orjson.loads(line)
                except orjson.JSONDecodeError as exc:
                    _count_malformed(counters)
                    LOGGER.debug("Bad JSON in %s at line %d: %s", log_file_path, line_number, exc)
                    continue
                if not isinstance(record, dict):
                    _count_malformed(counters)
                    LOGGER.debug(
                        "Expected JSON object in %s at line %d, got %s.",
                        log_file_path,
                        line_number,
                        type(record).__name__,
                    )
                    continue
                yield record
    except OSError as exc:
        raise LogReadError(f"Failed reading {log_file_path}: {exc}") from exc


def iter_raw_records(roots: Iterable[Path], counters: RunCounters | None = None) -> Iterator[dict[str, Any]]:
    """Yield raw records from every discovered log file, one file at a time."""
    for log_file_path in discover_log_files(roots):
        if counters is not None:
            counters.files_scanned += 1
        yield from iter_log_records(log_file_path, counters)


def _count_malformed(counters: RunCounters | None) -> None:
    if counters is not None:
        counters.malformed_lines += 1
