"""Tests for log root resolution, discovery, and line streaming."""

from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from claude_token_usage.ingestion.errors import LogReadError, LogRootNotFoundError
from claude_token_usage.ingestion.reader import (
    discover_log_files,
    iter_log_records,
    iter_raw_records,
    resolve_log_roots,
)
from claude_token_usage.ingestion.schemas import RunCounters


def test_resolve_log_roots_drops_missing_and_non_directory_paths(tmp_path: Path) -> None:
    """Only existing directories should remain as log roots."""
    existing = tmp_path / "projects"
    existing.mkdir()
    not_a_dir = tmp_path / "file.jsonl"
    not_a_dir.write_text("{}\n", encoding="utf-8")

    roots = resolve_log_roots([tmp_path / "missing", not_a_dir, existing])

    assert roots == [existing]


def test_resolve_log_roots_raises_with_checked_paths(tmp_path: Path) -> None:
    """An empty root set should fail and name every checked path."""
    missing = tmp_path / "missing"

    with pytest.raises(LogRootNotFoundError) as exc_info:
        resolve_log_roots([missing])

    assert exc_info.value.checked_paths == (missing,)
    assert str(missing) in str(exc_info.value)


def test_discover_log_files_recurses_and_filters_suffix(tmp_path: Path) -> None:
    """Discovery should walk nested directories and keep only `.jsonl` files."""
    nested = tmp_path / "project-a" / "sub"
    nested.mkdir(parents=True)
    (tmp_path / "project-a" / "b.jsonl").write_text("", encoding="utf-8")
    (nested / "a.jsonl").write_text("", encoding="utf-8")
    (nested / "notes.txt").write_text("", encoding="utf-8")
    (tmp_path / "dir.jsonl").mkdir()

    files = list(discover_log_files([tmp_path]))

    assert files == [tmp_path / "project-a" / "b.jsonl", nested / "a.jsonl"]


def test_iter_log_records_skips_blank_and_malformed_lines(tmp_path: Path) -> None:
    """Malformed lines should be skipped and counted without aborting the file."""
    log_file = tmp_path / "session.jsonl"
    log_file.write_bytes(
        b"\n".join(
            [
                orjson.dumps({"n": 1}),
                b"   ",
                b"{not json",
                b"[1, 2]",
                b"  " + orjson.dumps({"n": 2}) + b"  ",
            ]
        )
    )
    counters = RunCounters()

    records = list(iter_log_records(log_file, counters))

    assert records == [{"n": 1}, {"n": 2}]
    assert counters.lines_read == 4
    assert counters.malformed_lines == 2


def test_iter_log_records_wraps_os_errors(tmp_path: Path) -> None:
    """Unreadable files should raise LogReadError."""
    with pytest.raises(LogReadError):
        list(iter_log_records(tmp_path / "missing.jsonl"))


def test_iter_raw_records_chains_files_across_roots(tmp_path: Path) -> None:
    """Records from every root should be streamed one file at a time."""
    first_root = tmp_path / "one"
    second_root = tmp_path / "two"
    first_root.mkdir()
    second_root.mkdir()
    (first_root / "a.jsonl").write_bytes(orjson.dumps({"root": 1}) + b"\n")
    (second_root / "b.jsonl").write_bytes(orjson.dumps({"root": 2}) + b"\n")
    counters = RunCounters()

    records = list(iter_raw_records([first_root, second_root], counters))

    assert records == [{"root": 1}, {"root": 2}]
    assert counters.files_scanned == 2
