"""Custom exceptions for ingestion pipeline failures."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class IngestionError(Exception):
    """Base exception for ingestion errors."""


class LogRootNotFoundError(IngestionError):
    """Raised when none of the configured log roots is an existing directory."""

    def __init__(self, checked_paths: Sequence[Path]) -> None:
        self.checked_paths = tuple(checked_paths)
        checked = "\n".join(f"  - {path}" for path in self.checked_paths)
        super().__init__(f"No Claude projects directories found.\nChecked:\n{checked}")


class LogReadError(IngestionError):
    """Raised when a discovered log file cannot be read."""
