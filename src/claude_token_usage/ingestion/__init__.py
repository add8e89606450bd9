"""Log reading, usage extraction, and deduplication."""

from .dedupe import Deduplicator
from .parser import extract_usage_event

__all__ = ["Deduplicator", "extract_usage_event"]
