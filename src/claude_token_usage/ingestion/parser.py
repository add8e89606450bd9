"""Extraction of billable usage events from Claude Code log records."""

from __future__ import annotations

import logging
import math
from typing import Any

from .schemas import UsageEvent

LOGGER = logging.getLogger(__name__)
FINGERPRINT_SEPARATOR = "|"
UNKNOWN_MODEL = "unknown"

# (primary, legacy) key pairs inside `message.usage`.
INPUT_TOKEN_KEYS = ("input_tokens", "prompt_tokens")
OUTPUT_TOKEN_KEYS = ("output_tokens", "completion_tokens")
CACHE_CREATE_TOKEN_KEYS = ("cache_creation_input_tokens", "cache_create_input_tokens")
CACHE_READ_TOKEN_KEYS = ("cache_read_input_tokens", "cache_read_tokens")


def extract_usage_event(record: Any) -> UsageEvent | None:
    """Normalize one raw log record into a usage event.

    Assistant lines carry a top-level `timestamp`, `message.model`,
    `message.usage` token counters and the identifiers used for dedupe
    (`requestId`/`sessionId`, `message.id`/`uuid`).

    Returns:
        The usage event, or None when the record is not a billable usage event.
    """
    if not isinstance(record, dict):
        return None

    message = record.get("message")
    if not isinstance(message, dict):
        return None
    usage = message.get("usage")
    if not isinstance(usage, dict):
        return None

    timestamp = record.get("timestamp")
    if not isinstance(timestamp, str):
        LOGGER.debug("Usage line missing top-level timestamp, uuid=%s", record.get("uuid", "?"))
        return None

    raw_model = message.get("model")
    if not isinstance(raw_model, str):
        LOGGER.debug("Usage line missing message.model, uuid=%s", record.get("uuid", "?"))
        return None

    input_tokens = coerce_token_count(_first_present(usage, INPUT_TOKEN_KEYS))
    output_tokens = coerce_token_count(_first_present(usage, OUTPUT_TOKEN_KEYS))
    cache_create_tokens = coerce_token_count(_first_present(usage, CACHE_CREATE_TOKEN_KEYS))
    cache_read_tokens = coerce_token_count(_first_present(usage, CACHE_READ_TOKEN_KEYS))

    if input_tokens == 0 and output_tokens == 0 and cache_create_tokens == 0 and cache_read_tokens == 0:
        return None

    # Thinking/text/tool_use frames of one reply repeat the same ids and usage
    # with different timestamps, so the timestamp stays out of the key.
    fingerprint = FINGERPRINT_SEPARATOR.join(
        [
            _first_non_empty_string(record.get("requestId"), record.get("sessionId")),
            _first_non_empty_string(message.get("id"), record.get("uuid")),
            raw_model,
            str(input_tokens),
            str(output_tokens),
            str(cache_create_tokens),
            str(cache_read_tokens),
        ]
    )

    return UsageEvent(
        timestamp=timestamp,
        model=normalize_model_name(raw_model),
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        cache_create_tokens=cache_create_tokens,
        cache_read_tokens=cache_read_tokens,
        fingerprint=fingerprint,
    )


def coerce_token_count(raw_value: Any) -> int:
    """Coerce a token counter to a non-negative int, defaulting to zero."""
    if isinstance(raw_value, bool):
        return 0
    if isinstance(raw_value, int):
        return max(raw_value, 0)
    if isinstance(raw_value, float):
        return max(int(raw_value), 0) if math.isfinite(raw_value) else 0
    if isinstance(raw_value, str):
        text = raw_value.strip()
        if not text:
            return 0
        try:
            return max(int(text), 0)
        except ValueError:
            pass
        try:
            parsed = float(text)
        except ValueError:
            return 0
        return max(int(parsed), 0) if math.isfinite(parsed) else 0
    return 0


def normalize_model_name(model: str) -> str:
    """Return the trimmed model name, or `unknown` when blank."""
    return model.strip() or UNKNOWN_MODEL


def _first_present(usage: dict[str, Any], keys: tuple[str, ...]) -> Any:
    """Return the first non-null value among `keys`."""
    for key in keys:
        value = usage.get(key)
        if value is not None:
            return value
    return None


def _first_non_empty_string(*candidates: Any) -> str:
    for candidate in candidates:
        if isinstance(candidate, str) and candidate:
            return candidate
    return ""
