"""Tiered model price table loading and cost calculation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
import math
from pathlib import Path
from typing import Any, Protocol

import orjson

LOGGER = logging.getLogger(__name__)
DEFAULT_MODEL_KEY = "default"
TOKENS_PER_RATE_UNIT = 1_000_000


class TokenCounts(Protocol):
    """Token counters priced by a tier."""

    input_tokens: int
    output_tokens: int
    cache_create_tokens: int
    cache_read_tokens: int


@dataclass(frozen=True)
class PriceTier:
    """One input-volume range and its per-million-token rates.

    Attributes:
        min_input_tokens_inclusive: Lower bound on input tokens; `None` means unbounded.
        max_input_tokens_exclusive: Upper bound on input tokens; `None` means unbounded.
        input_per_1m: USD per million input tokens.
        output_per_1m: USD per million output tokens.
        cache_create_per_1m: USD per million cache-creation tokens.
        cache_read_per_1m: USD per million cache-read tokens.
    """

    min_input_tokens_inclusive: float | None = None
    max_input_tokens_exclusive: float | None = None
    input_per_1m: float = 0.0
    output_per_1m: float = 0.0
    cache_create_per_1m: float = 0.0
    cache_read_per_1m: float = 0.0

    def admits(self, input_tokens: int) -> bool:
        """Return True when `input_tokens` falls inside this tier's bounds."""
        if self.min_input_tokens_inclusive is not None and not input_tokens >= self.min_input_tokens_inclusive:
            return False
        if self.max_input_tokens_exclusive is not None and not input_tokens < self.max_input_tokens_exclusive:
            return False
        return True


@dataclass(frozen=True)
class PriceTable:
    """Immutable mapping of model name to its ordered tier list."""

    tiers_by_model: Mapping[str, tuple[PriceTier, ...]] = field(default_factory=dict)

    def resolve(self, model: str, input_tokens: int) -> PriceTier | None:
        """Pick the tier that prices `input_tokens` for `model`.

        The model's own entry wins over `default`. Within a list, the first tier
        whose bounds admit the input count is used, falling back to the first
        tier when none does.
        """
        tiers = self.tiers_by_model.get(model)
        if tiers is None:
            tiers = self.tiers_by_model.get(DEFAULT_MODEL_KEY)
        if not tiers:
            return None

        for tier in tiers:
            if tier.admits(input_tokens):
                return tier
        # TODO: decide whether an out-of-range input count should be unpriced instead of using tiers[0].
        return tiers[0]

    def __contains__(self, model: object) -> bool:
        return model in self.tiers_by_model


def calculate_event_cost(tokens: TokenCounts, tier: PriceTier) -> float:
    """Calculate USD cost for one event priced by `tier`."""
    return (
        (tokens.input_tokens * tier.input_per_1m) / TOKENS_PER_RATE_UNIT
        + (tokens.output_tokens * tier.output_per_1m) / TOKENS_PER_RATE_UNIT
        + (tokens.cache_create_tokens * tier.cache_create_per_1m) / TOKENS_PER_RATE_UNIT
        + (tokens.cache_read_tokens * tier.cache_read_per_1m) / TOKENS_PER_RATE_UNIT
    )


def load_price_table(prices_path: Path) -> PriceTable | None:
    """Load a price table from JSON.

    Expected shape::

        {
          "default": {"tiers": [{"input_per_1m": 3, "output_per_1m": 15, ...}]},
          "<model>": {"tiers": [{"max_input_tokens_exclusive": 200000, ...}, ...]}
        }

    Returns:
        The parsed table, or None when the file is missing, unreadable or not a JSON object.
    """
    try:
        with prices_path.open("rb") as handle:
            raw = orjson.loads(handle.read())
    except (OSError, orjson.JSONDecodeError) as exc:
        LOGGER.debug("Failed reading price table at %s: %s", prices_path, exc)
        return None

    if not isinstance(raw, dict):
        LOGGER.debug("Price table at %s is not a JSON object.", prices_path)
        return None

    return parse_price_table(raw)


def parse_price_table(raw: Mapping[str, Any]) -> PriceTable:
    """Build a price table from an already decoded JSON object.

    Null, false, zero and empty-string entries are left out so those models use `default`.
    """
    return PriceTable(
        tiers_by_model={str(model): _parse_tiers(entry) for model, entry in raw.items() if not _is_blank_entry(entry)}
    )


def _is_blank_entry(entry: Any) -> bool:
    if entry is None or entry == "":
        return True
    return isinstance(entry, (int, float)) and not entry


def _parse_tiers(entry: Any) -> tuple[PriceTier, ...]:
    """Parse a model entry; anything without a `tiers` list yields no tiers."""
    if not isinstance(entry, dict):
        return ()
    raw_tiers = entry.get("tiers")
    if not isinstance(raw_tiers, list):
        return ()
    return tuple(_parse_tier(raw_tier) for raw_tier in raw_tiers if isinstance(raw_tier, dict))


def _parse_tier(raw_tier: dict[str, Any]) -> PriceTier:
    return PriceTier(
        min_input_tokens_inclusive=_parse_bound(raw_tier.get("min_input_tokens_inclusive")),
        max_input_tokens_exclusive=_parse_bound(raw_tier.get("max_input_tokens_exclusive")),
        input_per_1m=_parse_rate(raw_tier.get("input_per_1m")),
        output_per_1m=_parse_rate(raw_tier.get("output_per_1m")),
        cache_create_per_1m=_parse_rate(raw_tier.get("cache_create_per_1m")),
        cache_read_per_1m=_parse_rate(raw_tier.get("cache_read_per_1m")),
    )


def _parse_bound(raw_value: Any) -> float | None:
    """Parse a tier bound; unparseable bounds become NaN so the tier never admits."""
    if raw_value is None:
        return None
    parsed = _to_float(raw_value)
    return math.nan if parsed is None else parsed


def _parse_rate(raw_value: Any) -> float:
    """Parse a per-million rate, defaulting to zero."""
    parsed = _to_float(raw_value)
    if parsed is None or not math.isfinite(parsed):
        return 0.0
    return parsed


def _to_float(raw_value: Any) -> float | None:
    if isinstance(raw_value, bool):
        return None
    if isinstance(raw_value, (int, float)):
        return float(raw_value)
    if isinstance(raw_value, str):
        try:
            return float(raw_value)
        except ValueError:
            return None
    return None
