"""Shared model pricing utilities."""

from .price_table import (
    DEFAULT_MODEL_KEY,
    PriceTable,
    PriceTier,
    calculate_event_cost,
    load_price_table,
    parse_price_table,
)

__all__ = [
    "DEFAULT_MODEL_KEY",
    "PriceTable",
    "PriceTier",
    "calculate_event_cost",
    "load_price_table",
    "parse_price_table",
]
