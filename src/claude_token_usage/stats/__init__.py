"""Aggregation and rendering of daily usage statistics."""
