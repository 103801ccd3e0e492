"""Aggregation queries package."""

from spendwise.queries.aggregation import (
    ChartSlice,
    SpendingSummary,
    aggregate,
    build_chart_slices,
    grand_total,
    summarize,
)

__all__ = [
    "ChartSlice",
    "SpendingSummary",
    "aggregate",
    "build_chart_slices",
    "grand_total",
    "summarize",
]
