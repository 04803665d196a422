"""Core search logic: multi-marketplace aggregation and pagination."""

from .aggregator import (
    LuxuryBagsAggregator,
    count_pages,
    dedupe_items,
    paginate,
    sort_items,
)

__all__ = [
    "LuxuryBagsAggregator",
    "count_pages",
    "dedupe_items",
    "paginate",
    "sort_items",
]
