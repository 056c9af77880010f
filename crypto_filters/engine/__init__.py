"""
Engine module for the crypto filter engine.

Contains pure functions for filter evaluation, derived summaries and sorting.
"""

from crypto_filters.engine.pipeline import STAGES, apply_filters, field_value
from crypto_filters.engine.sorting import DEFAULT_SORT, sort_assets
from crypto_filters.engine.summary import active_dimensions, count_active, has_active

__all__ = [
    # Pipeline
    "STAGES",
    "apply_filters",
    "field_value",
    # Summaries
    "count_active",
    "has_active",
    "active_dimensions",
    # Sorting
    "DEFAULT_SORT",
    "sort_assets",
]
