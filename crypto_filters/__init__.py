"""
Crypto filter engine.

Holds a user's multi-criteria filter preferences, persists them, and
evaluates them against lists of market assets. This package re-exports the
facade used by UI consumers: the store, its persistence, and the engine.
"""

from crypto_filters.engine import (
    active_dimensions,
    apply_filters,
    count_active,
    has_active,
    sort_assets,
)
from crypto_filters.filter_store import FilterStore, FilterStoreState
from crypto_filters.models import (
    DEFAULT_MODEL,
    ChangeFilter,
    ChangeType,
    FilterModel,
    MarketAsset,
    MarketCapCategory,
    MarketCapFilter,
    QuickFilterName,
    QuickFilters,
    RangeFilter,
    RankingFilter,
)
from crypto_filters.persistence import FilterPersistence
from crypto_filters.storage import FileKeyValueStore, InMemoryKeyValueStore, KeyValueStore

__all__ = [
    # Model
    "DEFAULT_MODEL",
    "FilterModel",
    "RangeFilter",
    "MarketCapFilter",
    "ChangeFilter",
    "RankingFilter",
    "QuickFilters",
    "MarketCapCategory",
    "ChangeType",
    "QuickFilterName",
    "MarketAsset",
    # Persistence
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "FileKeyValueStore",
    "FilterPersistence",
    # Store
    "FilterStore",
    "FilterStoreState",
    # Engine
    "apply_filters",
    "count_active",
    "has_active",
    "active_dimensions",
    "sort_assets",
]
