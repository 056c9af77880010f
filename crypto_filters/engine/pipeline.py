"""
Filter pipeline for the crypto filter engine.

apply_filters runs an ordered sequence of narrowing stages. Each stage only
runs if its dimension is enabled and only sees the output of the previous
stage, so the result is a cumulative intersection. Order matters: the
high-volume quick filter computes its percentile over the already-filtered
candidate set, not the raw dataset.

All functions are pure. Records are never copied or modified, and the input
list is never mutated.
"""

import math
from collections.abc import Mapping
from typing import Any, Callable, Optional, Sequence, TypeVar

from crypto_filters.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from crypto_filters.models import ChangeType, FilterModel, MarketCapCategory

T = TypeVar("T")

Stage = Callable[[list, FilterModel, EngineConfig], list]


def field_value(record: Any, name: str) -> Any:
    """Read a field from a mapping (raw JSON) or an object (MarketAsset)."""
    if isinstance(record, Mapping):
        return record[name]
    return getattr(record, name)


def _within(value: float, min_value: Optional[float], max_value: Optional[float]) -> bool:
    # Inclusive on both ends; an unset bound does not constrain
    if min_value is not None and value < min_value:
        return False
    if max_value is not None and value > max_value:
        return False
    return True


# =============================================================================
# Stages
# =============================================================================


def price_stage(candidates: list, model: FilterModel, config: EngineConfig) -> list:
    """Inclusive range on current_price."""
    price = model.price
    if not price.enabled:
        return candidates
    return [
        r for r in candidates if _within(field_value(r, "current_price"), price.min, price.max)
    ]


def market_cap_stage(candidates: list, model: FilterModel, config: EngineConfig) -> list:
    """Fixed bands for small/mid/large; inclusive range for custom."""
    market_cap = model.market_cap
    if not market_cap.enabled:
        return candidates

    category = market_cap.category
    if category == MarketCapCategory.SMALL:
        return [r for r in candidates if field_value(r, "market_cap") < config.small_cap_ceiling]
    if category == MarketCapCategory.MID:
        return [
            r
            for r in candidates
            if config.small_cap_ceiling <= field_value(r, "market_cap") < config.large_cap_floor
        ]
    if category == MarketCapCategory.LARGE:
        return [r for r in candidates if field_value(r, "market_cap") >= config.large_cap_floor]
    if category == MarketCapCategory.CUSTOM:
        return [
            r
            for r in candidates
            if _within(field_value(r, "market_cap"), market_cap.min, market_cap.max)
        ]

    # No category: enabled but unconstrained
    return candidates


def volume_stage(candidates: list, model: FilterModel, config: EngineConfig) -> list:
    """Inclusive range on total_volume."""
    volume = model.volume
    if not volume.enabled:
        return candidates
    return [
        r for r in candidates if _within(field_value(r, "total_volume"), volume.min, volume.max)
    ]


def change_24h_stage(candidates: list, model: FilterModel, config: EngineConfig) -> list:
    """Strict sign for gainers/losers; inclusive range for custom."""
    change = model.change_24h
    if not change.enabled:
        return candidates

    if change.type == ChangeType.GAINERS:
        return [r for r in candidates if field_value(r, "price_change_percentage_24h") > 0]
    if change.type == ChangeType.LOSERS:
        return [r for r in candidates if field_value(r, "price_change_percentage_24h") < 0]
    if change.type == ChangeType.CUSTOM:
        return [
            r
            for r in candidates
            if _within(field_value(r, "price_change_percentage_24h"), change.min, change.max)
        ]

    return candidates


def ranking_stage(candidates: list, model: FilterModel, config: EngineConfig) -> list:
    """Keep market_cap_rank <= topN (config.default_top_n when topN is unset)."""
    ranking = model.ranking
    if not ranking.enabled:
        return candidates
    top_n = ranking.top_n if ranking.top_n is not None else config.default_top_n
    return [r for r in candidates if field_value(r, "market_cap_rank") <= top_n]


def high_volume_stage(candidates: list, model: FilterModel, config: EngineConfig) -> list:
    """
    Keep the top fraction of the current candidate set by total_volume.

    The cutoff is by count: the volume of the record at index
    ceil(n * fraction) - 1 of a descending sort. Ties at the cutoff are kept,
    so the result can hold more than ceil(n * fraction) records.
    """
    if not model.quick_filters.high_volume:
        return candidates

    by_volume = sorted(candidates, key=lambda r: field_value(r, "total_volume"), reverse=True)
    threshold_index = math.ceil(len(by_volume) * config.high_volume_fraction) - 1
    threshold = field_value(by_volume[threshold_index], "total_volume") if by_volume else 0

    return [r for r in candidates if field_value(r, "total_volume") >= threshold]


# Pipeline order. trending / recentlyAdded have no stage: the asset record
# carries no signal for them.
STAGES: tuple[Stage, ...] = (
    price_stage,
    market_cap_stage,
    volume_stage,
    change_24h_stage,
    ranking_stage,
    high_volume_stage,
)


# =============================================================================
# Entry Point
# =============================================================================


def apply_filters(
    model: FilterModel,
    data: Sequence[T],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[T]:
    """
    Apply a filter model to a list of assets.

    Args:
        model: Filter configuration
        data: Asset records (mappings or objects) carrying current_price,
            market_cap, total_volume, price_change_percentage_24h and
            market_cap_rank; any other fields are ignored and kept
        config: Engine thresholds

    Returns:
        New list of the records that pass every enabled stage, in input order
    """
    candidates = list(data)
    for stage in STAGES:
        if not candidates:
            break
        candidates = stage(candidates, model, config)
    return candidates
