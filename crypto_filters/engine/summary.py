"""
Derived summaries of a filter model.

count_active and has_active agree by construction: has_active(m) is
exactly count_active(m) > 0, but short-circuits on the first "on" dimension.
"""

from crypto_filters.models import FilterModel


def count_active(model: FilterModel) -> int:
    """
    Count the "on" dimensions.

    Each enabled dimension counts once and each true quick filter counts
    once on its own (trending, recentlyAdded and highVolume are separate).
    """
    count = 0
    if model.price.enabled:
        count += 1
    if model.market_cap.enabled:
        count += 1
    if model.volume.enabled:
        count += 1
    if model.change_24h.enabled:
        count += 1
    if model.ranking.enabled:
        count += 1
    if model.quick_filters.trending:
        count += 1
    if model.quick_filters.recently_added:
        count += 1
    if model.quick_filters.high_volume:
        count += 1
    return count


def has_active(model: FilterModel) -> bool:
    """True if any dimension or quick filter is on."""
    if model.price.enabled:
        return True
    if model.market_cap.enabled:
        return True
    if model.volume.enabled:
        return True
    if model.change_24h.enabled:
        return True
    if model.ranking.enabled:
        return True
    if model.quick_filters.trending:
        return True
    if model.quick_filters.recently_added:
        return True
    if model.quick_filters.high_volume:
        return True
    return False


def active_dimensions(model: FilterModel) -> list[str]:
    """Names (as persisted) of the "on" dimensions and quick filters, in pipeline order."""
    flags = [
        ("price", model.price.enabled),
        ("marketCap", model.market_cap.enabled),
        ("volume", model.volume.enabled),
        ("change24h", model.change_24h.enabled),
        ("ranking", model.ranking.enabled),
        ("trending", model.quick_filters.trending),
        ("recentlyAdded", model.quick_filters.recently_added),
        ("highVolume", model.quick_filters.high_volume),
    ]
    return [name for name, on in flags if on]
