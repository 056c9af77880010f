"""
Sorting for asset lists.

Sort keys use the "<field>-<direction>" form offered by the market list,
e.g. "marketCap-desc" (the default) or "name-asc".
"""

import logging
from typing import Any, Sequence, TypeVar

from crypto_filters.engine.pipeline import field_value

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SORT = "marketCap-desc"

# Sort field -> asset record field
SORT_FIELDS: dict[str, str] = {
    "name": "name",
    "price": "current_price",
    "change24h": "price_change_percentage_24h",
    "marketCap": "market_cap",
    "volume": "total_volume",
}


def _optional_field(record: Any, name: str) -> Any:
    try:
        return field_value(record, name)
    except (KeyError, AttributeError):
        return None


def sort_value(record: Any, field: str) -> Any:
    """
    Comparable value for a record.

    Names compare case-insensitively; numeric fields treat missing or None
    (and zero) as 0.
    """
    if field == "name":
        return str(_optional_field(record, "name") or "").lower()
    return _optional_field(record, SORT_FIELDS[field]) or 0


def parse_sort(sort_by: str) -> tuple[str, bool]:
    """
    Split a sort key into (field, descending).

    Raises:
        ValueError: if the key is not "<field>-<asc|desc>"
    """
    field, sep, direction = sort_by.partition("-")
    if not sep or direction not in ("asc", "desc"):
        raise ValueError(f"Invalid sort key {sort_by!r}, expected '<field>-<asc|desc>'")
    return field, direction == "desc"


def sort_assets(data: Sequence[T], sort_by: str = DEFAULT_SORT) -> list[T]:
    """
    Return a sorted copy of data.

    Unknown fields leave the order unchanged. The sort is stable, so records
    with equal values keep their relative order.
    """
    if not data:
        return list(data)

    field, descending = parse_sort(sort_by)
    if field not in SORT_FIELDS:
        logger.debug(f"Unknown sort field {field!r}, keeping input order")
        return list(data)

    return sorted(data, key=lambda r: sort_value(r, field), reverse=descending)
