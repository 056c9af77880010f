"""
Pydantic models for the crypto filter engine.

This module contains the filter model (one sub-model per filter dimension),
the minimal market asset record consumed by the engine, and the API
request/response bodies. Models handle validation and serialization only -
no filtering logic.

Filter models are frozen: every update produces a new FilterModel via
model_copy(update=...), so consumers can diff snapshots by reference.
JSON uses the camelCase names of the persisted layout (marketCap, change24h,
topN, quickFilters, ...); Python attributes are snake_case. Both are
accepted on input.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================


class MarketCapCategory(str, Enum):
    """Market capitalisation bands. CUSTOM uses the min/max range instead."""

    SMALL = "small"  # < $1B
    MID = "mid"  # $1B - $10B
    LARGE = "large"  # >= $10B
    CUSTOM = "custom"


class ChangeType(str, Enum):
    """24h price change selection. CUSTOM uses the min/max range instead."""

    GAINERS = "gainers"
    LOSERS = "losers"
    CUSTOM = "custom"


class QuickFilterName(str, Enum):
    """Boolean, non-parameterised filter toggles."""

    TRENDING = "trending"
    RECENTLY_ADDED = "recentlyAdded"
    HIGH_VOLUME = "highVolume"


TopN = Literal[10, 50, 100, 500]


# =============================================================================
# Filter Dimensions
# =============================================================================


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class RangeFilter(_FrozenModel):
    """
    Inclusive numeric range (price on current_price, volume on total_volume).

    For these dimensions "enabled" is derived from the presence of a bound;
    use from_bounds() rather than setting it by hand.
    """

    enabled: bool = False
    min: Optional[float] = Field(None, description="Inclusive lower bound")
    max: Optional[float] = Field(None, description="Inclusive upper bound")

    @classmethod
    def from_bounds(
        cls, min: Optional[float] = None, max: Optional[float] = None
    ) -> "RangeFilter":
        return cls(enabled=min is not None or max is not None, min=min, max=max)


class MarketCapFilter(_FrozenModel):
    """Market cap band, or an inclusive custom range when category is CUSTOM."""

    enabled: bool = False
    category: Optional[MarketCapCategory] = None
    min: Optional[float] = None
    max: Optional[float] = None


class ChangeFilter(_FrozenModel):
    """24h change: sign-based (gainers/losers) or an inclusive custom range."""

    enabled: bool = False
    type: Optional[ChangeType] = None
    min: Optional[float] = None
    max: Optional[float] = None


class RankingFilter(_FrozenModel):
    """Keep assets whose market_cap_rank <= top_n."""

    enabled: bool = False
    top_n: Optional[TopN] = Field(None, alias="topN")


class QuickFilters(_FrozenModel):
    """Independent boolean toggles. Only high_volume has an evaluation stage."""

    trending: bool = False
    recently_added: bool = Field(False, alias="recentlyAdded")
    high_volume: bool = Field(False, alias="highVolume")


class FilterModel(_FrozenModel):
    """
    The complete, user-visible filter configuration.

    Six independent dimensions; a disabled dimension does not constrain
    the result.
    """

    price: RangeFilter = Field(default_factory=RangeFilter)
    market_cap: MarketCapFilter = Field(default_factory=MarketCapFilter, alias="marketCap")
    volume: RangeFilter = Field(default_factory=RangeFilter)
    change_24h: ChangeFilter = Field(default_factory=ChangeFilter, alias="change24h")
    ranking: RankingFilter = Field(default_factory=RankingFilter)
    quick_filters: QuickFilters = Field(default_factory=QuickFilters, alias="quickFilters")


# Canonical "no filters" value. Frozen, so it cannot be mutated in place.
DEFAULT_MODEL = FilterModel()


# =============================================================================
# Asset Record
# =============================================================================


class MarketAsset(BaseModel):
    """
    Minimal market asset shape required by the filter engine.

    Extra fields (id, symbol, name, image, ...) are kept as-is so they pass
    through filtering unmodified.
    """

    model_config = ConfigDict(extra="allow")

    current_price: float = Field(..., description="Spot price in the quote currency")
    market_cap: float = Field(..., ge=0, description="Market capitalisation")
    total_volume: float = Field(..., ge=0, description="24h traded volume")
    price_change_percentage_24h: float = Field(..., description="24h price change (%)")
    market_cap_rank: int = Field(..., ge=1, description="Rank by market cap (1 = largest)")


# =============================================================================
# API Models
# =============================================================================


class PriceUpdate(BaseModel):
    """Request body for PUT /filters/price."""

    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)


class VolumeUpdate(BaseModel):
    """Request body for PUT /filters/volume."""

    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)


class MarketCapUpdate(BaseModel):
    """Request body for PUT /filters/market-cap."""

    category: Optional[MarketCapCategory] = None
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)


class Change24hUpdate(BaseModel):
    """Request body for PUT /filters/change-24h."""

    type: Optional[ChangeType] = None
    min: Optional[float] = None
    max: Optional[float] = None


class RankingUpdate(BaseModel):
    """Request body for PUT /filters/ranking."""

    model_config = ConfigDict(populate_by_name=True)

    top_n: Optional[TopN] = Field(None, alias="topN")


class FilterStateResponse(BaseModel):
    """Response body for the /filters endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    filters: FilterModel
    is_loading: bool = Field(..., alias="isLoading")
    has_active: bool = Field(..., alias="hasActiveFilters")
    active_count: int = Field(..., ge=0, alias="activeFilterCount")
    active_dimensions: list[str] = Field(default_factory=list, alias="activeDimensions")


class ApplyRequest(BaseModel):
    """
    Request body for POST /filters/apply.

    If filters is omitted, the store's current model is used.
    """

    assets: list[MarketAsset] = Field(default_factory=list)
    filters: Optional[FilterModel] = None
    sort_by: Optional[str] = Field(
        None,
        pattern=r"^[A-Za-z0-9]+-(asc|desc)$",
        description="'<field>-<direction>', e.g. 'marketCap-desc'",
    )


class ApplyResponse(BaseModel):
    """Response body for POST /filters/apply."""

    assets: list[MarketAsset]
    total: int = Field(..., ge=0, description="Number of assets received")
    matched: int = Field(..., ge=0, description="Number of assets kept")

