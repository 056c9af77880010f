"""
Tests for crypto_filters/models.py

Covers:
- Default model shape
- Frozen (immutable) filter models
- camelCase aliases and snake_case field names
- Enum and topN validation
- MarketAsset extra fields
"""

import pytest
from pydantic import ValidationError

from crypto_filters.models import (
    DEFAULT_MODEL,
    ApplyRequest,
    ChangeType,
    FilterModel,
    FilterStateResponse,
    MarketAsset,
    MarketCapCategory,
    QuickFilterName,
    RangeFilter,
    RankingFilter,
)


# =============================================================================
# Enum Tests
# =============================================================================


class TestEnums:
    """Test enum values match the persisted layout."""

    def test_market_cap_category_values(self):
        assert [c.value for c in MarketCapCategory] == ["small", "mid", "large", "custom"]

    def test_change_type_values(self):
        assert [t.value for t in ChangeType] == ["gainers", "losers", "custom"]

    def test_quick_filter_names(self):
        assert QuickFilterName("recentlyAdded") == QuickFilterName.RECENTLY_ADDED
        assert QuickFilterName.HIGH_VOLUME.value == "highVolume"


# =============================================================================
# Filter Model Tests
# =============================================================================


class TestDefaultModel:
    """DEFAULT_MODEL has every dimension disabled and empty."""

    def test_all_dimensions_disabled(self):
        assert DEFAULT_MODEL.price.enabled is False
        assert DEFAULT_MODEL.market_cap.enabled is False
        assert DEFAULT_MODEL.volume.enabled is False
        assert DEFAULT_MODEL.change_24h.enabled is False
        assert DEFAULT_MODEL.ranking.enabled is False

    def test_all_values_unset(self):
        assert DEFAULT_MODEL.price.min is None
        assert DEFAULT_MODEL.price.max is None
        assert DEFAULT_MODEL.market_cap.category is None
        assert DEFAULT_MODEL.change_24h.type is None
        assert DEFAULT_MODEL.ranking.top_n is None

    def test_quick_filters_off(self):
        qf = DEFAULT_MODEL.quick_filters
        assert (qf.trending, qf.recently_added, qf.high_volume) == (False, False, False)

    def test_equals_fresh_model(self):
        assert FilterModel() == DEFAULT_MODEL


class TestImmutability:
    """Filter models are frozen."""

    def test_cannot_assign_dimension(self):
        with pytest.raises(ValidationError):
            DEFAULT_MODEL.price = RangeFilter.from_bounds(1, 2)

    def test_cannot_assign_nested_field(self):
        with pytest.raises(ValidationError):
            DEFAULT_MODEL.price.enabled = True

    def test_model_copy_returns_new_model(self):
        updated = DEFAULT_MODEL.model_copy(update={"price": RangeFilter.from_bounds(1)})
        assert updated is not DEFAULT_MODEL
        assert updated.price.enabled is True
        assert DEFAULT_MODEL.price.enabled is False


class TestRangeFilter:
    """enabled derives from bounds."""

    def test_from_bounds_both(self):
        assert RangeFilter.from_bounds(1, 2) == RangeFilter(enabled=True, min=1, max=2)

    def test_from_bounds_zero_min_is_a_bound(self):
        assert RangeFilter.from_bounds(0).enabled is True

    def test_from_bounds_none(self):
        assert RangeFilter.from_bounds() == RangeFilter()


class TestAliases:
    """camelCase JSON names and snake_case attributes are both accepted."""

    def test_parse_camel_case(self):
        model = FilterModel.model_validate(
            {
                "marketCap": {"enabled": True, "category": "large"},
                "change24h": {"enabled": True, "type": "losers"},
                "ranking": {"enabled": True, "topN": 50},
                "quickFilters": {"recentlyAdded": True, "highVolume": True},
            }
        )
        assert model.market_cap.category == MarketCapCategory.LARGE
        assert model.change_24h.type == ChangeType.LOSERS
        assert model.ranking.top_n == 50
        assert model.quick_filters.recently_added is True
        assert model.quick_filters.high_volume is True
        assert model.quick_filters.trending is False

    def test_parse_snake_case(self):
        model = FilterModel.model_validate(
            {"market_cap": {"enabled": True, "category": "mid"}, "quick_filters": {"trending": True}}
        )
        assert model.market_cap.category == MarketCapCategory.MID
        assert model.quick_filters.trending is True

    def test_dump_by_alias(self):
        dumped = DEFAULT_MODEL.model_dump(by_alias=True)
        assert set(dumped) == {
            "price",
            "marketCap",
            "volume",
            "change24h",
            "ranking",
            "quickFilters",
        }
        assert dumped["ranking"] == {"enabled": False, "topN": None}

    def test_missing_dimensions_take_defaults(self):
        model = FilterModel.model_validate({"price": {"enabled": True, "max": 1}})
        assert model.price == RangeFilter(enabled=True, max=1)
        assert model.volume == DEFAULT_MODEL.volume


class TestValidation:
    """Closed sets are enforced."""

    @pytest.mark.parametrize("top_n", [10, 50, 100, 500])
    def test_allowed_top_n(self, top_n):
        assert RankingFilter(enabled=True, top_n=top_n).top_n == top_n

    @pytest.mark.parametrize("top_n", [0, 5, 25, 1000])
    def test_rejects_other_top_n(self, top_n):
        with pytest.raises(ValidationError):
            RankingFilter(enabled=True, top_n=top_n)

    def test_rejects_unknown_category(self):
        with pytest.raises(ValidationError):
            FilterModel.model_validate({"marketCap": {"enabled": True, "category": "micro"}})

    def test_rejects_unknown_change_type(self):
        with pytest.raises(ValidationError):
            FilterModel.model_validate({"change24h": {"enabled": True, "type": "flat"}})


# =============================================================================
# Asset / API Model Tests
# =============================================================================


class TestMarketAsset:
    """MarketAsset keeps extra fields."""

    def test_extra_fields_preserved(self):
        asset = MarketAsset(
            id="bitcoin",
            symbol="btc",
            current_price=60000,
            market_cap=1_200_000_000_000,
            total_volume=30_000_000_000,
            price_change_percentage_24h=1.2,
            market_cap_rank=1,
        )
        assert asset.symbol == "btc"
        assert asset.model_dump()["id"] == "bitcoin"

    def test_missing_required_field(self):
        with pytest.raises(ValidationError):
            MarketAsset(current_price=1, market_cap=1, total_volume=1, market_cap_rank=1)


class TestApiModels:
    """Request/response bodies."""

    def test_apply_request_sort_pattern(self):
        assert ApplyRequest(sort_by="volume-desc").sort_by == "volume-desc"
        with pytest.raises(ValidationError):
            ApplyRequest(sort_by="volume")

    def test_state_response_aliases(self):
        response = FilterStateResponse(
            filters=DEFAULT_MODEL,
            is_loading=False,
            has_active=False,
            active_count=0,
        )
        dumped = response.model_dump(by_alias=True)
        assert dumped["hasActiveFilters"] is False
        assert dumped["activeFilterCount"] == 0
        assert "quickFilters" in dumped["filters"]
