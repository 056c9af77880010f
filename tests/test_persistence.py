"""Tests for the filter persistence adapter."""

import asyncio
import json
import logging

import pytest

from crypto_filters.exceptions import PersistenceError
from crypto_filters.models import (
    DEFAULT_MODEL,
    ChangeFilter,
    ChangeType,
    FilterModel,
    MarketCapCategory,
    MarketCapFilter,
    QuickFilters,
    RangeFilter,
    RankingFilter,
)
from crypto_filters.persistence import FilterPersistence, deserialize_model, serialize_model
from crypto_filters.storage import FileKeyValueStore, InMemoryKeyValueStore


KEY = "@lumen_crypto_filters"


class FailingKeyValueStore:
    """Key-value store whose every operation fails."""

    def __init__(self, error: Exception = None):
        self.error = error

    def _fail(self, key: str, operation: str):
        raise self.error or PersistenceError(key, operation, OSError("disk unavailable"))

    async def get_item(self, key):
        self._fail(key, "get")

    async def set_item(self, key, value):
        self._fail(key, "set")

    async def remove_item(self, key):
        self._fail(key, "remove")


def make_full_model() -> FilterModel:
    """A model with every dimension set."""
    return FilterModel(
        price=RangeFilter.from_bounds(1, 100),
        market_cap=MarketCapFilter(enabled=True, category=MarketCapCategory.CUSTOM, min=5, max=50),
        volume=RangeFilter.from_bounds(None, 1_000_000),
        change_24h=ChangeFilter(enabled=True, type=ChangeType.GAINERS),
        ranking=RankingFilter(enabled=True, top_n=500),
        quick_filters=QuickFilters(trending=True, high_volume=True),
    )


# =============================================================================
# Serialization
# =============================================================================


class TestSerialization:
    """Persisted JSON layout."""

    def test_camel_case_keys(self):
        stored = json.loads(serialize_model(make_full_model()))
        assert set(stored) == {"price", "marketCap", "volume", "change24h", "ranking", "quickFilters"}
        assert stored["ranking"] == {"enabled": True, "topN": 500}
        assert stored["marketCap"]["category"] == "custom"

    def test_unset_bounds_omitted(self):
        stored = json.loads(serialize_model(DEFAULT_MODEL))
        assert stored["price"] == {"enabled": False}
        assert stored["quickFilters"] == {
            "trending": False,
            "recentlyAdded": False,
            "highVolume": False,
        }

    def test_deserialize_client_layout(self):
        raw = json.dumps(
            {
                "price": {"enabled": True, "min": 0, "max": 1},
                "marketCap": {"enabled": True, "category": "small"},
                "volume": {"enabled": False},
                "change24h": {"enabled": True, "type": "losers"},
                "ranking": {"enabled": True, "topN": 10},
                "quickFilters": {"trending": True, "recentlyAdded": False, "highVolume": False},
            }
        )
        model = deserialize_model(raw)
        assert model.price == RangeFilter(enabled=True, min=0, max=1)
        assert model.market_cap.category == MarketCapCategory.SMALL
        assert model.change_24h.type == ChangeType.LOSERS
        assert model.ranking.top_n == 10
        assert model.quick_filters.trending is True


# =============================================================================
# Adapter
# =============================================================================


class TestLoad:
    """load() never raises and degrades to DEFAULT_MODEL."""

    def test_absent_key_returns_default(self):
        persistence = FilterPersistence(InMemoryKeyValueStore())
        assert asyncio.run(persistence.load()) == DEFAULT_MODEL

    def test_uses_default_storage_key(self):
        persistence = FilterPersistence(InMemoryKeyValueStore())
        assert persistence.key == KEY

    def test_corrupt_json_returns_default(self, caplog):
        store = InMemoryKeyValueStore({KEY: "{not json"})
        with caplog.at_level(logging.ERROR):
            model = asyncio.run(FilterPersistence(store).load())
        assert model == DEFAULT_MODEL
        assert "corrupt" in caplog.text

    @pytest.mark.parametrize(
        "raw",
        [
            "null",
            "[1, 2, 3]",
            '{"ranking": {"enabled": true, "topN": 7}}',
            '{"marketCap": {"enabled": true, "category": "micro"}}',
        ],
    )
    def test_incompatible_value_returns_default(self, raw):
        store = InMemoryKeyValueStore({KEY: raw})
        assert asyncio.run(FilterPersistence(store).load()) == DEFAULT_MODEL

    def test_empty_string_returns_default(self):
        store = InMemoryKeyValueStore({KEY: ""})
        assert asyncio.run(FilterPersistence(store).load()) == DEFAULT_MODEL

    def test_partial_value_fills_defaults(self):
        store = InMemoryKeyValueStore({KEY: '{"price": {"enabled": true, "min": 5}}'})
        model = asyncio.run(FilterPersistence(store).load())
        assert model.price == RangeFilter(enabled=True, min=5)
        assert model.quick_filters == DEFAULT_MODEL.quick_filters

    def test_storage_failure_returns_default(self, caplog):
        persistence = FilterPersistence(FailingKeyValueStore())
        with caplog.at_level(logging.ERROR):
            assert asyncio.run(persistence.load()) == DEFAULT_MODEL
        assert "Failed to read filters" in caplog.text

    def test_unexpected_error_returns_default(self):
        persistence = FilterPersistence(FailingKeyValueStore(RuntimeError("boom")))
        assert asyncio.run(persistence.load()) == DEFAULT_MODEL


class TestSave:
    """save() writes the full model and reports failure without raising."""

    def test_round_trip(self):
        persistence = FilterPersistence(InMemoryKeyValueStore())
        model = make_full_model()

        assert asyncio.run(persistence.save(model)) is True
        assert asyncio.run(persistence.load()) == model

    def test_default_round_trip(self):
        persistence = FilterPersistence(InMemoryKeyValueStore())
        asyncio.run(persistence.save(DEFAULT_MODEL))
        assert asyncio.run(persistence.load()) == DEFAULT_MODEL

    def test_round_trip_through_files(self, tmp_path):
        persistence = FilterPersistence(FileKeyValueStore(tmp_path))
        model = make_full_model()
        asyncio.run(persistence.save(model))

        reloaded = FilterPersistence(FileKeyValueStore(tmp_path))
        assert asyncio.run(reloaded.load()) == model

    def test_custom_key(self):
        store = InMemoryKeyValueStore()
        asyncio.run(FilterPersistence(store, key="@other").save(DEFAULT_MODEL))
        assert list(store.items) == ["@other"]

    def test_failure_returns_false(self, caplog):
        persistence = FilterPersistence(FailingKeyValueStore())
        with caplog.at_level(logging.ERROR):
            assert asyncio.run(persistence.save(make_full_model())) is False
        assert "Failed to save filters" in caplog.text


class TestClear:
    """clear() removes the key and swallows failures."""

    def test_removes_key(self):
        store = InMemoryKeyValueStore()
        persistence = FilterPersistence(store)
        asyncio.run(persistence.save(make_full_model()))

        asyncio.run(persistence.clear())

        assert store.items == {}
        assert asyncio.run(persistence.load()) == DEFAULT_MODEL

    def test_failure_is_logged_only(self, caplog):
        persistence = FilterPersistence(FailingKeyValueStore())
        with caplog.at_level(logging.ERROR):
            asyncio.run(persistence.clear())
        assert "Failed to clear filters" in caplog.text
