"""
FastAPI application for the crypto filter engine.

A thin layer over one process-wide FilterStore: every endpoint delegates to
the store or the engine. Filter persistence failures never surface here;
the store degrades to defaults or keeps its in-memory state.

Endpoints:
    GET /health - Health check
    GET /filters - Current filters and derived summary
    PUT /filters - Replace the whole filter model
    DELETE /filters - Reset every filter
    PUT /filters/price, /filters/market-cap, /filters/volume,
        /filters/change-24h, /filters/ranking - Per-dimension updates
    POST /filters/quick/{name}/toggle - Flip a quick filter
    POST /filters/apply - Filter (and optionally sort) a list of assets
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

# Load .env file if it exists
from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

from fastapi import Depends, FastAPI

from crypto_filters.config import StorageConfig
from crypto_filters.engine import active_dimensions, apply_filters, count_active, sort_assets
from crypto_filters.filter_store import FilterStore
from crypto_filters.models import (
    ApplyRequest,
    ApplyResponse,
    Change24hUpdate,
    FilterModel,
    FilterStateResponse,
    MarketCapUpdate,
    PriceUpdate,
    QuickFilterName,
    RankingUpdate,
    VolumeUpdate,
)
from crypto_filters.persistence import FilterPersistence
from crypto_filters.storage import FileKeyValueStore, InMemoryKeyValueStore, KeyValueStore


logger = logging.getLogger(__name__)


_filter_store: Optional[FilterStore] = None
_filter_store_lock = asyncio.Lock()


def build_key_value_store(config: StorageConfig) -> KeyValueStore:
    """
    Pick the durable store for a storage config.

    Returns FileKeyValueStore if config.storage_dir is set, otherwise an
    InMemoryKeyValueStore (filters last for the process lifetime).
    """
    if config.storage_dir:
        logger.info(f"Persisting filters under {config.storage_dir}")
        return FileKeyValueStore(config.storage_dir)
    logger.info("No storage directory configured, keeping filters in memory")
    return InMemoryKeyValueStore()


async def get_filter_store() -> FilterStore:
    """
    Return the process-wide store, creating and loading it on first use.

    The store is published only once its persisted model is loaded, so no
    request can mutate it while initialize() is still pending.
    """
    global _filter_store
    if _filter_store is not None:
        return _filter_store

    async with _filter_store_lock:
        if _filter_store is None:
            config = StorageConfig.from_env()
            persistence = FilterPersistence(
                build_key_value_store(config), key=config.filters_storage_key
            )
            store = FilterStore(persistence)
            await store.initialize()
            _filter_store = store
    return _filter_store


def _state_response(store: FilterStore) -> FilterStateResponse:
    model = store.model
    return FilterStateResponse(
        filters=model,
        is_loading=store.is_loading,
        has_active=store.has_active,
        active_count=count_active(model),
        active_dimensions=active_dimensions(model),
    )


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Crypto Filters API",
    version="1.0.0",
    description="Persisted multi-criteria filters for crypto market lists",
)


# =============================================================================
# Endpoints
# =============================================================================


@app.get(
    "/health",
    summary="Health check",
    description="Returns service health status",
    tags=["System"],
)
def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Crypto Filters API",
        "version": "1.0.0",
    }


@app.get(
    "/filters",
    response_model=FilterStateResponse,
    summary="Current filters",
    tags=["Filters"],
)
async def get_filters(store: FilterStore = Depends(get_filter_store)) -> FilterStateResponse:
    return _state_response(store)


@app.put(
    "/filters",
    response_model=FilterStateResponse,
    summary="Replace all filters",
    tags=["Filters"],
)
async def replace_filters(
    filters: FilterModel,
    store: FilterStore = Depends(get_filter_store),
) -> FilterStateResponse:
    await store.save_filters(filters)
    return _state_response(store)


@app.delete(
    "/filters",
    response_model=FilterStateResponse,
    summary="Clear all filters",
    tags=["Filters"],
)
async def clear_filters(store: FilterStore = Depends(get_filter_store)) -> FilterStateResponse:
    await store.clear_all()
    return _state_response(store)


@app.put("/filters/price", response_model=FilterStateResponse, tags=["Filters"])
async def update_price(
    update: PriceUpdate,
    store: FilterStore = Depends(get_filter_store),
) -> FilterStateResponse:
    """Both bounds null disables the price filter."""
    await store.update_price(update.min, update.max)
    return _state_response(store)


@app.put("/filters/market-cap", response_model=FilterStateResponse, tags=["Filters"])
async def update_market_cap(
    update: MarketCapUpdate,
    store: FilterStore = Depends(get_filter_store),
) -> FilterStateResponse:
    """Always enables the market cap filter."""
    await store.update_market_cap(update.category, update.min, update.max)
    return _state_response(store)


@app.put("/filters/volume", response_model=FilterStateResponse, tags=["Filters"])
async def update_volume(
    update: VolumeUpdate,
    store: FilterStore = Depends(get_filter_store),
) -> FilterStateResponse:
    """Both bounds null disables the volume filter."""
    await store.update_volume(update.min, update.max)
    return _state_response(store)


@app.put("/filters/change-24h", response_model=FilterStateResponse, tags=["Filters"])
async def update_change_24h(
    update: Change24hUpdate,
    store: FilterStore = Depends(get_filter_store),
) -> FilterStateResponse:
    """Always enables the 24h change filter."""
    await store.update_change_24h(update.type, update.min, update.max)
    return _state_response(store)


@app.put("/filters/ranking", response_model=FilterStateResponse, tags=["Filters"])
async def update_ranking(
    update: RankingUpdate,
    store: FilterStore = Depends(get_filter_store),
) -> FilterStateResponse:
    """A null topN disables the ranking filter."""
    await store.update_ranking(update.top_n)
    return _state_response(store)


@app.post(
    "/filters/quick/{name}/toggle",
    response_model=FilterStateResponse,
    tags=["Filters"],
)
async def toggle_quick_filter(
    name: QuickFilterName,
    store: FilterStore = Depends(get_filter_store),
) -> FilterStateResponse:
    await store.toggle_quick_filter(name)
    return _state_response(store)


@app.post(
    "/filters/apply",
    response_model=ApplyResponse,
    summary="Filter a list of assets",
    description="Uses the filters in the request body if given, else the stored filters.",
    tags=["Filters"],
)
async def apply(
    request: ApplyRequest,
    store: FilterStore = Depends(get_filter_store),
) -> ApplyResponse:
    filters = request.filters if request.filters is not None else store.model
    matched = apply_filters(filters, request.assets, store.config)
    if request.sort_by:
        matched = sort_assets(matched, request.sort_by)

    logger.info(f"Applied {count_active(filters)} filters: {len(matched)}/{len(request.assets)} kept")
    return ApplyResponse(assets=matched, total=len(request.assets), matched=len(matched))
