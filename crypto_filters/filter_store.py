"""
Filter store: owner of the current filter model.

The store holds a FilterStoreState snapshot (model, is_loading, has_active)
and swaps it in one assignment on every change, so readers never see a new
model paired with a stale has_active. Snapshots are frozen; readers cannot
mutate store state through them.

Mutations are optimistic and not serialized: the in-memory model is updated
before the persistence write is awaited, and a failed write does not roll it
back. Two mutations issued back-to-back race on persistence (last write to
complete wins), while the in-memory model always reflects the latest issued
mutation.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, TypeVar, Union

from crypto_filters.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from crypto_filters.engine.pipeline import apply_filters
from crypto_filters.engine.summary import count_active, has_active
from crypto_filters.models import (
    DEFAULT_MODEL,
    ChangeFilter,
    ChangeType,
    FilterModel,
    MarketCapCategory,
    MarketCapFilter,
    QuickFilterName,
    RangeFilter,
    RankingFilter,
)
from crypto_filters.persistence import FilterPersistence

logger = logging.getLogger(__name__)

T = TypeVar("T")

# QuickFilterName -> QuickFilters attribute
_QUICK_FILTER_FIELDS: dict[QuickFilterName, str] = {
    QuickFilterName.TRENDING: "trending",
    QuickFilterName.RECENTLY_ADDED: "recently_added",
    QuickFilterName.HIGH_VOLUME: "high_volume",
}


@dataclass(frozen=True)
class FilterStoreState:
    """
    Immutable snapshot of the store.

    Attributes:
        model: Current filter model
        is_loading: True until the persisted model has been loaded
        has_active: has_active(model), recomputed on every change
    """

    model: FilterModel
    is_loading: bool
    has_active: bool


Listener = Callable[[FilterStoreState], None]


class FilterStore:
    """
    Session-lifetime state container for filter preferences.

    Create one per session and pass it to consumers explicitly; all
    mutation goes through the async setter methods below.

    Example:
        ```python
        store = FilterStore(FilterPersistence(InMemoryKeyValueStore()))
        await store.initialize()
        await store.update_price(1, 100)
        visible = store.apply(assets)
        ```
    """

    def __init__(
        self,
        persistence: FilterPersistence,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ) -> None:
        self.persistence = persistence
        self.config = config
        self._state = FilterStoreState(model=DEFAULT_MODEL, is_loading=True, has_active=False)
        self._listeners: list[Listener] = []

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @property
    def state(self) -> FilterStoreState:
        return self._state

    @property
    def model(self) -> FilterModel:
        return self._state.model

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def has_active(self) -> bool:
        return self._state.has_active

    def active_count(self) -> int:
        return count_active(self._state.model)

    def apply(self, data: Sequence[T]) -> list[T]:
        """Filter data with the current model."""
        return apply_filters(self._state.model, data, self.config)

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with the new state after every change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _swap(self, model: FilterModel, is_loading: Optional[bool] = None) -> None:
        self._state = FilterStoreState(
            model=model,
            is_loading=self._state.is_loading if is_loading is None else is_loading,
            has_active=has_active(model),
        )
        state = self._state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Filter store listener failed")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> FilterModel:
        """
        Load the persisted model and clear the loading flag.

        Any failure falls back to DEFAULT_MODEL; is_loading always ends False.
        """
        model = DEFAULT_MODEL
        try:
            model = await self.persistence.load()
        except Exception:
            logger.exception("Failed to load filters, using defaults")
        finally:
            self._swap(model, is_loading=False)
        logger.info(f"Filter store initialized: {count_active(model)} active filters")
        return model

    async def _commit(self, model: FilterModel) -> FilterModel:
        # Optimistic: in-memory first, then the best-effort write
        self._swap(model)
        saved = await self.persistence.save(model)
        if not saved:
            logger.warning("Filters kept in memory but not persisted")
        return model

    async def save_filters(self, model: FilterModel) -> FilterModel:
        """Replace the whole model and persist it."""
        return await self._commit(model)

    async def clear_all(self) -> FilterModel:
        """Reset every dimension to DEFAULT_MODEL and persist it."""
        logger.info("Clearing all filters")
        return await self._commit(DEFAULT_MODEL)

    async def reset(self) -> None:
        """Remove the persisted key and reset the in-memory model to defaults."""
        self._swap(DEFAULT_MODEL)
        await self.persistence.clear()

    # -------------------------------------------------------------------------
    # Per-dimension mutations
    # -------------------------------------------------------------------------

    async def update_price(
        self, min: Optional[float] = None, max: Optional[float] = None
    ) -> FilterModel:
        """Enabled iff a bound is given; calling with no bounds disables it."""
        logger.debug(f"update_price min={min} max={max}")
        return await self._commit(
            self._state.model.model_copy(update={"price": RangeFilter.from_bounds(min, max)})
        )

    async def update_market_cap(
        self,
        category: Optional[Union[MarketCapCategory, str]] = None,
        min: Optional[float] = None,
        max: Optional[float] = None,
    ) -> FilterModel:
        """
        Set the market cap filter.

        Always enabled, even with no arguments; with no category the stage
        lets every record through.
        """
        logger.debug(f"update_market_cap category={category} min={min} max={max}")
        market_cap = MarketCapFilter(
            enabled=True,
            category=MarketCapCategory(category) if category is not None else None,
            min=min,
            max=max,
        )
        return await self._commit(
            self._state.model.model_copy(update={"market_cap": market_cap})
        )

    async def update_volume(
        self, min: Optional[float] = None, max: Optional[float] = None
    ) -> FilterModel:
        """Enabled iff a bound is given; calling with no bounds disables it."""
        logger.debug(f"update_volume min={min} max={max}")
        return await self._commit(
            self._state.model.model_copy(update={"volume": RangeFilter.from_bounds(min, max)})
        )

    async def update_change_24h(
        self,
        type: Optional[Union[ChangeType, str]] = None,
        min: Optional[float] = None,
        max: Optional[float] = None,
    ) -> FilterModel:
        """
        Set the 24h change filter.

        Always enabled, even with no arguments; with no type the stage lets
        every record through.
        """
        logger.debug(f"update_change_24h type={type} min={min} max={max}")
        change = ChangeFilter(
            enabled=True,
            type=ChangeType(type) if type is not None else None,
            min=min,
            max=max,
        )
        return await self._commit(self._state.model.model_copy(update={"change_24h": change}))

    async def update_ranking(self, top_n: Optional[int] = None) -> FilterModel:
        """
        Enabled iff top_n is given.

        Raises:
            pydantic.ValidationError: top_n is not one of 10, 50, 100, 500
        """
        logger.debug(f"update_ranking top_n={top_n}")
        ranking = RankingFilter(enabled=top_n is not None, top_n=top_n)
        return await self._commit(self._state.model.model_copy(update={"ranking": ranking}))

    async def toggle_quick_filter(self, name: Union[QuickFilterName, str]) -> FilterModel:
        """
        Flip one quick filter, leaving the other two untouched.

        Raises:
            ValueError: name is not trending, recentlyAdded or highVolume
        """
        field = _QUICK_FILTER_FIELDS[QuickFilterName(name)]
        current = self._state.model.quick_filters
        quick_filters = current.model_copy(update={field: not getattr(current, field)})
        logger.debug(f"toggle_quick_filter {field} -> {getattr(quick_filters, field)}")
        return await self._commit(
            self._state.model.model_copy(update={"quick_filters": quick_filters})
        )
