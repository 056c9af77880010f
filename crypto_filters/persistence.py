"""
Persistence adapter for the filter model.

Loads and saves the full FilterModel as JSON under a single fixed key of a
KeyValueStore. Every operation degrades instead of raising: a missing or
corrupt value loads as DEFAULT_MODEL, and failed writes/removals are logged
and otherwise ignored. Filters are a convenience, not critical data.
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from crypto_filters.config import DEFAULT_STORAGE_CONFIG
from crypto_filters.models import DEFAULT_MODEL, FilterModel
from crypto_filters.storage import KeyValueStore

logger = logging.getLogger(__name__)


def serialize_model(model: FilterModel) -> str:
    """Serialize to the persisted JSON layout (camelCase, unset bounds omitted)."""
    return model.model_dump_json(by_alias=True, exclude_none=True)


def deserialize_model(raw: str) -> FilterModel:
    """
    Parse a persisted value.

    Raises:
        json.JSONDecodeError: raw is not JSON
        pydantic.ValidationError: JSON does not fit the filter model
    """
    return FilterModel.model_validate(json.loads(raw))


class FilterPersistence:
    """
    Reads and writes the filter model under a fixed storage key.

    The key is owned exclusively by this adapter.
    """

    def __init__(self, store: KeyValueStore, key: Optional[str] = None) -> None:
        self.store = store
        self.key = key or DEFAULT_STORAGE_CONFIG.filters_storage_key

    async def load(self) -> FilterModel:
        """
        Load the persisted model.

        Returns:
            The stored FilterModel, or DEFAULT_MODEL if the key is absent,
            unreadable, not valid JSON, or does not fit the model. Never raises.
        """
        try:
            raw = await self.store.get_item(self.key)
        except Exception:
            logger.exception("Failed to read filters from %s", self.key)
            return DEFAULT_MODEL

        if not raw:
            return DEFAULT_MODEL

        try:
            return deserialize_model(raw)
        except (json.JSONDecodeError, ValidationError):
            logger.exception("Stored filters under %s are corrupt, using defaults", self.key)
            return DEFAULT_MODEL

    async def save(self, model: FilterModel) -> bool:
        """
        Write the full model under the key.

        Best effort: a failure is logged and reported through the return
        value, never raised. Callers keep their in-memory model either way.

        Returns:
            True if the write completed, False otherwise
        """
        try:
            await self.store.set_item(self.key, serialize_model(model))
        except Exception:
            logger.exception("Failed to save filters to %s", self.key)
            return False
        return True

    async def clear(self) -> None:
        """Remove the key. Failures are logged only."""
        try:
            await self.store.remove_item(self.key)
        except Exception:
            logger.exception("Failed to clear filters at %s", self.key)
