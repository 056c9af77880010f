"""
Configuration for the crypto filter engine.

All thresholds used by the filter pipeline live here - no magic numbers in
engine code. Storage settings can be overridden through the environment.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# Engine Configuration
# =============================================================================


class EngineConfig(BaseModel):
    """
    Thresholds for the filter pipeline.

    Passed explicitly to apply_filters rather than hardcoded, so tests can
    run the pipeline with controlled bands.
    """

    # Market cap bands: small < small_cap_ceiling <= mid < large_cap_floor <= large
    small_cap_ceiling: float = Field(
        default=1_000_000_000, gt=0, description="Upper bound (exclusive) of small caps ($1B)"
    )
    large_cap_floor: float = Field(
        default=10_000_000_000, gt=0, description="Lower bound (inclusive) of large caps ($10B)"
    )

    # High-volume quick filter keeps this top fraction of the candidate set
    high_volume_fraction: float = Field(
        default=0.2, gt=0, le=1, description="Top fraction by volume kept by highVolume"
    )

    # Ranking fallback when the filter is enabled without a topN
    default_top_n: int = Field(
        default=100, gt=0, description="Ranking threshold used when topN is unset"
    )


DEFAULT_ENGINE_CONFIG = EngineConfig()


# =============================================================================
# Storage Configuration
# =============================================================================


class StorageConfig(BaseModel):
    """
    Where filter preferences are persisted.

    The key is namespaced and owned exclusively by the filter store.
    """

    filters_storage_key: str = Field(
        default="@lumen_crypto_filters", min_length=1, description="Durable store key"
    )
    storage_dir: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Root directory for the file-backed store; None keeps filters in memory",
    )

    @classmethod
    def from_env(cls) -> "StorageConfig":
        """Build a config, honouring CRYPTO_FILTERS_STORAGE_DIR / _KEY when set."""
        overrides = {}
        if os.environ.get("CRYPTO_FILTERS_STORAGE_DIR"):
            overrides["storage_dir"] = os.environ["CRYPTO_FILTERS_STORAGE_DIR"]
        if os.environ.get("CRYPTO_FILTERS_STORAGE_KEY"):
            overrides["filters_storage_key"] = os.environ["CRYPTO_FILTERS_STORAGE_KEY"]
        return cls(**overrides)


DEFAULT_STORAGE_CONFIG = StorageConfig()
