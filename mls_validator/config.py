"""
Configuration settings using Pydantic.

Loads settings from ``MLS_``-prefixed environment variables and a ``.env`` file.
The listing-count ratios are unmeasured estimates of the share of active
inventory that is new, pending or canceled; they live here instead of in the
synthesizer so a market with real figures can override them.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Extraction and statistics settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MLS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Market the reports come from
    market_city: str = "Plano"
    market_state: str = "TX"
    default_zip_code: str = "00000"
    default_property_type: str = "Single Family"

    # Statistics heuristics (share of active listings)
    new_listing_ratio: float = 0.25
    pending_listing_ratio: float = 0.10
    canceled_listing_ratio: float = 0.05
    days_of_inventory: int = 90  # 3 months

    # Pipeline
    max_attempts: int = 3


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
