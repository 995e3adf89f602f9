"""
Settings and environment management module for the Sales Ops location consensus service.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Defaults that reproduce the dashboard's fraud-detection thresholds exactly
- Singleton pattern via @lru_cache for efficient access

Location Consensus Defaults:
- cluster_radius_meters: 100 (visits within 100m of a cluster seed share a location)
- minor_deviation_meters: 100 (deviation above this is MINOR_DEVIATION)
- suspicious_deviation_meters: 200 (deviation above this is SUSPICIOUS)
- likely_fraud_deviation_meters: 500 (deviation above this is LIKELY_FRAUD)
- strong_consensus_score: 90 (consistency score at or above this is STRONG)
- weak_consensus_score: 70 (consistency score at or above this is WEAK)
- suspicious_consensus_score: 50 (consistency score at or above this is SUSPICIOUS)

Usage:
    from salesops.core.config import get_settings

    settings = get_settings()
    radius = settings.cluster_radius_meters
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The class inherits from pydantic-settings BaseSettings which provides:
    - Automatic loading from environment variables (case-insensitive)
    - Support for .env file loading
    - Type validation and coercion
    - Default values for every setting (the service needs no credentials)

    Attributes:
        cluster_radius_meters: Proximity radius used by the location clusterer.
        minor_deviation_meters: Lower bound (exclusive) of MINOR_DEVIATION.
        suspicious_deviation_meters: Lower bound (exclusive) of SUSPICIOUS.
        likely_fraud_deviation_meters: Lower bound (exclusive) of LIKELY_FRAUD.
        strong_consensus_score: Minimum consistency score for STRONG consensus.
        weak_consensus_score: Minimum consistency score for WEAK consensus.
        suspicious_consensus_score: Minimum consistency score for SUSPICIOUS consensus.
        default_page_size: Page size used by the shop listing when none is given.
        max_page_size: Upper bound accepted for the shop listing page size.
        log_level: Root logging level configured by the application entry point.
        cors_origins: Dashboard origins allowed to call the API.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',  # Ignore extra environment variables not defined in this class
        case_sensitive=False,
    )

    # =========================================================================
    # Location Clustering
    # =========================================================================

    # Visits within this many meters of a cluster seed join the seed's cluster.
    # The comparison is inclusive (distance <= radius).
    cluster_radius_meters: float = Field(default=100.0, gt=0)

    # =========================================================================
    # Per-Visit Fraud Flag Thresholds (strict greater-than)
    # =========================================================================

    minor_deviation_meters: float = 100.0
    suspicious_deviation_meters: float = 200.0
    likely_fraud_deviation_meters: float = 500.0

    # =========================================================================
    # Per-Shop Consensus Level Thresholds (consistency score, percent)
    # =========================================================================

    strong_consensus_score: int = 90
    weak_consensus_score: int = 70
    suspicious_consensus_score: int = 50

    # =========================================================================
    # Query Layer / API
    # =========================================================================

    default_page_size: int = 25
    max_page_size: int = 500

    log_level: str = 'INFO'

    cors_origins: List[str] = [
        'http://localhost:3000',  # Next.js dev server
        'http://127.0.0.1:3000',
    ]


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns a cached Settings instance, ensuring that environment variables are
    only loaded once during the application lifecycle.

    Returns:
        Settings: The application settings instance with all configuration values.

    Raises:
        pydantic.ValidationError: If an environment variable holds an invalid
            value (e.g., CLUSTER_RADIUS_METERS=-5).

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
