"""
Package initialization file for salesops models.

Exports all Pydantic schemas and enumerations from schemas.py and enums.py so other
modules can import data models without knowing the internal module structure.

Usage:
    from salesops.models import (
        ConsensusLevel,
        LocationConsensus,
        VisitRecord,
    )
"""

# =============================================================================
# Enums - Import and re-export all enumerations from enums.py
# =============================================================================

from salesops.models.enums import (
    ConsensusLevel,
    FraudRisk,
    FraudFlag,
    ShopSortField,
    SortOrder,
)


# =============================================================================
# Schemas - Import and re-export all Pydantic models from schemas.py
# =============================================================================

from salesops.models.schemas import (
    # Normalized input
    VisitRecord,
    GeoPoint,
    # Per-shop consensus
    ConsensusVisitDetail,
    LocationConsensus,
    # Per-salesman aggregates
    SalesmanConsensusAccuracy,
    # Summary / engine output
    ConsensusOverview,
    ConsensusAnalysisResult,
    # API contracts
    ConsensusAnalysisRequest,
    ShopConsensusQuery,
    ShopConsensusPage,
)


__all__ = [
    # Enums
    'ConsensusLevel',
    'FraudRisk',
    'FraudFlag',
    'ShopSortField',
    'SortOrder',
    # Schemas
    'VisitRecord',
    'GeoPoint',
    'ConsensusVisitDetail',
    'LocationConsensus',
    'SalesmanConsensusAccuracy',
    'ConsensusOverview',
    'ConsensusAnalysisResult',
    'ConsensusAnalysisRequest',
    'ShopConsensusQuery',
    'ShopConsensusPage',
]
