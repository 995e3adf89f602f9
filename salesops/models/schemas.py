"""
Pydantic request/response models for the Sales Ops location consensus backend.

This module provides type-safe data validation and serialization for the
location consensus engine and its API contracts:
- VisitRecord: a normalized, validated shop visit
- ConsensusVisitDetail / LocationConsensus: per-shop consensus results
- SalesmanConsensusAccuracy: per-salesman roll-up
- ConsensusOverview / ConsensusAnalysisResult: network-wide summary and engine output
- Request/response models for the /location-consensus endpoints

Field names are camelCase to match the dashboard's JSON contract. Every engine
output model is frozen: results are recomputed from scratch on each run and are
never mutated after construction.

All models use Pydantic v2 syntax.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from salesops.models.enums import (
    ConsensusLevel,
    FraudFlag,
    FraudRisk,
    ShopSortField,
    SortOrder,
)


# =============================================================================
# Normalized Input
# =============================================================================


class VisitRecord(BaseModel):
    """
    A single shop visit after alias resolution and coordinate validation.

    Invariant: latitude and longitude are finite and non-zero. Raw visits that
    cannot satisfy this never become a VisitRecord.
    """
    model_config = ConfigDict(frozen=True)

    visitId: str = Field(..., description="Visit identifier, unique within a shop group")
    visitDate: Optional[datetime] = Field(default=None, description="Check-in timestamp")
    salesmanName: str = Field(..., description="Salesman who reported the visit")
    shopId: str = Field(..., description="Shop grouping key (shop name, else shop id)")
    shopName: str = Field(..., description="Display name of the shop")
    shopCode: Optional[str] = Field(default=None, description="Shop id field from the sheet, when present")
    latitude: float = Field(..., description="Reported latitude in degrees")
    longitude: float = Field(..., description="Reported longitude in degrees")


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float


# =============================================================================
# Per-Shop Consensus
# =============================================================================


class ConsensusVisitDetail(BaseModel):
    """
    Classification of one visit against its shop's consensus location.

    isConsensus is dominant-cluster membership and is never derived from
    deviationDistance.
    """
    model_config = ConfigDict(frozen=True)

    visitId: str
    visitDate: Optional[datetime] = None
    salesmanName: str
    latitude: float
    longitude: float
    clusterRank: int = Field(
        ...,
        ge=0,
        description="Rank of the cluster holding this visit (0 = dominant cluster)"
    )
    isConsensus: bool = Field(..., description="Member of the dominant cluster")
    deviationDistance: int = Field(
        ...,
        ge=0,
        description="Meters from the dominant centroid, rounded half-up"
    )
    fraudFlag: FraudFlag


class LocationConsensus(BaseModel):
    """
    Consensus result for one shop.

    deviatingVisits is always totalVisits - dominantVisits and
    consistencyScore is round(100 * dominantVisits / totalVisits).
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "shopId": "Kandy Central Stores",
                "shopName": "Kandy Central Stores",
                "totalVisits": 5,
                "dominantLocation": {"latitude": 7.2906, "longitude": 80.6337},
                "dominantVisits": 4,
                "consensusLevel": "WEAK",
                "fraudRisk": "MEDIUM",
                "deviatingVisits": 1,
                "locationClusters": 2,
                "consistencyScore": 80,
                "suspiciousVisits": 1,
                "visitPattern": "4/5 visits normal, 1 deviant - investigate",
                "salesmen": ["Nimal Perera"],
                "visitDetails": [],
            }
        }
    )

    shopId: str
    shopName: str
    shopCode: Optional[str] = None
    totalVisits: int = Field(..., ge=1, description="Number of valid visits")
    dominantLocation: GeoPoint = Field(..., description="Centroid of the dominant cluster")
    dominantVisits: int = Field(..., ge=1, description="Size of the dominant cluster")
    consensusLevel: ConsensusLevel
    fraudRisk: FraudRisk
    deviatingVisits: int = Field(..., ge=0)
    locationClusters: int = Field(..., ge=1, description="Number of proximity clusters")
    consistencyScore: int = Field(..., ge=0, le=100)
    suspiciousVisits: int = Field(
        ...,
        ge=0,
        description="Visits flagged SUSPICIOUS or LIKELY_FRAUD"
    )
    visitPattern: str = Field(..., description="Human-readable visit pattern summary")
    salesmen: List[str] = Field(
        default_factory=list,
        description="Distinct salesmen who visited the shop, in first-visit order"
    )
    visitDetails: List[ConsensusVisitDetail] = Field(default_factory=list)


# =============================================================================
# Per-Salesman Aggregates
# =============================================================================


class SalesmanConsensusAccuracy(BaseModel):
    """
    Consensus statistics for one salesman across every shop they visited.

    consensus counts are shop-level properties; the visit counters only look
    at the salesman's own visits. fraudFlags is tracked separately from
    suspiciousVisits even though both currently move together.
    """
    model_config = ConfigDict(frozen=True)

    salesmanName: str
    totalShops: int = Field(..., ge=0)
    totalVisits: int = Field(..., ge=0)
    perfectConsensus: int = Field(..., ge=0)
    strongConsensus: int = Field(..., ge=0)
    suspiciousVisits: int = Field(..., ge=0)
    fraudFlags: int = Field(..., ge=0)
    consistencyRate: int = Field(..., ge=0, le=100)
    avgConsensusScore: int = Field(..., ge=0, le=100)
    totalOutliers: int = Field(..., ge=0)


# =============================================================================
# Summary / Engine Output
# =============================================================================


class ConsensusOverview(BaseModel):
    """Network-wide summary over a set of shop consensus results."""
    model_config = ConfigDict(frozen=True)

    totalShops: int = 0
    totalVisits: int = 0
    shopsWithMultipleVisits: int = 0
    singleVisitShops: int = 0
    consensusLevelCounts: Dict[str, int] = Field(default_factory=dict)
    fraudRiskCounts: Dict[str, int] = Field(default_factory=dict)
    totalSuspiciousVisits: int = 0
    totalOutliers: int = 0
    avgConsistencyScore: int = 0


class ConsensusAnalysisResult(BaseModel):
    """Complete output of one engine run."""
    model_config = ConfigDict(frozen=True)

    shops: List[LocationConsensus] = Field(default_factory=list)
    salesmen: List[SalesmanConsensusAccuracy] = Field(default_factory=list)
    overview: ConsensusOverview = Field(default_factory=ConsensusOverview)
    validVisits: int = Field(default=0, ge=0)
    droppedVisits: int = Field(default=0, ge=0)


# =============================================================================
# API Request/Response Models
# =============================================================================


class ConsensusAnalysisRequest(BaseModel):
    """
    Raw visits as fetched from the visit sheet.

    Entries are loosely typed on purpose: field names vary between sheet
    exports and are resolved by the visit normalizer.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "visits": [
                    {
                        "shopName": "Kandy Central Stores",
                        "salesman": "Nimal Perera",
                        "checkInDateTime": "2026-01-15 09:30",
                        "latitude": "7.2906",
                        "longitude": "80.6337",
                    }
                ]
            }
        }
    )

    visits: List[Any] = Field(default_factory=list)


class ShopConsensusQuery(ConsensusAnalysisRequest):
    """Filtering, sorting and paging options for the shop consensus table."""

    consensusLevel: Optional[ConsensusLevel] = None
    fraudRisk: Optional[FraudRisk] = None
    salesman: Optional[str] = None
    search: Optional[str] = None
    suspiciousOnly: bool = False
    sortBy: ShopSortField = ShopSortField.FRAUD_RISK
    sortOrder: SortOrder = SortOrder.DESC
    page: int = Field(default=1, ge=1)
    pageSize: Optional[int] = Field(default=None, ge=1)


class ShopConsensusPage(BaseModel):
    """One page of the shop consensus table."""
    model_config = ConfigDict(frozen=True)

    items: List[LocationConsensus] = Field(default_factory=list)
    total: int = Field(..., ge=0, description="Matching shops before paging")
    page: int = Field(..., ge=1)
    pageSize: int = Field(..., ge=1)
    totalPages: int = Field(..., ge=0)
