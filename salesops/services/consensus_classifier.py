"""
Consensus Classifier Service

Turns one shop's location clusters into a LocationConsensus: where the shop's
visits agree the shop is, how far each visit strays from that point, and how
worrying the overall pattern is.

Rules:
1. Consensus location = centroid of the dominant (largest) cluster.
2. Per visit:
   - isConsensus: member of the dominant cluster (set membership only)
   - deviationDistance: meters to the consensus location, rounded half-up
   - fraudFlag: > 500m LIKELY_FRAUD, > 200m SUSPICIOUS, > 100m MINOR_DEVIATION,
     otherwise NORMAL (strict comparisons, first match wins)
3. consistencyScore = round(100 * dominantVisits / totalVisits)
4. consensusLevel: a single-visit shop is PERFECT; otherwise >= 90 STRONG,
   >= 70 WEAK, >= 50 SUSPICIOUS, else CRITICAL
5. fraudRisk over S = visits flagged SUSPICIOUS or LIKELY_FRAUD, N = visits:
   S == 0 LOW; S == 1 and N > 3 MEDIUM; S <= N/2 HIGH; else CRITICAL

PERFECT is only reachable through the single-visit rule. A multi-visit shop
whose visits all fall in one cluster scores 100 and is STRONG.
"""

from typing import List, Optional, Sequence

from salesops.core.config import Settings
from salesops.models.enums import ConsensusLevel, FraudFlag, FraudRisk
from salesops.models.schemas import ConsensusVisitDetail, LocationConsensus
from salesops.services.geo import haversine_distance, round_half_up
from salesops.services.location_clustering import LocationCluster, cluster_centroid
from salesops.services.shop_grouping import ShopVisitGroup


# =============================================================================
# Default Thresholds
# =============================================================================

# Per-visit deviation thresholds in meters (strict greater-than)
MINOR_DEVIATION_METERS: float = 100.0
SUSPICIOUS_DEVIATION_METERS: float = 200.0
LIKELY_FRAUD_DEVIATION_METERS: float = 500.0

# Per-shop consistency score thresholds (percent, greater-or-equal)
STRONG_CONSENSUS_SCORE: int = 90
WEAK_CONSENSUS_SCORE: int = 70
SUSPICIOUS_CONSENSUS_SCORE: int = 50

# Flags that count towards a shop's fraud risk and a salesman's suspicious visits
SUSPICIOUS_FLAGS = frozenset({FraudFlag.SUSPICIOUS, FraudFlag.LIKELY_FRAUD})


def classify_fraud_flag(
    deviation_distance: float,
    minor_threshold: float = MINOR_DEVIATION_METERS,
    suspicious_threshold: float = SUSPICIOUS_DEVIATION_METERS,
    likely_fraud_threshold: float = LIKELY_FRAUD_DEVIATION_METERS,
) -> FraudFlag:
    """
    Flag a visit by its distance from the consensus location.

    Args:
        deviation_distance: Rounded meters from the consensus location
        minor_threshold: Above this is at least MINOR_DEVIATION
        suspicious_threshold: Above this is at least SUSPICIOUS
        likely_fraud_threshold: Above this is LIKELY_FRAUD

    Returns:
        FraudFlag enum value
    """
    if deviation_distance > likely_fraud_threshold:
        return FraudFlag.LIKELY_FRAUD
    elif deviation_distance > suspicious_threshold:
        return FraudFlag.SUSPICIOUS
    elif deviation_distance > minor_threshold:
        return FraudFlag.MINOR_DEVIATION
    else:
        return FraudFlag.NORMAL


def calculate_consistency_score(dominant_visits: int, total_visits: int) -> int:
    """round(100 * dominant / total), half-up; 0 when there are no visits."""
    if total_visits <= 0:
        return 0
    return round_half_up(100 * dominant_visits / total_visits)


def determine_consensus_level(
    total_visits: int,
    consistency_score: int,
    strong_score: int = STRONG_CONSENSUS_SCORE,
    weak_score: int = WEAK_CONSENSUS_SCORE,
    suspicious_score: int = SUSPICIOUS_CONSENSUS_SCORE,
) -> ConsensusLevel:
    """
    Rate how tightly a shop's visits agree.

    A lone visit cannot deviate from itself and is always PERFECT. Every other
    shop is rated on its consistency score only.
    """
    if total_visits == 1:
        return ConsensusLevel.PERFECT

    if consistency_score >= strong_score:
        return ConsensusLevel.STRONG
    elif consistency_score >= weak_score:
        return ConsensusLevel.WEAK
    elif consistency_score >= suspicious_score:
        return ConsensusLevel.SUSPICIOUS
    else:
        return ConsensusLevel.CRITICAL


def determine_fraud_risk(suspicious_visits: int, total_visits: int) -> FraudRisk:
    """
    Rate a shop's fraud risk from its count of SUSPICIOUS/LIKELY_FRAUD visits.

    Branches are evaluated in order, so a single flagged visit in a shop of
    three or fewer visits is HIGH (or CRITICAL), never MEDIUM.
    """
    if suspicious_visits == 0:
        return FraudRisk.LOW
    elif suspicious_visits == 1 and total_visits > 3:
        return FraudRisk.MEDIUM
    elif suspicious_visits <= total_visits / 2:
        return FraudRisk.HIGH
    else:
        return FraudRisk.CRITICAL


def describe_visit_pattern(total_visits: int, dominant_visits: int, suspicious_visits: int) -> str:
    """Short description of a shop's visit pattern for the dashboard table."""
    if total_visits == 1:
        return "Single visit - verification needed"
    if dominant_visits == total_visits:
        return f"All {total_visits} visits from same location - GOOD"
    if dominant_visits == total_visits - 1:
        return f"{dominant_visits}/{total_visits} visits normal, 1 deviant - investigate"
    if suspicious_visits > 0:
        return (
            f"{dominant_visits}/{total_visits} normal, "
            f"{suspicious_visits} highly suspicious - FRAUD RISK"
        )
    return f"{dominant_visits}/{total_visits} visits from dominant location - mixed pattern"


def build_location_consensus(
    group: ShopVisitGroup,
    clusters: Sequence[LocationCluster],
    settings: Optional[Settings] = None,
) -> LocationConsensus:
    """
    Classify one shop's visits against its dominant cluster.

    Args:
        group: The shop's valid visits
        clusters: Output of cluster_shop_visits for the same visits (ranked,
            dominant first)
        settings: Threshold overrides; module defaults apply when None

    Returns:
        LocationConsensus with visitDetails in group order

    Raises:
        ValueError: If the group has no visits (such shops are never built)
    """
    if not group.visits or not clusters:
        raise ValueError(f"Shop {group.shopId!r} has no valid visits to classify")

    if settings is not None:
        minor = settings.minor_deviation_meters
        suspicious = settings.suspicious_deviation_meters
        likely_fraud = settings.likely_fraud_deviation_meters
    else:
        minor = MINOR_DEVIATION_METERS
        suspicious = SUSPICIOUS_DEVIATION_METERS
        likely_fraud = LIKELY_FRAUD_DEVIATION_METERS

    dominant = clusters[0]
    centroid = cluster_centroid(dominant)

    cluster_rank_by_index = {}
    for rank, cluster in enumerate(clusters):
        for member_index in cluster.memberIndices:
            cluster_rank_by_index[member_index] = rank

    details: List[ConsensusVisitDetail] = []
    salesmen: List[str] = []
    suspicious_count = 0
    for index, visit in enumerate(group.visits):
        deviation = round_half_up(haversine_distance(
            centroid.latitude, centroid.longitude,
            visit.latitude, visit.longitude,
        ))
        flag = classify_fraud_flag(deviation, minor, suspicious, likely_fraud)
        if flag in SUSPICIOUS_FLAGS:
            suspicious_count += 1
        rank = cluster_rank_by_index[index]
        details.append(ConsensusVisitDetail(
            visitId=visit.visitId,
            visitDate=visit.visitDate,
            salesmanName=visit.salesmanName,
            latitude=visit.latitude,
            longitude=visit.longitude,
            clusterRank=rank,
            isConsensus=rank == 0,
            deviationDistance=deviation,
            fraudFlag=flag,
        ))
        if visit.salesmanName not in salesmen:
            salesmen.append(visit.salesmanName)

    total_visits = group.size
    dominant_visits = dominant.size
    consistency_score = calculate_consistency_score(dominant_visits, total_visits)

    if settings is not None:
        consensus_level = determine_consensus_level(
            total_visits,
            consistency_score,
            strong_score=settings.strong_consensus_score,
            weak_score=settings.weak_consensus_score,
            suspicious_score=settings.suspicious_consensus_score,
        )
    else:
        consensus_level = determine_consensus_level(total_visits, consistency_score)

    return LocationConsensus(
        shopId=group.shopId,
        shopName=group.shopName,
        shopCode=group.shopCode,
        totalVisits=total_visits,
        dominantLocation=centroid,
        dominantVisits=dominant_visits,
        consensusLevel=consensus_level,
        fraudRisk=determine_fraud_risk(suspicious_count, total_visits),
        deviatingVisits=total_visits - dominant_visits,
        locationClusters=len(clusters),
        consistencyScore=consistency_score,
        suspiciousVisits=suspicious_count,
        visitPattern=describe_visit_pattern(total_visits, dominant_visits, suspicious_count),
        salesmen=salesmen,
        visitDetails=details,
    )
