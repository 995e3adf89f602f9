"""
Location Consensus Engine

Single entry point for GPS consensus location-fraud detection. A run is a pure
batch computation over one slice of visit data:

    raw visits -> normalize -> group by shop -> cluster -> classify -> aggregate

Nothing is cached or persisted; the dashboard calls this again whenever the
visit slice changes. The run never raises for bad data: invalid visits are
excluded during normalization and shops left without valid visits do not
appear in the output.
"""

import logging
from typing import Any, List, Optional

from salesops.core.config import Settings, get_settings
from salesops.models.schemas import ConsensusAnalysisResult, LocationConsensus
from salesops.services.consensus_classifier import build_location_consensus
from salesops.services.consensus_queries import summarize_consensus
from salesops.services.location_clustering import cluster_shop_visits
from salesops.services.salesman_aggregation import aggregate_salesman_accuracy
from salesops.services.shop_grouping import group_visits_by_shop
from salesops.services.visit_normalizer import materialize_raw_visits, normalize_visits

# Configure module logger
logger = logging.getLogger(__name__)


def analyze_location_consensus(
    raw_visits: Any,
    settings: Optional[Settings] = None,
) -> ConsensusAnalysisResult:
    """
    Run the full consensus analysis over a slice of raw visits.

    Args:
        raw_visits: Ordered collection of raw visit entries (dicts with aliased
            field names). None or empty gives an empty result.
        settings: Clustering radius and classification thresholds; the cached
            application settings are used when None

    Returns:
        ConsensusAnalysisResult with shops in order of first visit, salesmen by
        descending consistency rate, and a network-wide overview
    """
    if settings is None:
        settings = get_settings()

    entries = materialize_raw_visits(raw_visits)
    visits = normalize_visits(entries)

    shops: List[LocationConsensus] = []
    for group in group_visits_by_shop(visits):
        clusters = cluster_shop_visits(group.visits, radius_meters=settings.cluster_radius_meters)
        shops.append(build_location_consensus(group, clusters, settings=settings))

    salesmen = aggregate_salesman_accuracy(shops)
    overview = summarize_consensus(shops)

    logger.info(
        f"Location consensus: {len(shops)} shops, {len(visits)} valid visits "
        f"({len(entries) - len(visits)} excluded), {len(salesmen)} salesmen, "
        f"{overview.totalSuspiciousVisits} suspicious visits"
    )

    return ConsensusAnalysisResult(
        shops=shops,
        salesmen=salesmen,
        overview=overview,
        validVisits=len(visits),
        droppedVisits=len(entries) - len(visits),
    )
