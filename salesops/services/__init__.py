"""
Salesops Services Module

Business logic for GPS consensus location-fraud detection. Every service is
stateless and pure: results are recomputed from the input visit slice.

Services (in pipeline order):
- geo: Haversine distance and half-up rounding
- visit_normalizer: Raw visit entries -> VisitRecord (alias resolution, exclusion)
- shop_grouping: VisitRecords -> per-shop groups
- location_clustering: Seed-based greedy proximity clustering per shop
- consensus_classifier: Clusters -> LocationConsensus (flags, levels, risk)
- salesman_aggregation: LocationConsensus -> SalesmanConsensusAccuracy
- consensus_engine: Full pipeline entry point
- consensus_queries: Filtering, sorting, paging and summary views

All services are consumed by the API layer (salesops/api/).
"""

# =============================================================================
# Geo Helpers
# =============================================================================

from salesops.services.geo import (
    haversine_distance,
    round_half_up,
    EARTH_RADIUS_METERS,
)

# =============================================================================
# Visit Normalizer / Shop Grouper
# =============================================================================

from salesops.services.visit_normalizer import (
    normalize_visit,
    normalize_visits,
    read_visit_sheet,
    VISIT_FIELD_ALIASES,
)
from salesops.services.shop_grouping import (
    ShopVisitGroup,
    group_visits_by_shop,
)

# =============================================================================
# Clustering / Classification / Aggregation
# =============================================================================

from salesops.services.location_clustering import (
    LocationCluster,
    cluster_shop_visits,
    cluster_centroid,
    DEFAULT_CLUSTER_RADIUS_METERS,
)
from salesops.services.consensus_classifier import (
    build_location_consensus,
    classify_fraud_flag,
    calculate_consistency_score,
    determine_consensus_level,
    determine_fraud_risk,
)
from salesops.services.salesman_aggregation import aggregate_salesman_accuracy

# =============================================================================
# Engine / Queries
# =============================================================================

from salesops.services.consensus_engine import analyze_location_consensus
from salesops.services.consensus_queries import (
    filter_shops,
    sort_shops,
    paginate_shops,
    query_shops,
    list_salesmen,
    summarize_consensus,
    FRAUD_RISK_RANK,
    CONSENSUS_LEVEL_RANK,
)


__all__ = [
    # Geo
    'haversine_distance',
    'round_half_up',
    'EARTH_RADIUS_METERS',
    # Normalizer / grouper
    'normalize_visit',
    'normalize_visits',
    'read_visit_sheet',
    'VISIT_FIELD_ALIASES',
    'ShopVisitGroup',
    'group_visits_by_shop',
    # Clustering / classification / aggregation
    'LocationCluster',
    'cluster_shop_visits',
    'cluster_centroid',
    'DEFAULT_CLUSTER_RADIUS_METERS',
    'build_location_consensus',
    'classify_fraud_flag',
    'calculate_consistency_score',
    'determine_consensus_level',
    'determine_fraud_risk',
    'aggregate_salesman_accuracy',
    # Engine / queries
    'analyze_location_consensus',
    'filter_shops',
    'sort_shops',
    'paginate_shops',
    'query_shops',
    'list_salesmen',
    'summarize_consensus',
    'FRAUD_RISK_RANK',
    'CONSENSUS_LEVEL_RANK',
]
