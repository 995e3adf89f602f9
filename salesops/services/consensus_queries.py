"""
Consensus Query Service

Filtering, sorting, paging and summary views over the per-shop consensus
results, mirroring the controls of the dashboard's location verification table.

Sort ranks:
- fraudRisk: CRITICAL > HIGH > MEDIUM > LOW
- consensusLevel: CRITICAL > SUSPICIOUS > WEAK > STRONG > PERFECT
"""

import math
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from salesops.models.enums import ConsensusLevel, FraudRisk, ShopSortField, SortOrder
from salesops.models.schemas import (
    ConsensusOverview,
    LocationConsensus,
    ShopConsensusPage,
    ShopConsensusQuery,
)
from salesops.services.geo import round_half_up

# =============================================================================
# Rank Tables
# =============================================================================

FRAUD_RISK_RANK: Dict[FraudRisk, int] = {
    FraudRisk.CRITICAL: 4,
    FraudRisk.HIGH: 3,
    FraudRisk.MEDIUM: 2,
    FraudRisk.LOW: 1,
}

CONSENSUS_LEVEL_RANK: Dict[ConsensusLevel, int] = {
    ConsensusLevel.CRITICAL: 5,
    ConsensusLevel.SUSPICIOUS: 4,
    ConsensusLevel.WEAK: 3,
    ConsensusLevel.STRONG: 2,
    ConsensusLevel.PERFECT: 1,
}

# Dashboard dropdowns send "All" for "no filter"
ALL_FILTER_VALUE: str = 'All'

DEFAULT_PAGE_SIZE: int = 25


def _is_unset(value: Optional[str]) -> bool:
    return value is None or value == ALL_FILTER_VALUE or not str(value).strip()


# =============================================================================
# Filtering / Sorting / Paging
# =============================================================================

def filter_shops(
    shops: Iterable[LocationConsensus],
    consensus_level: Optional[ConsensusLevel] = None,
    fraud_risk: Optional[FraudRisk] = None,
    salesman: Optional[str] = None,
    search: Optional[str] = None,
    suspicious_only: bool = False,
) -> List[LocationConsensus]:
    """
    Filter shop consensus results.

    Args:
        shops: Shop consensus results
        consensus_level: Keep only shops at this consensus level
        fraud_risk: Keep only shops at this fraud risk
        salesman: Keep only shops with at least one visit by this salesman
        search: Case-insensitive substring over shop name, shop code and salesmen
        suspicious_only: Keep only shops with a SUSPICIOUS/LIKELY_FRAUD visit

    Returns:
        Matching shops, in their original order
    """
    needle = None if _is_unset(search) else search.strip().lower()
    salesman_filter = None if _is_unset(salesman) else salesman

    matches: List[LocationConsensus] = []
    for shop in shops:
        if consensus_level is not None and shop.consensusLevel != consensus_level:
            continue
        if fraud_risk is not None and shop.fraudRisk != fraud_risk:
            continue
        if salesman_filter is not None and salesman_filter not in shop.salesmen:
            continue
        if suspicious_only and shop.suspiciousVisits == 0:
            continue
        if needle is not None:
            haystack = [shop.shopId, shop.shopName, shop.shopCode or '', *shop.salesmen]
            if not any(needle in value.lower() for value in haystack):
                continue
        matches.append(shop)
    return matches


def _sort_key(shop: LocationConsensus, sort_by: ShopSortField):
    if sort_by == ShopSortField.FRAUD_RISK:
        return FRAUD_RISK_RANK[shop.fraudRisk]
    if sort_by == ShopSortField.CONSENSUS_LEVEL:
        return CONSENSUS_LEVEL_RANK[shop.consensusLevel]
    if sort_by == ShopSortField.SHOP_NAME:
        return shop.shopName.lower()
    return getattr(shop, sort_by.value)


def sort_shops(
    shops: Iterable[LocationConsensus],
    sort_by: ShopSortField = ShopSortField.FRAUD_RISK,
    order: SortOrder = SortOrder.DESC,
) -> List[LocationConsensus]:
    """
    Sort shop consensus results; ties keep their input order in either direction.
    """
    return sorted(
        shops,
        key=lambda shop: _sort_key(shop, sort_by),
        reverse=order == SortOrder.DESC,
    )


def paginate_shops(
    shops: Sequence[LocationConsensus],
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ShopConsensusPage:
    """
    Slice one 1-based page out of the results.

    A page past the end returns no items but still reports the totals.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    total = len(shops)
    start = (page - 1) * page_size
    return ShopConsensusPage(
        items=list(shops[start:start + page_size]),
        total=total,
        page=page,
        pageSize=page_size,
        totalPages=math.ceil(total / page_size),
    )


def query_shops(
    shops: Sequence[LocationConsensus],
    query: ShopConsensusQuery,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: Optional[int] = None,
) -> ShopConsensusPage:
    """Apply a ShopConsensusQuery's filters, sort order and paging in one step."""
    filtered = filter_shops(
        shops,
        consensus_level=query.consensusLevel,
        fraud_risk=query.fraudRisk,
        salesman=query.salesman,
        search=query.search,
        suspicious_only=query.suspiciousOnly,
    )
    ordered = sort_shops(filtered, sort_by=query.sortBy, order=query.sortOrder)

    page_size = query.pageSize or default_page_size
    if max_page_size is not None:
        page_size = min(page_size, max_page_size)
    return paginate_shops(ordered, page=query.page, page_size=page_size)


# =============================================================================
# Summary Views
# =============================================================================

def list_salesmen(shops: Iterable[LocationConsensus]) -> List[str]:
    """Alphabetical list of every salesman appearing in the results."""
    names = set()
    for shop in shops:
        names.update(shop.salesmen)
    return sorted(names)


def summarize_consensus(shops: Sequence[LocationConsensus]) -> ConsensusOverview:
    """
    Network-wide overview of a set of shop consensus results.

    Every consensus level and fraud risk value is present in the count maps,
    with 0 where no shop has it.
    """
    level_counts = {level.value: 0 for level in ConsensusLevel}
    risk_counts = {risk.value: 0 for risk in FraudRisk}
    for shop in shops:
        level_counts[shop.consensusLevel.value] += 1
        risk_counts[shop.fraudRisk.value] += 1

    single_visit_shops = sum(1 for shop in shops if shop.totalVisits == 1)
    if shops:
        avg_score = round_half_up(float(np.mean([shop.consistencyScore for shop in shops])))
    else:
        avg_score = 0

    return ConsensusOverview(
        totalShops=len(shops),
        totalVisits=sum(shop.totalVisits for shop in shops),
        shopsWithMultipleVisits=len(shops) - single_visit_shops,
        singleVisitShops=single_visit_shops,
        consensusLevelCounts=level_counts,
        fraudRiskCounts=risk_counts,
        totalSuspiciousVisits=sum(shop.suspiciousVisits for shop in shops),
        totalOutliers=sum(shop.deviatingVisits for shop in shops),
        avgConsistencyScore=avg_score,
    )
