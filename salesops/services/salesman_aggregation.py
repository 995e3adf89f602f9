"""
Salesman Aggregation Service

Rolls per-shop consensus results up into per-salesman statistics.

A salesman "covers" every shop where they logged at least one valid visit.
Shop-level figures (consensus level, consistency score) are counted once per
covered shop and are not narrowed to the salesman's own visits. Visit-level
figures (suspicious visits, fraud flags, outliers) only count the salesman's
own visits.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

import numpy as np

from salesops.models.enums import ConsensusLevel
from salesops.models.schemas import LocationConsensus, SalesmanConsensusAccuracy
from salesops.services.consensus_classifier import SUSPICIOUS_FLAGS
from salesops.services.geo import round_half_up


@dataclass
class _SalesmanTally:
    shop_ids: Set[str] = field(default_factory=set)
    shop_scores: List[int] = field(default_factory=list)
    total_visits: int = 0
    perfect_consensus: int = 0
    strong_consensus: int = 0
    suspicious_visits: int = 0
    fraud_flags: int = 0
    total_outliers: int = 0


def aggregate_salesman_accuracy(
    consensus_results: Iterable[LocationConsensus],
) -> List[SalesmanConsensusAccuracy]:
    """
    Build SalesmanConsensusAccuracy for every salesman with a valid visit.

    Args:
        consensus_results: Per-shop consensus results

    Returns:
        Salesmen sorted by descending consistencyRate; ties keep the order in
        which salesmen first appear in the results
    """
    tallies: Dict[str, _SalesmanTally] = {}

    for shop in consensus_results:
        for detail in shop.visitDetails:
            tally = tallies.setdefault(detail.salesmanName, _SalesmanTally())
            tally.total_visits += 1

            if shop.shopId not in tally.shop_ids:
                tally.shop_ids.add(shop.shopId)
                tally.shop_scores.append(shop.consistencyScore)
                if shop.consensusLevel == ConsensusLevel.PERFECT:
                    tally.perfect_consensus += 1
                elif shop.consensusLevel == ConsensusLevel.STRONG:
                    tally.strong_consensus += 1

            # Both counters move together for now; consumers read them separately
            if detail.fraudFlag in SUSPICIOUS_FLAGS:
                tally.suspicious_visits += 1
                tally.fraud_flags += 1

            if not detail.isConsensus:
                tally.total_outliers += 1

    results: List[SalesmanConsensusAccuracy] = []
    for salesman_name, tally in tallies.items():
        total_shops = len(tally.shop_ids)
        if total_shops > 0:
            consistency_rate = round_half_up(
                100 * (tally.perfect_consensus + tally.strong_consensus) / total_shops
            )
            avg_score = round_half_up(float(np.mean(tally.shop_scores)))
        else:
            consistency_rate = 0
            avg_score = 0

        results.append(SalesmanConsensusAccuracy(
            salesmanName=salesman_name,
            totalShops=total_shops,
            totalVisits=tally.total_visits,
            perfectConsensus=tally.perfect_consensus,
            strongConsensus=tally.strong_consensus,
            suspiciousVisits=tally.suspicious_visits,
            fraudFlags=tally.fraud_flags,
            consistencyRate=consistency_rate,
            avgConsensusScore=avg_score,
            totalOutliers=tally.total_outliers,
        ))

    results.sort(key=lambda accuracy: accuracy.consistencyRate, reverse=True)
    return results
