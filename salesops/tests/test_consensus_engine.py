"""
Test Module for the Location Consensus Engine.

End-to-end runs of analyze_location_consensus over raw visit slices:
- Dashboard scenarios (tight cluster, far outlier, seed-order chains, mixed coverage)
- Empty and fully-invalid input
- Structural properties that must hold for any input
"""

import copy

import numpy as np
import pytest

from salesops.models.enums import ConsensusLevel, FraudFlag, FraudRisk
from salesops.models.schemas import ConsensusAnalysisResult
from salesops.services.consensus_engine import analyze_location_consensus
from salesops.services.consensus_queries import summarize_consensus
from salesops.tests.conftest import make_raw_visit


# =============================================================================
# Scenarios
# =============================================================================

@pytest.mark.scenario
class TestConsensusScenarios:
    """Scenarios matching what the location verification table shows."""

    def test_tight_cluster(self, tight_cluster_visits, default_settings):
        result = analyze_location_consensus(tight_cluster_visits, settings=default_settings)

        assert len(result.shops) == 1
        shop = result.shops[0]
        assert shop.consensusLevel == ConsensusLevel.STRONG
        assert shop.consistencyScore == 100
        assert shop.fraudRisk == FraudRisk.LOW
        assert shop.locationClusters == 1
        assert all(d.deviationDistance == 0 for d in shop.visitDetails)
        assert all(d.isConsensus for d in shop.visitDetails)

    def test_far_outlier(self, outlier_visits, default_settings):
        result = analyze_location_consensus(outlier_visits, settings=default_settings)
        shop = result.shops[0]

        assert shop.dominantVisits == 4
        assert shop.consistencyScore == 80
        assert shop.consensusLevel == ConsensusLevel.WEAK
        assert shop.fraudRisk == FraudRisk.MEDIUM
        assert shop.visitPattern == "4/5 visits normal, 1 deviant - investigate"

        outlier = shop.visitDetails[4]
        assert outlier.isConsensus is False
        assert outlier.deviationDistance > 500
        assert outlier.fraudFlag == FraudFlag.LIKELY_FRAUD

        salesmen = {s.salesmanName: s for s in result.salesmen}
        kamal = salesmen['Kamal Silva']
        assert kamal.suspiciousVisits == 1
        assert kamal.fraudFlags == 1
        assert kamal.totalOutliers == 1
        assert kamal.consistencyRate == 0
        assert kamal.avgConsensusScore == 80

        nimal = salesmen['Nimal Perera']
        assert nimal.totalVisits == 4
        assert nimal.suspiciousVisits == 0
        assert nimal.totalOutliers == 0

    def test_chain_in_input_order(self, chain_visits, default_settings):
        shop = analyze_location_consensus(chain_visits, settings=default_settings).shops[0]

        assert shop.locationClusters == 2
        assert shop.dominantVisits == 2
        assert shop.consistencyScore == 67
        assert shop.consensusLevel == ConsensusLevel.SUSPICIOUS
        assert [d.isConsensus for d in shop.visitDetails] == [True, True, False]

    def test_chain_seeded_from_middle(self, chain_visits, default_settings):
        reordered = [chain_visits[1], chain_visits[0], chain_visits[2]]
        shop = analyze_location_consensus(reordered, settings=default_settings).shops[0]

        assert shop.locationClusters == 1
        assert shop.consistencyScore == 100
        assert shop.consensusLevel == ConsensusLevel.STRONG

    def test_salesman_across_strong_and_critical_shops(self, default_settings):
        raws = [
            make_raw_visit(shop='Peradeniya Stores', salesman='Ruwan', north_meters=0),
            make_raw_visit(shop='Peradeniya Stores', salesman='Ruwan', north_meters=5),
            make_raw_visit(shop='Peradeniya Stores', salesman='Ruwan', north_meters=10),
            make_raw_visit(shop='Quarry Road Mart', salesman='Sunil', north_meters=0),
            make_raw_visit(shop='Quarry Road Mart', salesman='Sunil', north_meters=5),
            make_raw_visit(shop='Quarry Road Mart', salesman='Dilan', north_meters=1000),
            make_raw_visit(shop='Quarry Road Mart', salesman='Dilan', north_meters=2000),
            make_raw_visit(shop='Quarry Road Mart', salesman='Ruwan', north_meters=3000),
        ]
        result = analyze_location_consensus(raws, settings=default_settings)
        shops = {shop.shopId: shop for shop in result.shops}

        assert shops['Peradeniya Stores'].consensusLevel == ConsensusLevel.STRONG
        assert shops['Quarry Road Mart'].consistencyScore == 40
        assert shops['Quarry Road Mart'].consensusLevel == ConsensusLevel.CRITICAL
        assert shops['Quarry Road Mart'].fraudRisk == FraudRisk.CRITICAL

        ruwan = {s.salesmanName: s for s in result.salesmen}['Ruwan']
        assert ruwan.totalShops == 2
        assert ruwan.totalVisits == 4
        assert ruwan.consistencyRate == 50
        assert ruwan.avgConsensusScore == 70

    def test_single_visit_shop(self, default_settings):
        result = analyze_location_consensus([make_raw_visit()], settings=default_settings)
        shop = result.shops[0]

        assert shop.consensusLevel == ConsensusLevel.PERFECT
        assert shop.fraudRisk == FraudRisk.LOW
        assert result.salesmen[0].perfectConsensus == 1
        assert result.salesmen[0].consistencyRate == 100


# =============================================================================
# Degenerate Input
# =============================================================================

class TestDegenerateInput:
    """The engine never raises for bad data."""

    @pytest.mark.parametrize('raw_visits', [None, [], ()])
    def test_no_visits(self, raw_visits, default_settings):
        result = analyze_location_consensus(raw_visits, settings=default_settings)

        assert result.shops == []
        assert result.salesmen == []
        assert result.validVisits == 0
        assert result.droppedVisits == 0
        assert result.overview.totalShops == 0

    def test_shop_with_only_invalid_visits_is_absent(self, default_settings):
        raws = [
            make_raw_visit(shop='Ghost Traders', latitude=0),
            make_raw_visit(shop='Ghost Traders', longitude='not-a-number'),
            make_raw_visit(shop='Kandy Central Stores'),
        ]
        result = analyze_location_consensus(raws, settings=default_settings)

        assert [shop.shopId for shop in result.shops] == ['Kandy Central Stores']
        assert result.validVisits == 1
        assert result.droppedVisits == 2

    def test_all_invalid(self, default_settings):
        raws = [make_raw_visit(latitude=0), make_raw_visit(shop=None), 'garbage', None]
        result = analyze_location_consensus(raws, settings=default_settings)

        assert result.shops == []
        assert result.droppedVisits == 4

    def test_invalid_visits_do_not_change_the_analysis(self, outlier_visits, default_settings):
        noisy = list(outlier_visits)
        noisy.insert(2, make_raw_visit(latitude=0))
        noisy.append(make_raw_visit(longitude=None))

        clean_shop = analyze_location_consensus(outlier_visits, settings=default_settings).shops[0]
        noisy_shop = analyze_location_consensus(noisy, settings=default_settings).shops[0]

        assert noisy_shop.consistencyScore == clean_shop.consistencyScore
        assert noisy_shop.fraudRisk == clean_shop.fraudRisk
        assert [d.deviationDistance for d in noisy_shop.visitDetails] == [
            d.deviationDistance for d in clean_shop.visitDetails
        ]

    @pytest.mark.parametrize('latitude,longitude', [
        (1e308, 1.0),
        (10 ** 400, 1.0),
        (-1e308, -1e308),
        (7.2906, 1e308),
        (95.0, 80.6),
    ])
    def test_extreme_coordinates_are_excluded(self, latitude, longitude, default_settings):
        raws = [
            {'shopName': 'Overflow Stores', 'latitude': latitude, 'longitude': longitude},
            {'shopName': 'Overflow Stores', 'latitude': latitude, 'longitude': longitude},
            make_raw_visit(shop='Kandy Central Stores'),
        ]
        result = analyze_location_consensus(raws, settings=default_settings)

        assert [shop.shopId for shop in result.shops] == ['Kandy Central Stores']
        assert result.droppedVisits == 2

    def test_input_is_not_modified(self, outlier_visits, default_settings):
        snapshot = copy.deepcopy(outlier_visits)
        analyze_location_consensus(outlier_visits, settings=default_settings)
        assert outlier_visits == snapshot

    def test_uses_application_settings_by_default(self, tight_cluster_visits, default_settings):
        result = analyze_location_consensus(tight_cluster_visits)
        assert result.shops[0].consensusLevel == ConsensusLevel.STRONG


# =============================================================================
# Properties
# =============================================================================

def _generated_visits(seed: int = 20260115):
    """120 visits over 12 shops; mostly on site, occasionally far off."""
    rng = np.random.default_rng(seed)
    shops = [f'Shop {i:02d}' for i in range(12)]
    salesmen = ['Nimal Perera', 'Kamal Silva', 'Amara Fernando', 'Ruwan Jayasinghe']
    raws = []
    for _ in range(120):
        shop = shops[int(rng.integers(len(shops)))]
        spread = 30 if rng.random() < 0.8 else 900
        raws.append(make_raw_visit(
            shop=shop,
            salesman=salesmen[int(rng.integers(len(salesmen)))],
            north_meters=float(rng.uniform(-spread, spread)),
            east_meters=float(rng.uniform(-spread, spread)),
        ))
    return raws


class TestEngineProperties:
    """Structural properties checked over a generated visit slice."""

    @pytest.fixture
    def network_result(self, default_settings) -> ConsensusAnalysisResult:
        return analyze_location_consensus(_generated_visits(), settings=default_settings)

    def test_visit_accounting(self, network_result):
        assert network_result.validVisits == 120
        assert sum(shop.totalVisits for shop in network_result.shops) == 120
        assert sum(s.totalVisits for s in network_result.salesmen) == 120

    def test_shop_counts(self, network_result):
        for shop in network_result.shops:
            assert 1 <= shop.dominantVisits <= shop.totalVisits
            assert shop.deviatingVisits == shop.totalVisits - shop.dominantVisits
            assert shop.deviatingVisits == sum(1 for d in shop.visitDetails if not d.isConsensus)
            assert sum(1 for d in shop.visitDetails if d.isConsensus) == shop.dominantVisits
            assert 1 <= shop.locationClusters <= shop.totalVisits
            assert 0 <= shop.consistencyScore <= 100
            assert all(d.deviationDistance >= 0 for d in shop.visitDetails)

    def test_perfect_only_for_single_visit_shops(self, network_result):
        for shop in network_result.shops:
            assert (shop.consensusLevel == ConsensusLevel.PERFECT) == (shop.totalVisits == 1)

    def test_fraud_risk_follows_suspicious_count(self, network_result):
        for shop in network_result.shops:
            assert (shop.fraudRisk == FraudRisk.LOW) == (shop.suspiciousVisits == 0)

    def test_salesman_figures(self, network_result):
        rates = [s.consistencyRate for s in network_result.salesmen]
        assert rates == sorted(rates, reverse=True)
        for salesman in network_result.salesmen:
            assert salesman.totalShops >= 1
            assert salesman.suspiciousVisits == salesman.fraudFlags
            assert 0 <= salesman.avgConsensusScore <= 100

    def test_overview_matches_shops(self, network_result):
        assert network_result.overview == summarize_consensus(network_result.shops)
        assert network_result.overview.totalOutliers == sum(
            s.totalOutliers for s in network_result.salesmen
        )

    def test_reproducible(self, network_result, default_settings):
        again = analyze_location_consensus(_generated_visits(), settings=default_settings)
        assert again == network_result
