'''
Sales Ops Backend Test Suite

Test coverage for the GPS consensus location-fraud detection engine and the
API layer in front of it.

Test Modules:
-------------
- test_geo.py: Haversine distance and half-up rounding
- test_visit_normalizer.py: Alias precedence, exclusion rules, visit sheet CSV
- test_location_clustering.py: Seed-order greedy clustering
  - Partition property
  - Chains split differently depending on seed order
  - Inclusive radius, ties ranked by discovery order
- test_consensus_classifier.py: Fraud flags, consistency score, consensus level,
  fraud risk, LocationConsensus assembly
- test_salesman_aggregation.py: Per-salesman roll-up
- test_consensus_engine.py: End-to-end scenarios and structural properties
- test_consensus_queries.py: Filters, sort orders, paging, overview
- test_location_consensus_api.py: Endpoint handlers and error mapping

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

Test Dependencies:
------------------
- pytest
- pytest-asyncio

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
