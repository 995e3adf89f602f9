"""
Pytest Configuration and Shared Fixtures for Sales Ops Backend Tests.

This module provides fixtures and helpers for all backend tests, supporting:
- Coordinate helpers that place visits a known number of meters apart
- Raw visit builders using the visit sheet's aliased field names
- Scenario fixtures for the consensus engine (tight cluster, outlier, chains)
- Default Settings instances independent of the local environment

Dependencies:
- pytest
- pytest-asyncio (async API handler tests)
- pandas (visit sheet CSV fixtures)
"""

import math
from typing import Any, Dict, Generator, List, Optional, Tuple

import pandas as pd
import pytest

from salesops.core.config import Settings, get_settings
from salesops.models.schemas import VisitRecord
from salesops.services.geo import EARTH_RADIUS_METERS


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Configure custom pytest markers for test organization.

    Custom markers defined:
    - parity: Tests pinning behavior the dashboard already shows users
    - scenario: End-to-end engine scenarios
    """
    config.addinivalue_line(
        'markers',
        'parity: marks tests validating results match the dashboard'
    )
    config.addinivalue_line(
        'markers',
        'scenario: marks end-to-end consensus engine scenarios'
    )


# ============================================================
# COORDINATE HELPERS
# ============================================================

# Meters spanned by one degree of latitude on the Haversine sphere
METERS_PER_DEGREE: float = EARTH_RADIUS_METERS * math.pi / 180

# Kandy, Sri Lanka
BASE_LATITUDE: float = 7.2906
BASE_LONGITUDE: float = 80.6337


def offset_point(
    latitude: float,
    longitude: float,
    north_meters: float = 0.0,
    east_meters: float = 0.0,
) -> Tuple[float, float]:
    """
    Move a coordinate by a number of meters north and east.

    A pure north offset is exact under the Haversine formula; east offsets are
    accurate to well under a millimeter at shop-visit distances.

    Usage:
        lat, lng = offset_point(BASE_LATITUDE, BASE_LONGITUDE, north_meters=600)
    """
    new_latitude = latitude + north_meters / METERS_PER_DEGREE
    new_longitude = longitude + east_meters / (
        METERS_PER_DEGREE * math.cos(math.radians(latitude))
    )
    return new_latitude, new_longitude


def make_raw_visit(
    shop: Optional[str] = 'Kandy Central Stores',
    salesman: Optional[str] = 'Nimal Perera',
    north_meters: float = 0.0,
    east_meters: float = 0.0,
    visit_date: Optional[str] = '2026-01-15 09:30',
    **extra: Any,
) -> Dict[str, Any]:
    """
    Build a raw visit entry shaped like a visit sheet row.

    Coordinates are offsets from the base point; extra keyword arguments are
    merged in last so tests can add or override aliased fields.
    """
    latitude, longitude = offset_point(BASE_LATITUDE, BASE_LONGITUDE, north_meters, east_meters)
    raw: Dict[str, Any] = {
        'latitude': latitude,
        'longitude': longitude,
    }
    if shop is not None:
        raw['shopName'] = shop
    if salesman is not None:
        raw['salesman'] = salesman
    if visit_date is not None:
        raw['checkInDateTime'] = visit_date
    raw.update(extra)
    return raw


def make_visit_record(
    visit_id: str,
    north_meters: float = 0.0,
    east_meters: float = 0.0,
    salesman: str = 'Nimal Perera',
    shop: str = 'Kandy Central Stores',
    shop_code: Optional[str] = None,
) -> VisitRecord:
    """Build an already-normalized visit at an offset from the base point."""
    latitude, longitude = offset_point(BASE_LATITUDE, BASE_LONGITUDE, north_meters, east_meters)
    return VisitRecord(
        visitId=visit_id,
        salesmanName=salesman,
        shopId=shop,
        shopName=shop,
        shopCode=shop_code,
        latitude=latitude,
        longitude=longitude,
    )


def create_csv_bytes(df: pd.DataFrame) -> bytes:
    """
    Convert DataFrame to CSV bytes for visit sheet tests.

    The output excludes the DataFrame index to match the sheet export format.
    """
    return df.to_csv(index=False).encode('utf-8')


# ============================================================
# SETTINGS FIXTURES
# ============================================================

@pytest.fixture
def default_settings() -> Generator[Settings, None, None]:
    """
    Settings with built-in defaults, ignoring any local .env file.

    The get_settings cache is cleared around the test so code paths that fall
    back to get_settings() see a fresh instance.
    """
    get_settings.cache_clear()
    yield Settings(_env_file=None)
    get_settings.cache_clear()


# ============================================================
# SCENARIO FIXTURES
# ============================================================

@pytest.fixture
def tight_cluster_visits() -> List[Dict[str, Any]]:
    """Three visits at identical coordinates for one shop."""
    return [
        make_raw_visit(visit_date='2026-01-13 09:00'),
        make_raw_visit(visit_date='2026-01-14 09:00'),
        make_raw_visit(visit_date='2026-01-15 09:00'),
    ]


@pytest.fixture
def outlier_visits() -> List[Dict[str, Any]]:
    """
    Five visits: four within 50m of each other, one 600m away.

    The outlier is logged by a different salesman.
    """
    return [
        make_raw_visit(north_meters=0, east_meters=0, visit_date='2026-01-11 09:00'),
        make_raw_visit(north_meters=20, east_meters=10, visit_date='2026-01-12 09:00'),
        make_raw_visit(north_meters=-15, east_meters=20, visit_date='2026-01-13 09:00'),
        make_raw_visit(north_meters=10, east_meters=-20, visit_date='2026-01-14 09:00'),
        make_raw_visit(
            salesman='Kamal Silva',
            north_meters=600,
            visit_date='2026-01-15 09:00',
        ),
    ]


@pytest.fixture
def chain_visits() -> List[Dict[str, Any]]:
    """
    Three visits on a north-south line at 0m, 80m and 160m.

    Neighbors are within 100m of each other; the two ends are not.
    """
    return [
        make_raw_visit(north_meters=0, visitId='A'),
        make_raw_visit(north_meters=80, visitId='B'),
        make_raw_visit(north_meters=160, visitId='C'),
    ]


# ============================================================
# MODULE EXPORTS
# ============================================================

__all__ = [
    'BASE_LATITUDE',
    'BASE_LONGITUDE',
    'METERS_PER_DEGREE',
    'offset_point',
    'make_raw_visit',
    'make_visit_record',
    'create_csv_bytes',
]
