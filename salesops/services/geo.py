"""
Geodesic helpers shared by the location consensus services.

Distances are great-circle distances on a spherical Earth (Haversine), which is
well within GPS noise at the shop-visit scale this service deals with.
"""

import math

# Mean Earth radius in meters
EARTH_RADIUS_METERS: float = 6_371_000.0


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance in meters between two coordinates given in degrees.

    The intermediate term is clamped to [0, 1] so coincident and antipodal points
    never yield NaN from floating-point drift. NaN inputs still produce NaN;
    callers filter invalid coordinates before calling this.

    Args:
        lat1: Latitude of the first point
        lng1: Longitude of the first point
        lat2: Latitude of the second point
        lng2: Longitude of the second point

    Returns:
        Distance in meters
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Comparisons are False for NaN, so NaN passes through unclamped
    if a > 1.0:
        a = 1.0
    elif a < 0.0:
        a = 0.0
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with .5 going up (12.5 -> 13, -2.5 -> -2).

    Same results as JavaScript's Math.round, which the dashboard figures are
    compared against. Python's round() sends 12.5 to 12.
    """
    return int(math.floor(value + 0.5))
