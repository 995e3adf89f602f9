"""
Location Clustering Service

Groups one shop's visits into proximity clusters with a single greedy pass:

1. Walk the visits in group order, skipping visits already assigned.
2. An unassigned visit seeds a new cluster.
3. Every other unassigned visit within the radius of that seed (inclusive)
   joins the seed's cluster and is marked assigned.
4. Repeat until every visit is assigned.

Membership is decided against the seed only, never transitively. With A-B and
B-C both inside the radius but A-C outside it, the order A, B, C yields clusters
{A, B} and {C}, while B, A, C yields a single cluster {B, A, C}. Results must be
reproducible from the same input order, so the seed order is the input order
and no clustering library is involved.

Clusters are ranked by descending size; ties keep discovery order. The rank-0
cluster is the shop's dominant cluster.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from salesops.models.schemas import GeoPoint, VisitRecord
from salesops.services.geo import haversine_distance

# Visits within this distance of a seed share its location
DEFAULT_CLUSTER_RADIUS_METERS: float = 100.0


@dataclass(frozen=True)
class LocationCluster:
    """
    A non-empty set of visits within the radius of a seed visit.

    memberIndices are positions in the shop group's visit sequence, seed first,
    then in group order.
    """
    seed: VisitRecord
    members: Tuple[VisitRecord, ...]
    memberIndices: Tuple[int, ...]
    discoveryIndex: int

    @property
    def size(self) -> int:
        return len(self.members)


def cluster_shop_visits(
    visits: Sequence[VisitRecord],
    radius_meters: float = DEFAULT_CLUSTER_RADIUS_METERS,
) -> List[LocationCluster]:
    """
    Partition a shop's visits into seed-based proximity clusters.

    Args:
        visits: The shop's valid visits in group order
        radius_meters: Maximum seed-to-member distance

    Returns:
        Clusters sorted by descending size (ties by discovery order). Every
        visit belongs to exactly one cluster. Empty input gives an empty list.
    """
    assigned = [False] * len(visits)
    clusters: List[LocationCluster] = []

    for seed_index, seed in enumerate(visits):
        if assigned[seed_index]:
            continue
        assigned[seed_index] = True
        members = [seed]
        member_indices = [seed_index]

        # Everything before seed_index is already assigned
        for candidate_index in range(seed_index + 1, len(visits)):
            if assigned[candidate_index]:
                continue
            candidate = visits[candidate_index]
            distance = haversine_distance(
                seed.latitude, seed.longitude,
                candidate.latitude, candidate.longitude,
            )
            if distance <= radius_meters:
                assigned[candidate_index] = True
                members.append(candidate)
                member_indices.append(candidate_index)

        clusters.append(LocationCluster(
            seed=seed,
            members=tuple(members),
            memberIndices=tuple(member_indices),
            discoveryIndex=len(clusters),
        ))

    # list.sort is stable, so equal sizes keep discovery order
    clusters.sort(key=lambda cluster: cluster.size, reverse=True)
    return clusters


def cluster_centroid(cluster: LocationCluster) -> GeoPoint:
    """Arithmetic mean of the members' latitudes and longitudes."""
    coordinates = np.array(
        [[member.latitude, member.longitude] for member in cluster.members],
        dtype=float,
    )
    latitude, longitude = coordinates.mean(axis=0)
    return GeoPoint(latitude=float(latitude), longitude=float(longitude))
