"""
Shop Grouper Service

Partitions normalized visits by shop key. Visit order inside a group is the
input order, which the location clusterer uses as its seed order.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from salesops.models.schemas import VisitRecord


@dataclass(frozen=True)
class ShopVisitGroup:
    """All valid visits of one shop, in input order."""
    shopId: str
    shopName: str
    shopCode: Optional[str]
    visits: Tuple[VisitRecord, ...]

    @property
    def size(self) -> int:
        return len(self.visits)


def group_visits_by_shop(visits: Iterable[VisitRecord]) -> List[ShopVisitGroup]:
    """
    Group visits by shopId.

    Groups are returned in order of each shop's first visit. Only shops with at
    least one valid visit can appear, so there are never empty groups. The
    display name and shop code come from the shop's first visit that carries them.

    Args:
        visits: Normalized visits

    Returns:
        List of ShopVisitGroup
    """
    buckets: Dict[str, List[VisitRecord]] = {}
    for visit in visits:
        buckets.setdefault(visit.shopId, []).append(visit)

    groups: List[ShopVisitGroup] = []
    for shop_id, shop_visits in buckets.items():
        shop_code = next(
            (visit.shopCode for visit in shop_visits if visit.shopCode is not None),
            None,
        )
        groups.append(ShopVisitGroup(
            shopId=shop_id,
            shopName=shop_visits[0].shopName,
            shopCode=shop_code,
            visits=tuple(shop_visits),
        ))
    return groups
