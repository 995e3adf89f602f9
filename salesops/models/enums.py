"""
Enumeration definitions for the Sales Ops location consensus backend.

All enums inherit from both `str` and `Enum` to ensure JSON serialization compatibility
with Pydantic models, so the dashboard receives the same string values it renders.
"""

from enum import Enum


class ConsensusLevel(str, Enum):
    """
    How tightly a shop's visits agree on a single location.

    - PERFECT: The shop has exactly one valid visit (nothing to disagree with)
    - STRONG: Consistency score >= 90
    - WEAK: Consistency score >= 70
    - SUSPICIOUS: Consistency score >= 50
    - CRITICAL: Consistency score < 50

    PERFECT is only ever assigned to single-visit shops. A multi-visit shop with
    every visit in one cluster is STRONG.
    """
    PERFECT = "PERFECT"
    STRONG = "STRONG"
    WEAK = "WEAK"
    SUSPICIOUS = "SUSPICIOUS"
    CRITICAL = "CRITICAL"


class FraudRisk(str, Enum):
    """
    Shop-level fraud risk derived from how many visits are flagged
    SUSPICIOUS or LIKELY_FRAUD.

    - LOW: No flagged visits
    - MEDIUM: Exactly one flagged visit in a shop with more than three visits
    - HIGH: At most half of the visits flagged
    - CRITICAL: More than half of the visits flagged
    """
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class FraudFlag(str, Enum):
    """
    Per-visit classification by distance from the shop's consensus location.

    - NORMAL: <= 100m
    - MINOR_DEVIATION: > 100m
    - SUSPICIOUS: > 200m
    - LIKELY_FRAUD: > 500m
    """
    NORMAL = "NORMAL"
    MINOR_DEVIATION = "MINOR_DEVIATION"
    SUSPICIOUS = "SUSPICIOUS"
    LIKELY_FRAUD = "LIKELY_FRAUD"


class ShopSortField(str, Enum):
    """Sortable columns of the shop consensus table."""
    FRAUD_RISK = "fraudRisk"
    CONSENSUS_LEVEL = "consensusLevel"
    CONSISTENCY_SCORE = "consistencyScore"
    TOTAL_VISITS = "totalVisits"
    DEVIATING_VISITS = "deviatingVisits"
    LOCATION_CLUSTERS = "locationClusters"
    SUSPICIOUS_VISITS = "suspiciousVisits"
    SHOP_NAME = "shopName"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
