"""
API routers for the Sales Ops backend.

Routers:
- location_consensus: GPS consensus location-fraud detection endpoints
"""

from salesops.api.location_consensus import router as location_consensus_router

__all__ = ['location_consensus_router']
