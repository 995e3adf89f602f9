"""
Sales Ops Backend Package.

FastAPI service layer for the sales-operations dashboard. Hosts the GPS consensus
location-fraud detection engine, which infers each shop's location from its own
visit history and flags visits and salesmen that deviate from it.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration and dependencies
    - models: Pydantic schemas and enums
    - services: Business logic services
"""

__version__ = "1.0.0"
