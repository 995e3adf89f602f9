"""
FastAPI dependency injection module for the Sales Ops backend.

Provides reusable FastAPI dependencies so endpoint handlers never reach for
global configuration directly, which keeps them easy to test with overrides.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- SettingsDep: Type alias for injecting Settings into endpoints

Usage Examples:
    @router.post("/analyze")
    async def analyze(request: ConsensusAnalysisRequest, settings: SettingsDep):
        return analyze_location_consensus(request.visits, settings=settings)
"""

from typing import Annotated

from fastapi import Depends

from salesops.core.config import Settings, get_settings


def get_settings_dependency() -> Settings:
    """
    Return the application settings for dependency injection.

    Tests can swap configuration with
    ``app.dependency_overrides[get_settings_dependency] = lambda: Settings(...)``.
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]
