"""
Core infrastructure package for the FastAPI backend.

Provides:
- Configuration management via pydantic-settings
- FastAPI dependency injection utilities

This module re-exports key components from submodules so other modules can write:

    from salesops.core import get_settings, SettingsDep

Components Re-exported:
    Settings: Pydantic settings class with all configuration parameters
    get_settings: Function returning the cached Settings singleton
    get_settings_dependency: FastAPI dependency returning Settings
    SettingsDep: Type alias for Settings dependency injection
"""

# =============================================================================
# Re-exports from salesops.core.config
# =============================================================================
from salesops.core.config import Settings, get_settings

# =============================================================================
# Re-exports from salesops.core.dependencies
# =============================================================================
from salesops.core.dependencies import (
    get_settings_dependency,
    SettingsDep,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'SettingsDep',
]
