"""
Runtime Configuration Module

Provides configuration loading and management for the airdrop core.
"""

from .runtime import (
    BuildConfig,
    RuntimeConfig,
    StorageConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "BuildConfig",
    "RuntimeConfig",
    "StorageConfig",
    "get_default_config",
    "set_default_config",
]
