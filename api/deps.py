"""
Module 06 - API Dependencies

Dependency injection for the API.
Provides the runtime configuration and the distribution record store.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from fastapi import Depends

from core.config.runtime import RuntimeConfig
from orchestrator.claims import ClaimCoordinator
from orchestrator.storage import DistributionStore, create_store

logger = logging.getLogger(__name__)

_store: Optional[DistributionStore] = None


def _load_runtime_config() -> RuntimeConfig:
    """Load RuntimeConfig from config file, then overlay environment variables.

    Search order for config file:
      1. ./airdrop.json
      2. ./.airdrop.json
      3. ~/.config/airdrop/config.json

    Environment variables ALWAYS override config file values.
    The .env file is loaded automatically by core.config.runtime on import.
    """
    search_paths = [
        Path.cwd() / "airdrop.json",
        Path.cwd() / ".airdrop.json",
        Path.home() / ".config" / "airdrop" / "config.json",
    ]

    config: RuntimeConfig | None = None

    for path in search_paths:
        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
                logger.info("Loaded config from %s", path)
                config = RuntimeConfig.from_dict(data)
                break
            except (OSError, ValueError, TypeError) as e:
                logger.warning("Failed to parse %s: %s", path, e)

    if config is None:
        # No config file found, start with defaults
        config = RuntimeConfig()

    # Always apply environment variable overrides
    return config.with_env_overrides()


def get_runtime_config() -> RuntimeConfig:
    return _load_runtime_config()


def get_distribution_store() -> DistributionStore:
    """
    Shared distribution store for the process.

    Built lazily from the runtime configuration; the memory backend would
    otherwise lose records between requests.
    """
    global _store
    if _store is None:
        config = _load_runtime_config()
        storage = config.storage
        if storage.backend == "file":
            storage.directory = str(Path(storage.directory).expanduser())
        _store = DistributionStore(create_store(storage), key_prefix=storage.key_prefix)
        logger.info("Using %s distribution store", storage.backend)
    return _store


def reset_distribution_store() -> None:
    """Drop the shared store so the next request rebuilds it."""
    global _store
    _store = None


def get_claim_coordinator(
    store: DistributionStore = Depends(get_distribution_store),
) -> ClaimCoordinator:
    return ClaimCoordinator(store)
