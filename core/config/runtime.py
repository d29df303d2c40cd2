"""
Runtime Configuration

Central configuration for distribution storage, tree building and logging.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


DEFAULT_STORAGE_DIR = Path.home() / ".local" / "share" / "airdrop" / "trees"
DEFAULT_KEY_PREFIX = "airdrop_tree_"


@dataclass
class StorageConfig:
    """Configuration for the distribution record store."""
    backend: str = "file"  # "file" or "memory"
    directory: str = str(DEFAULT_STORAGE_DIR)
    key_prefix: str = DEFAULT_KEY_PREFIX


@dataclass
class BuildConfig:
    """Configuration for tree construction."""
    # Recipient count at which builds move to a worker thread
    background_threshold: int = 10_000
    build_timeout_s: Optional[float] = None
    # Check every generated proof against the root before publishing
    verify_on_build: bool = True


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - JSON file
    - Programmatic construction
    """
    storage: StorageConfig = field(default_factory=StorageConfig)
    build: BuildConfig = field(default_factory=BuildConfig)
    log_level: str = "INFO"
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - AIRDROP_STORAGE_BACKEND: "file" or "memory"
        - AIRDROP_STORAGE_DIR: Directory for file-backed records
        - AIRDROP_KEY_PREFIX: Storage key prefix for records
        - AIRDROP_BACKGROUND_THRESHOLD: Recipient count for background builds
        - AIRDROP_BUILD_TIMEOUT: Seconds to wait for a background build
        - AIRDROP_VERIFY_ON_BUILD: Self-check proofs at creation (true/false)
        - AIRDROP_LOG_LEVEL: Log level
        """
        overrides: dict[str, Any] = {}

        # Storage settings
        if os.getenv("AIRDROP_STORAGE_BACKEND"):
            overrides.setdefault("storage", {})["backend"] = os.getenv("AIRDROP_STORAGE_BACKEND")
        if os.getenv("AIRDROP_STORAGE_DIR"):
            overrides.setdefault("storage", {})["directory"] = os.getenv("AIRDROP_STORAGE_DIR")
        if os.getenv("AIRDROP_KEY_PREFIX"):
            overrides.setdefault("storage", {})["key_prefix"] = os.getenv("AIRDROP_KEY_PREFIX")

        # Build settings
        if os.getenv("AIRDROP_BACKGROUND_THRESHOLD"):
            overrides.setdefault("build", {})["background_threshold"] = int(
                os.getenv("AIRDROP_BACKGROUND_THRESHOLD", "10000")
            )
        if os.getenv("AIRDROP_BUILD_TIMEOUT"):
            overrides.setdefault("build", {})["build_timeout_s"] = float(
                os.getenv("AIRDROP_BUILD_TIMEOUT", "0")
            )
        if os.getenv("AIRDROP_VERIFY_ON_BUILD"):
            overrides.setdefault("build", {})["verify_on_build"] = (
                os.getenv("AIRDROP_VERIFY_ON_BUILD", "true").lower() == "true"
            )

        if os.getenv("AIRDROP_LOG_LEVEL"):
            overrides["log_level"] = os.getenv("AIRDROP_LOG_LEVEL")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_json(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a JSON file."""
        import json
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        storage_data = data.get("storage", {})
        build_data = data.get("build", {})

        storage = StorageConfig(**storage_data) if storage_data else StorageConfig()
        build = BuildConfig(**build_data) if build_data else BuildConfig()

        return cls(
            storage=storage,
            build=build,
            log_level=data.get("log_level", "INFO"),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)

        if "storage" in overrides:
            for key, value in overrides["storage"].items():
                setattr(new_config.storage, key, value)

        if "build" in overrides:
            for key, value in overrides["build"].items():
                setattr(new_config.build, key, value)

        if "log_level" in overrides:
            new_config.log_level = overrides["log_level"]

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "storage": {
                "backend": self.storage.backend,
                "directory": self.storage.directory,
                "key_prefix": self.storage.key_prefix,
            },
            "build": {
                "background_threshold": self.build.background_threshold,
                "build_timeout_s": self.build.build_timeout_s,
                "verify_on_build": self.build.verify_on_build,
            },
            "log_level": self.log_level,
            "extra": self.extra,
        }


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig | None) -> None:
    """Set (or with None, reset) the default runtime configuration."""
    global _default_config
    _default_config = config
