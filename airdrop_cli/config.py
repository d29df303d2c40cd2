"""
Module 05 - CLI Configuration

Configuration management for the airdrop CLI.
Supports environment variables and configuration files.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from core.config.runtime import (
    DEFAULT_KEY_PREFIX,
    DEFAULT_STORAGE_DIR,
    BuildConfig,
    RuntimeConfig,
    StorageConfig,
)


# Environment variable prefix
ENV_PREFIX = "AIRDROP_"


@dataclass
class CLIConfig:
    """Main CLI configuration."""

    # Storage
    storage_backend: str = "file"
    storage_dir: str = str(DEFAULT_STORAGE_DIR)
    key_prefix: str = DEFAULT_KEY_PREFIX

    # Tree building
    background_threshold: int = 10_000
    build_timeout: float | None = None
    verify_on_build: bool = True

    # Logging
    log_level: str = "WARNING"
    log_file: str | None = None

    # Output
    default_output_format: str = "human"  # "human" or "json"

    def to_runtime_config(self) -> RuntimeConfig:
        """Translate to the core RuntimeConfig."""
        return RuntimeConfig(
            storage=StorageConfig(
                backend=self.storage_backend,
                directory=self.storage_dir,
                key_prefix=self.key_prefix,
            ),
            build=BuildConfig(
                background_threshold=self.background_threshold,
                build_timeout_s=self.build_timeout,
                verify_on_build=self.verify_on_build,
            ),
            log_level=self.log_level,
        )


def load_config_from_env() -> CLIConfig:
    """Load configuration from environment variables."""
    config = CLIConfig()

    # Storage
    config.storage_backend = os.getenv(f"{ENV_PREFIX}STORAGE_BACKEND", config.storage_backend)
    config.storage_dir = os.getenv(f"{ENV_PREFIX}STORAGE_DIR", config.storage_dir)
    config.key_prefix = os.getenv(f"{ENV_PREFIX}KEY_PREFIX", config.key_prefix)

    # Tree building
    if os.getenv(f"{ENV_PREFIX}BACKGROUND_THRESHOLD"):
        config.background_threshold = int(os.getenv(f"{ENV_PREFIX}BACKGROUND_THRESHOLD", "10000"))
    if os.getenv(f"{ENV_PREFIX}BUILD_TIMEOUT"):
        config.build_timeout = float(os.getenv(f"{ENV_PREFIX}BUILD_TIMEOUT", "0"))
    if os.getenv(f"{ENV_PREFIX}VERIFY_ON_BUILD"):
        config.verify_on_build = os.getenv(f"{ENV_PREFIX}VERIFY_ON_BUILD", "true").lower() == "true"

    # Logging
    config.log_level = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", config.log_level)
    config.log_file = os.getenv(f"{ENV_PREFIX}LOG_FILE")

    return config


def load_config_from_file(path: Path) -> CLIConfig:
    """Load configuration from a JSON file."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    config = CLIConfig()

    # Storage
    storage = data.get("storage", {})
    config.storage_backend = storage.get("backend", config.storage_backend)
    config.storage_dir = storage.get("directory", config.storage_dir)
    config.key_prefix = storage.get("key_prefix", config.key_prefix)

    # Tree building
    build = data.get("build", {})
    config.background_threshold = build.get("background_threshold", config.background_threshold)
    config.build_timeout = build.get("build_timeout_s", config.build_timeout)
    config.verify_on_build = build.get("verify_on_build", config.verify_on_build)

    # Logging
    config.log_level = data.get("log_level", config.log_level)
    config.log_file = data.get("log_file", config.log_file)

    config.default_output_format = data.get("default_output_format", config.default_output_format)

    return config


def load_config(config_path: Path | None = None) -> CLIConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration
    """
    # Start with defaults
    config = CLIConfig()

    # Load from file if provided
    if config_path is not None:
        config = load_config_from_file(config_path)

    # Check for default config locations
    default_paths = [
        Path.cwd() / "airdrop.json",
        Path.cwd() / ".airdrop.json",
        Path.home() / ".config" / "airdrop" / "config.json",
    ]

    if config_path is None:
        for default_path in default_paths:
            if default_path.exists():
                config = load_config_from_file(default_path)
                break

    # Override with environment variables
    env_config = load_config_from_env()

    # Merge env into config (env takes precedence)
    if os.getenv(f"{ENV_PREFIX}STORAGE_BACKEND"):
        config.storage_backend = env_config.storage_backend
    if os.getenv(f"{ENV_PREFIX}STORAGE_DIR"):
        config.storage_dir = env_config.storage_dir
    if os.getenv(f"{ENV_PREFIX}KEY_PREFIX"):
        config.key_prefix = env_config.key_prefix
    if os.getenv(f"{ENV_PREFIX}BACKGROUND_THRESHOLD"):
        config.background_threshold = env_config.background_threshold
    if os.getenv(f"{ENV_PREFIX}BUILD_TIMEOUT"):
        config.build_timeout = env_config.build_timeout
    if os.getenv(f"{ENV_PREFIX}VERIFY_ON_BUILD"):
        config.verify_on_build = env_config.verify_on_build
    if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
        config.log_level = env_config.log_level
    if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
        config.log_file = env_config.log_file

    return config


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """{
  "storage": {
    "backend": "file",
    "directory": "~/.local/share/airdrop/trees",
    "key_prefix": "airdrop_tree_"
  },
  "build": {
    "background_threshold": 10000,
    "build_timeout_s": null,
    "verify_on_build": true
  },
  "log_level": "WARNING",
  "log_file": null,
  "default_output_format": "human"
}
"""
