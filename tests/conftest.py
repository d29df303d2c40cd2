"""
Pytest configuration and shared fixtures for airdrop tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

# Import fixture modules
_common = importlib.import_module("fixtures.common")

# Extract factory functions
make_address = _common.make_address
make_recipient = _common.make_recipient
make_recipients = _common.make_recipients
FakeSettlementClient = _common.FakeSettlementClient


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def recipients():
    """Provide five recipients with distinct addresses and amounts."""
    return make_recipients(5)


@pytest.fixture
def memory_store():
    """Provide a DistributionStore over an in-memory backend."""
    from orchestrator.storage import DistributionStore, MemoryStore
    return DistributionStore(MemoryStore())


@pytest.fixture
def file_store(tmp_path):
    """Provide a DistributionStore writing JSON files under tmp_path."""
    from orchestrator.storage import DistributionStore, FileStore
    return DistributionStore(FileStore(tmp_path / "trees"))


@pytest.fixture
def settlement():
    """Provide a fake settlement client that records its calls."""
    return FakeSettlementClient()


@pytest.fixture(autouse=True)
def _reset_default_config():
    """Keep the process-wide default RuntimeConfig from leaking between tests."""
    from core.config.runtime import set_default_config
    set_default_config(None)
    yield
    set_default_config(None)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
