"""
Module 03 - Distribution Persistence

Provides the keyed blob store interface, its backends, and the
distribution record store built on top of them.
"""

from orchestrator.storage.backends import (
    FileStore,
    InvalidKeyError,
    KeyValueStore,
    MemoryStore,
    StorageError,
    create_store,
    validate_key,
)

from orchestrator.storage.distribution_store import (
    DistributionExistsError,
    DistributionStore,
    check_record_integrity,
)

__all__ = [
    # Backends
    "FileStore",
    "InvalidKeyError",
    "KeyValueStore",
    "MemoryStore",
    "StorageError",
    "create_store",
    "validate_key",
    # Records
    "DistributionExistsError",
    "DistributionStore",
    "check_record_integrity",
]
