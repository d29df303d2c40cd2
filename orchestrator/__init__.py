"""
Module 04 - Distribution Orchestration

Wires the Merkle core to persistence and the settlement contract.

Public API:
- DistributionCreator: Build, self-check, publish and persist a distribution
- CreationResult: Summary of a created distribution
- ClaimCoordinator: Regenerate, verify and submit a claim proof
- SettlementClient: Protocol for the on-chain settlement contract
- DistributionStore: Durable distribution records over a KeyValueStore
"""

from orchestrator.claims import ClaimCoordinator, SettlementClient
from orchestrator.distribution import (
    CreationResult,
    DistributionCreator,
    RecordNotPersistedError,
    verify_all_proofs,
)
from orchestrator.storage import (
    DistributionExistsError,
    DistributionStore,
    FileStore,
    KeyValueStore,
    MemoryStore,
    StorageError,
    create_store,
)

__all__ = [
    # Creation
    "CreationResult",
    "DistributionCreator",
    "RecordNotPersistedError",
    "verify_all_proofs",
    # Claims
    "ClaimCoordinator",
    "SettlementClient",
    # Storage
    "DistributionExistsError",
    "DistributionStore",
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "StorageError",
    "create_store",
]
