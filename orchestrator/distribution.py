"""
Module 04 - Distribution Creation

Creation flow:
1. Encode leaves and build the tree (on a worker thread for large lists)
2. Self-check every proof against the root
3. Publish the root through the settlement client
4. Persist the distribution record under the issued id

Any build-time failure aborts before the settlement client sees the root.
"""
from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from core.config.runtime import RuntimeConfig, get_default_config
from core.crypto.hashing import HASH_SIZE, root_to_int
from core.merkle.background import TreeBuildTask
from core.merkle.merkle_tree import (
    MerkleTree,
    build_merkle_proof,
    build_merkle_tree,
    verify_merkle_proof,
)
from core.schemas.canonical import dumps_canonical
from core.schemas.distribution import DistributionRecord, Recipient, total_amount
from core.schemas.errors import (
    BuildCancelledException,
    VerificationMismatchException,
    ZeroRootException,
)

from orchestrator.claims import SettlementClient
from orchestrator.storage.backends import StorageError
from orchestrator.storage.distribution_store import DistributionStore


logger = logging.getLogger(__name__)


@dataclass
class CreationResult:
    """Summary of a created distribution."""
    distribution_id: str
    root: str
    recipient_count: int
    total_amount: int
    depth: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "distribution_id": self.distribution_id,
            "root": self.root,
            "recipient_count": self.recipient_count,
            "total_amount": str(self.total_amount),
            "depth": self.depth,
        }


class RecordNotPersistedError(StorageError):
    """
    A root was published but its record could not be stored.

    The record document is attached (and logged) so it can be re-imported
    with DistributionStore.store_tree_data().
    """
    def __init__(self, distribution_id: str, document: dict[str, Any]):
        self.distribution_id = distribution_id
        self.document = document
        super().__init__(
            f"Distribution {distribution_id} was published but its record was not stored"
        )


def verify_all_proofs(tree: MerkleTree) -> None:
    """
    Generate and check the proof for every leaf.

    Raises:
        VerificationMismatchException: On the first leaf that fails
    """
    for index in range(tree.leaf_count):
        proof = build_merkle_proof(tree, index)
        if not verify_merkle_proof(proof.leaf, proof.siblings, tree.root):
            logger.error("Self-check failed for leaf %d of %d", index, tree.leaf_count)
            raise VerificationMismatchException(
                "Generated proof does not verify against the built root",
                leaf_index=index,
                details={"root": tree.root.hex()},
            )


class DistributionCreator:
    """
    Builds, publishes and records new distributions.

    Example:
        >>> creator = DistributionCreator(store, settlement)
        >>> result = creator.create(recipients, expiry=1767225600)
        >>> result.distribution_id
        '7'
    """

    def __init__(
        self,
        store: DistributionStore,
        settlement: Optional[SettlementClient] = None,
        config: Optional[RuntimeConfig] = None,
    ) -> None:
        self.store = store
        self.settlement = settlement
        self.config = config or get_default_config()

    def build(self, recipients: Sequence[Recipient]) -> MerkleTree:
        """
        Build (and optionally self-check) the tree for a recipient list.

        Raises:
            EmptyDistributionException: If recipients is empty
            AmountOverflowException: If an amount does not fit 32 bytes
            BuildCancelledException: If a background build was cancelled
            VerificationMismatchException: If the self-check fails
            ZeroRootException: If the root is all zeros
        """
        build_cfg = self.config.build
        if len(recipients) >= build_cfg.background_threshold:
            task = TreeBuildTask(recipients).start()
            try:
                tree = task.result(timeout=build_cfg.build_timeout_s)
            except concurrent.futures.TimeoutError as e:
                task.cancel()
                raise BuildCancelledException(
                    f"Tree build timed out after {build_cfg.build_timeout_s}s",
                    details={
                        "timeout_s": build_cfg.build_timeout_s,
                        "leaf_count": len(recipients),
                    },
                ) from e
        else:
            tree = build_merkle_tree(recipients)

        if build_cfg.verify_on_build:
            verify_all_proofs(tree)

        if tree.root == bytes(HASH_SIZE):
            raise ZeroRootException()

        logger.info(
            "Built tree: %d leaves, depth %d, root %s",
            tree.leaf_count, tree.depth, tree.root.hex(),
        )
        return tree

    def create(
        self,
        recipients: Sequence[Recipient],
        expiry: int | None = None,
    ) -> CreationResult:
        """
        Run the full creation flow.

        Args:
            recipients: Ordered recipient list; order fixes leaf indices
            expiry: Claim deadline passed through to the settlement contract

        Returns:
            CreationResult with the issued distribution id
        """
        if self.settlement is None:
            raise RuntimeError("No settlement client configured")

        recipients = list(recipients)
        tree = self.build(recipients)
        total = total_amount(recipients)

        distribution_id = str(self.settlement.create(root_to_int(tree.root), total, expiry))
        logger.info("Settlement contract issued distribution %s", distribution_id)

        try:
            # The issued id is authoritative; a record left under it is stale
            if self.store.exists(distribution_id):
                logger.warning(
                    "Replacing stale record stored under distribution %s", distribution_id
                )
            self.store.save(distribution_id, tree, recipients, overwrite=True)
        except StorageError as e:
            document = DistributionRecord(
                distribution_id=distribution_id,
                root=tree.root,
                recipients=recipients,
                leaves=tree.leaves,
            ).to_document()
            logger.error(
                "Distribution %s published but not stored (%s); record document: %s",
                distribution_id, e, dumps_canonical(document),
            )
            raise RecordNotPersistedError(distribution_id, document) from e

        return CreationResult(
            distribution_id=distribution_id,
            root=tree.root.hex(),
            recipient_count=len(recipients),
            total_amount=total,
            depth=tree.depth,
        )


__all__ = [
    "CreationResult",
    "DistributionCreator",
    "RecordNotPersistedError",
    "verify_all_proofs",
]
