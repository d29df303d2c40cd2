"""
Module 03 - Distribution Record Persistence
File: distribution_store.py

Purpose: Save and reload one full distribution record per distribution id,
so any recipient's proof can be regenerated without the original
recipient list.

Records are stored as canonical JSON under "<key_prefix><distribution_id>".
A missing, unparsable or internally inconsistent record surfaces as
ProofUnavailableException: on-chain state is untouched, only the local
proof data needs reloading.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from pydantic import ValidationError

from core.config.runtime import DEFAULT_KEY_PREFIX
from core.merkle.merkle_tree import MerkleTree, build_merkle_tree
from core.schemas.canonical import dumps_canonical, loads_canonical
from core.schemas.distribution import DistributionRecord, Recipient
from core.schemas.errors import (
    AirdropException,
    CanonicalizationException,
    ErrorCodes,
    ProofUnavailableException,
)

from orchestrator.storage.backends import KeyValueStore, StorageError


logger = logging.getLogger(__name__)


class DistributionExistsError(StorageError):
    """A record is already stored for this distribution id."""
    def __init__(self, distribution_id: str):
        self.distribution_id = distribution_id
        super().__init__(f"Distribution {distribution_id} already has a stored record")


def check_record_integrity(record: DistributionRecord, tree: MerkleTree) -> None:
    """
    Confirm a rebuilt tree reproduces the record's stored leaves and root.

    Raises:
        ProofUnavailableException: On any mismatch (the record is corrupt)
    """
    if tree.leaves != record.leaf_bytes:
        raise ProofUnavailableException(
            "Stored leaves do not match the recipient list",
            distribution_id=record.distribution_id,
            details={"reason": ErrorCodes.ROOT_MISMATCH},
        )
    if tree.root != record.root_bytes:
        raise ProofUnavailableException(
            "Stored root does not match the rebuilt tree",
            distribution_id=record.distribution_id,
            details={
                "reason": ErrorCodes.ROOT_MISMATCH,
                "expected": record.root,
                "actual": tree.root.hex(),
            },
        )


class DistributionStore:
    """
    Durable distribution records on top of any KeyValueStore.

    Example:
        >>> store = DistributionStore(MemoryStore())
        >>> store.save("7", tree, recipients)
        >>> store.load("7").root == tree.root.hex()
        True
    """

    def __init__(self, store: KeyValueStore, key_prefix: str = DEFAULT_KEY_PREFIX) -> None:
        self.store = store
        self.key_prefix = key_prefix

    def _key(self, distribution_id: str) -> str:
        return f"{self.key_prefix}{distribution_id}"

    def exists(self, distribution_id: str) -> bool:
        """Whether a record is stored for this id."""
        return self.store.contains(self._key(str(distribution_id)))

    def save(
        self,
        distribution_id: str,
        tree: MerkleTree,
        recipients: Sequence[Recipient],
        *,
        overwrite: bool = False,
    ) -> DistributionRecord:
        """
        Persist the record for a freshly built distribution.

        Args:
            distribution_id: Id issued by the settlement contract
            tree: Tree built from exactly these recipients
            recipients: Recipient list in leaf order
            overwrite: Replace an existing record for this id

        Returns:
            The stored DistributionRecord

        Raises:
            DistributionExistsError: If a record exists and overwrite is False
            ValueError: If the tree was not built from these recipients
        """
        distribution_id = str(distribution_id)
        if len(recipients) != tree.leaf_count:
            raise ValueError(
                f"Tree has {tree.leaf_count} leaves but {len(recipients)} recipients were given"
            )
        if not overwrite and self.exists(distribution_id):
            raise DistributionExistsError(distribution_id)

        record = DistributionRecord(
            distribution_id=distribution_id,
            root=tree.root,
            recipients=list(recipients),
            leaves=tree.leaves,
        )
        self.store.set(self._key(distribution_id), dumps_canonical(record.to_document()))
        logger.info(
            "Stored distribution %s: %d recipients, root %s",
            distribution_id, len(record.recipients), record.root,
        )
        return record

    def load(self, distribution_id: str) -> DistributionRecord:
        """
        Load the stored record for a distribution.

        Only the document structure is checked here; callers that rebuild
        the tree should pass it to check_record_integrity().

        Raises:
            ProofUnavailableException: If the record is missing or corrupt
        """
        distribution_id = str(distribution_id)
        try:
            raw = self.store.get(self._key(distribution_id))
        except StorageError as e:
            raise ProofUnavailableException(
                f"Distribution data could not be read: {e}",
                distribution_id=distribution_id,
            ) from e

        if raw is None:
            raise ProofUnavailableException(
                "No distribution data stored for this id",
                distribution_id=distribution_id,
            )

        return self._parse(distribution_id, raw)

    def load_tree(self, distribution_id: str) -> tuple[DistributionRecord, MerkleTree]:
        """
        Load a record and rebuild its tree from the stored recipients.

        The rebuilt leaves and root must match what was stored.

        Raises:
            ProofUnavailableException: If the record is missing, corrupt or inconsistent
        """
        record = self.load(distribution_id)
        return record, self._rebuild(record)

    def get_tree_data(self, distribution_id: str) -> DistributionRecord | None:
        """Like load(), but returns None instead of raising."""
        try:
            return self.load(distribution_id)
        except ProofUnavailableException as e:
            logger.warning("Distribution %s unavailable: %s", distribution_id, e.message)
            return None

    def store_tree_data(
        self,
        distribution_id: str,
        document: str | dict[str, Any],
        *,
        overwrite: bool = False,
    ) -> DistributionRecord:
        """
        Import a record shared from elsewhere (e.g. another machine).

        The document is parsed and the tree rebuilt before anything is
        written, so an inconsistent record is never stored.

        Raises:
            ProofUnavailableException: If the document is malformed or inconsistent
            DistributionExistsError: If a record exists and overwrite is False
        """
        distribution_id = str(distribution_id)
        raw = document if isinstance(document, str) else dumps_canonical(document)
        record = self._parse(distribution_id, raw)
        tree = self._rebuild(record)
        return self.save(distribution_id, tree, record.recipients, overwrite=overwrite)

    def _rebuild(self, record: DistributionRecord) -> MerkleTree:
        try:
            tree = build_merkle_tree(record.recipients)
        except AirdropException as e:
            raise ProofUnavailableException(
                f"Distribution data cannot be rebuilt: {e.message}",
                distribution_id=record.distribution_id,
                details={"cause": e.code},
            ) from e
        check_record_integrity(record, tree)
        return tree

    def _parse(self, distribution_id: str, raw: str) -> DistributionRecord:
        try:
            data = loads_canonical(raw)
            if not isinstance(data, dict):
                raise ValueError("record document must be a JSON object")
            data.pop("distribution_id", None)
            record = DistributionRecord.from_document(distribution_id, data)
        except (CanonicalizationException, ValidationError, ValueError, TypeError) as e:
            raise ProofUnavailableException(
                f"Distribution data is corrupted: {e}",
                distribution_id=distribution_id,
            ) from e
        except AirdropException as e:
            # Invalid addresses inside the document
            raise ProofUnavailableException(
                f"Distribution data is corrupted: {e.message}",
                distribution_id=distribution_id,
                details={"cause": e.code},
            ) from e

        if len(record.leaves) != len(record.recipients):
            raise ProofUnavailableException(
                "Distribution data is corrupted: leaf and recipient counts differ",
                distribution_id=distribution_id,
                details={"leaves": len(record.leaves), "recipients": len(record.recipients)},
            )
        return record
