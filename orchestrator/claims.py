"""
Module 04 - Claim Coordination

Turns a stored distribution record into a ready-to-submit claim: looks up
the claimer's allocation, regenerates the proof, checks it locally, packs it
and hands it to the settlement client.

Claim-time failures are user-facing and recoverable:
- NotEligibleException: address is not in the recipient list
- ProofUnavailableException: local record missing or corrupt
- VerificationMismatchException: regenerated proof does not verify (defect)

Nothing here mutates stored state.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

from core.crypto.hashing import normalize_address, to_hex
from core.merkle.merkle_tree import build_merkle_proof, verify_merkle_proof
from core.merkle.proof_codec import pack_proof
from core.schemas.distribution import ClaimTicket
from core.schemas.errors import NotEligibleException, VerificationMismatchException

from orchestrator.storage.distribution_store import DistributionStore


logger = logging.getLogger(__name__)


@runtime_checkable
class SettlementClient(Protocol):
    """
    Client for the on-chain settlement contract.

    Implementations own signing and RPC. Roots are passed as the u256 the
    contract stores (see core.crypto.hashing.root_to_int).
    """

    def create(self, root: int, total_amount: int, expiry: int | None) -> str:
        """Publish a root and escrow total_amount. Returns the distribution id."""
        ...

    def claim(self, distribution_id: str, amount: int, proof_bytes: bytes) -> Any:
        """Submit a claim. Returns a transaction receipt."""
        ...

    def has_claimed(self, distribution_id: str, address: bytes) -> bool:
        """Whether the address has already claimed from this distribution."""
        ...


class ClaimCoordinator:
    """
    Prepares and submits claims for stored distributions.

    Example:
        >>> coordinator = ClaimCoordinator(store, settlement)
        >>> ticket = coordinator.prepare_claim("7", "0xabc...")
        >>> receipt = coordinator.claim("7", "0xabc...")
    """

    def __init__(
        self,
        store: DistributionStore,
        settlement: SettlementClient | None = None,
    ) -> None:
        self.store = store
        self.settlement = settlement

    def prepare_claim(self, distribution_id: str, address: bytes | str) -> ClaimTicket:
        """
        Build the claim ticket for one address.

        Args:
            distribution_id: Distribution to claim from
            address: Claimer address (hex or raw bytes, up to 32 bytes)

        Returns:
            ClaimTicket with amount, leaf index and packed proof

        Raises:
            ProofUnavailableException: If the record is missing or corrupt
            NotEligibleException: If the address has no allocation
            VerificationMismatchException: If the proof fails local verification
        """
        distribution_id = str(distribution_id)
        claimer = to_hex(normalize_address(address))
        record, tree = self.store.load_tree(distribution_id)

        found = record.find_recipient(claimer)
        if found is None:
            raise NotEligibleException(
                "Address is not eligible for this distribution",
                distribution_id=distribution_id,
                address=claimer,
            )
        leaf_index, recipient = found

        proof = build_merkle_proof(tree, leaf_index)
        if not verify_merkle_proof(recipient.leaf(), proof.siblings, record.root_bytes):
            logger.error(
                "Proof for leaf %d of distribution %s failed local verification",
                leaf_index, distribution_id,
            )
            raise VerificationMismatchException(
                "Generated proof does not verify against the stored root",
                leaf_index=leaf_index,
                details={"distribution_id": distribution_id, "root": record.root},
            )

        logger.info(
            "Prepared claim for %s in distribution %s (leaf %d, %d siblings)",
            claimer, distribution_id, leaf_index, len(proof.siblings),
        )
        return ClaimTicket(
            distribution_id=distribution_id,
            address=claimer,
            amount=recipient.amount,
            leaf_index=leaf_index,
            leaf=proof.leaf.hex(),
            root=record.root,
            proof=[s.hex() for s in proof.siblings],
            proof_bytes=pack_proof(proof.siblings).hex(),
        )

    def has_claimed(self, distribution_id: str, address: bytes | str) -> bool:
        return self._client().has_claimed(str(distribution_id), normalize_address(address))

    def claim(self, distribution_id: str, address: bytes | str) -> Any:
        """
        Prepare a claim and submit it through the settlement client.

        Returns:
            Whatever the settlement client returns (a transaction receipt)
        """
        client = self._client()
        ticket = self.prepare_claim(distribution_id, address)
        receipt = client.claim(ticket.distribution_id, ticket.amount, ticket.packed_proof)
        logger.info(
            "Submitted claim for %s in distribution %s", ticket.address, ticket.distribution_id
        )
        return receipt

    def _client(self) -> SettlementClient:
        if self.settlement is None:
            raise RuntimeError("No settlement client configured")
        return self.settlement


__all__ = [
    "ClaimCoordinator",
    "SettlementClient",
]
