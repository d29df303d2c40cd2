"""
Module 02 - Merkle Proofs Convenience Wrappers
Thin wrappers around core Merkle tree functions for cleaner API.

Module ID: M02

This module provides class-based interfaces:
- MerkleProver: Generate proofs from recipient lists
- MerkleVerifier: Verify proofs for raw leaves or (address, amount) allocations

These are convenience wrappers around the functions in merkle_tree.py and
proof_codec.py.
"""
from __future__ import annotations

from typing import Sequence

from core.crypto.hashing import hash_leaf
from core.merkle.merkle_tree import (
    MerkleProof,
    build_merkle_proof,
    build_merkle_tree,
    verify_merkle_proof,
)
from core.merkle.proof_codec import unpack_proof
from core.schemas.distribution import Recipient
from core.schemas.errors import ProofEncodingException


class MerkleProver:
    """
    Convenience class for generating Merkle proofs.

    Example:
        >>> proof = MerkleProver.prove(recipients, index=1)
        >>> proof.leaf == recipients[1].leaf()
        True
    """

    @staticmethod
    def prove(recipients: Sequence[Recipient], index: int) -> MerkleProof:
        """
        Generate a Merkle proof for the recipient at the given index.

        Builds the whole tree; callers generating many proofs should build
        once with build_merkle_tree() and call build_merkle_proof() per index.

        Raises:
            IndexError: If index is out of range
            EmptyDistributionException: If recipients is empty
        """
        tree = build_merkle_tree(recipients)
        return build_merkle_proof(tree, index)

    @staticmethod
    def compute_root(recipients: Sequence[Recipient]) -> bytes:
        """Compute the 32-byte Merkle root for a recipient list."""
        return build_merkle_tree(recipients).root


class MerkleVerifier:
    """
    Convenience class for verifying Merkle proofs.

    Example:
        >>> proof = MerkleProver.prove(recipients, index=1)
        >>> MerkleVerifier.verify(proof)
        True
    """

    @staticmethod
    def verify(proof: MerkleProof) -> bool:
        """Verify a MerkleProof against the root it carries."""
        return verify_merkle_proof(proof.leaf, proof.siblings, proof.root)

    @staticmethod
    def verify_allocation(
        address: bytes | str,
        amount: int,
        siblings: Sequence[bytes],
        root: bytes,
    ) -> bool:
        """
        Check that (address, amount) is committed to by root.

        This is the local "am I eligible" check; it runs the same fold the
        settlement contract runs at claim time.
        """
        return verify_merkle_proof(hash_leaf(address, amount), siblings, root)

    @staticmethod
    def verify_packed(
        address: bytes | str,
        amount: int,
        proof_bytes: bytes,
        root: bytes,
    ) -> bool:
        """
        Verify an allocation against a packed proof buffer.

        A buffer of invalid length is reported as not valid rather than
        raised, matching the contract's view method.
        """
        try:
            siblings = unpack_proof(proof_bytes)
        except ProofEncodingException:
            return False
        return MerkleVerifier.verify_allocation(address, amount, siblings, root)


__all__ = [
    "MerkleProver",
    "MerkleVerifier",
]
