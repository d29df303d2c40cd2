"""
Module 02 - Merkle Tree and Commitments
Airdrop Merkle tree construction + proof generation/verification.

Module ID: M02

This module provides:
- MerkleTree / MerkleProof: Dataclasses for a built tree and one inclusion proof
- build_merkle_tree: Build every level from an ordered recipient list
- build_merkle_proof: Generate the sibling path for one leaf index
- verify_merkle_proof: Fold a path into a leaf and compare to a root
- pack_proof / unpack_proof: Flat 32-byte-aligned wire format
- TreeBuildTask / build_merkle_tree_async: Cancellable background builds

Canonical Commitment Rules:
1. Leaf hashing: keccak256(address_32 || amount_32_be)
2. Parent hashing: keccak256(min(a, b) || max(a, b))
3. Odd rule: trailing node paired with itself at every level
4. Empty recipient list: EmptyDistributionException
5. Single leaf: root = hash_pair(leaf, leaf)

Usage:
    from core.merkle import build_merkle_tree, build_merkle_proof, verify_merkle_proof

    tree = build_merkle_tree(recipients)
    proof = build_merkle_proof(tree, index=2)
    assert verify_merkle_proof(proof.leaf, proof.siblings, tree.root)
"""
from .merkle_tree import (
    MerkleTree,
    MerkleProof,
    next_level,
    encode_leaves,
    build_merkle_tree,
    build_merkle_tree_from_leaves,
    build_merkle_proof,
    compute_root_from_proof,
    verify_merkle_proof,
    compute_tree_depth,
)

from .proof_codec import (
    pack_proof,
    unpack_proof,
)

from .merkle_proofs import (
    MerkleProver,
    MerkleVerifier,
)

from .background import (
    TreeBuildTask,
    build_merkle_tree_async,
)


__all__ = [
    # Core types
    "MerkleTree",
    "MerkleProof",
    # Core functions
    "next_level",
    "encode_leaves",
    "build_merkle_tree",
    "build_merkle_tree_from_leaves",
    "build_merkle_proof",
    "compute_root_from_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
    # Wire codec
    "pack_proof",
    "unpack_proof",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
    # Background builds
    "TreeBuildTask",
    "build_merkle_tree_async",
]
