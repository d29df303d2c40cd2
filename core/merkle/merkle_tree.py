"""
Module 02 - Merkle Tree Implementation
Level-by-level Merkle tree construction, proof generation, and verification
for airdrop distributions.

Module ID: M02

This module provides:
- Full tree construction (every level retained, not just the root)
- Merkle proof generation for any leaf index
- Merkle proof verification against an expected root
- Self-pairing rule for an odd trailing node

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = keccak256(address_32 || amount_32_be)
   - Implemented via core.crypto.hashing.hash_leaf()
2. Parent hashing: parent = keccak256(min(a, b) || max(a, b))
   - Implemented via core.crypto.hashing.hash_pair()
3. Odd rule: trailing node at an odd level is paired with itself
4. Empty recipient list: rejected, there is no empty-tree root
5. Single leaf: root = hash_pair(leaf, leaf), proof = [leaf]

Determinism Notes:
- Leaves keep recipient input order; the index of a recipient is its
  position in the list
- Pairing is positional, so permuting recipients changes the root even
  though each individual pair is sorted before hashing
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from core.crypto.hashing import hash_pair
from core.schemas.distribution import Recipient
from core.schemas.errors import BuildCancelledException, EmptyDistributionException


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MerkleTree:
    """
    A fully materialized Merkle tree.

    Attributes:
        root: The 32-byte root (the only value published on-chain)
        levels: All levels, levels[0] = leaves, levels[-1] = [root]
    """
    root: bytes
    levels: list[list[bytes]]

    def __post_init__(self) -> None:
        """Validate tree structure."""
        if not self.levels or len(self.levels[-1]) != 1 or self.levels[-1][0] != self.root:
            raise ValueError("Final tree level must hold exactly the root")

    @property
    def leaves(self) -> list[bytes]:
        return self.levels[0]

    @property
    def leaf_count(self) -> int:
        return len(self.levels[0])

    @property
    def depth(self) -> int:
        """Number of proof elements per leaf (levels below the root)."""
        return len(self.levels) - 1


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle proof for a single leaf in a Merkle tree.

    Attributes:
        leaf: The leaf hash being proven
        index: The 0-based index of the leaf in recipient order
        siblings: Sibling hashes from leaf level up to just below the root
        root: The Merkle root this proof is against
    """
    leaf: bytes
    index: int
    siblings: list[bytes]
    root: bytes

    def __post_init__(self) -> None:
        """Validate proof structure."""
        if self.index < 0:
            raise ValueError(f"Leaf index must be non-negative, got {self.index}")


def next_level(level: Sequence[bytes]) -> list[bytes]:
    """
    Compute the parent level of a level.

    Adjacent nodes (2i, 2i+1) are combined with hash_pair; a trailing
    unpaired node is combined with itself.
    """
    parents: list[bytes] = []
    for i in range(0, len(level), 2):
        left = level[i]
        right = level[i + 1] if i + 1 < len(level) else left
        parents.append(hash_pair(left, right))
    return parents


def build_merkle_tree_from_leaves(
    leaves: Sequence[bytes],
    *,
    should_stop: Callable[[], bool] | None = None,
) -> MerkleTree:
    """
    Build a full Merkle tree from precomputed leaf hashes.

    Algorithm:
    1. Level 0 is the leaves in the given order
    2. Repeatedly compute next_level() until one node remains
    3. A single leaf still gets one level above it: hash_pair(leaf, leaf)

    Args:
        leaves: Leaf hashes in recipient order
        should_stop: Optional callback polled between levels; when it returns
            True the build stops early with BuildCancelledException

    Returns:
        MerkleTree holding every level

    Raises:
        EmptyDistributionException: If leaves is empty

    Example:
        >>> tree = build_merkle_tree_from_leaves([leaf_a, leaf_b, leaf_c])
        >>> len(tree.levels)
        3
    """
    if len(leaves) == 0:
        raise EmptyDistributionException()

    levels: list[list[bytes]] = [list(leaves)]
    current_level = levels[0]

    # Loop runs at least once so a lone leaf is self-paired into the root
    while True:
        if should_stop is not None and should_stop():
            raise BuildCancelledException(
                details={"completed_levels": len(levels), "leaf_count": len(leaves)}
            )
        current_level = next_level(current_level)
        levels.append(current_level)
        if len(current_level) == 1:
            break

    return MerkleTree(root=current_level[0], levels=levels)


def encode_leaves(recipients: Iterable[Recipient]) -> list[bytes]:
    """Encode every recipient into its leaf hash, preserving order."""
    return [recipient.leaf() for recipient in recipients]


def build_merkle_tree(
    recipients: Sequence[Recipient],
    *,
    should_stop: Callable[[], bool] | None = None,
) -> MerkleTree:
    """
    Build the Merkle tree for an ordered recipient list.

    Raises:
        EmptyDistributionException: If recipients is empty
        AmountOverflowException: If an amount does not fit 32 bytes
    """
    if len(recipients) == 0:
        raise EmptyDistributionException()

    leaves = encode_leaves(recipients)
    tree = build_merkle_tree_from_leaves(leaves, should_stop=should_stop)
    logger.debug(
        "Built Merkle tree: %d leaves, depth %d, root %s",
        tree.leaf_count, tree.depth, tree.root.hex(),
    )
    return tree


def build_merkle_proof(tree: MerkleTree, index: int) -> MerkleProof:
    """
    Generate a Merkle proof for the leaf at the given index.

    Algorithm:
    1. Start at the target leaf index
    2. At each level below the root:
       - Sibling index is index XOR 1
       - If that index is past the end of the level, the sibling is the
         node itself (matches the self-pairing build rule)
       - Move up: index = index // 2

    Args:
        tree: Tree produced by build_merkle_tree()
        index: 0-based index of the leaf to prove

    Returns:
        MerkleProof with leaf, index, siblings (leaf-to-root), and root

    Raises:
        IndexError: If index is out of range
    """
    if index < 0 or index >= tree.leaf_count:
        raise IndexError(
            f"Leaf index {index} out of range for {tree.leaf_count} leaves"
        )

    siblings: list[bytes] = []
    current_index = index

    for level in tree.levels[:-1]:
        sibling_index = current_index ^ 1
        if sibling_index < len(level):
            siblings.append(level[sibling_index])
        else:
            siblings.append(level[current_index])
        current_index //= 2

    return MerkleProof(
        leaf=tree.leaves[index],
        index=index,
        siblings=siblings,
        root=tree.root,
    )


def compute_root_from_proof(leaf: bytes, siblings: Iterable[bytes]) -> bytes:
    """Fold a sibling path into a leaf using sorted-pair hashing."""
    current_hash = leaf
    for sibling in siblings:
        current_hash = hash_pair(current_hash, sibling)
    return current_hash


def verify_merkle_proof(leaf: bytes, siblings: Sequence[bytes], root: bytes) -> bool:
    """
    Verify a Merkle proof.

    Recomputes the root from the leaf and siblings, exactly as the
    settlement contract does, and compares bytes. Position is not needed
    because pair hashing is order-independent.

    Args:
        leaf: The leaf hash
        siblings: Sibling hashes, leaf-to-root
        root: The expected root

    Returns:
        True if the proof is valid, False otherwise
    """
    return compute_root_from_proof(leaf, siblings) == root


def compute_tree_depth(num_leaves: int) -> int:
    """
    Compute the proof length for a tree with the given number of leaves.

    A single leaf still has one level above it, so its depth is 1.
    Returns 0 for an empty tree.
    """
    if num_leaves <= 0:
        return 0

    depth = 0
    n = num_leaves
    while True:
        n = (n + 1) // 2
        depth += 1
        if n == 1:
            break
    return depth


__all__ = [
    "MerkleTree",
    "MerkleProof",
    "next_level",
    "encode_leaves",
    "build_merkle_tree",
    "build_merkle_tree_from_leaves",
    "build_merkle_proof",
    "compute_root_from_proof",
    "verify_merkle_proof",
    "compute_tree_depth",
]
