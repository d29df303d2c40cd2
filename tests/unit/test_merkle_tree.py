"""
Module 02 - Merkle Tree Unit Tests
Tests for core/merkle/merkle_tree.py and core/merkle/merkle_proofs.py

Covers:
1. Root determinism and sensitivity (amount change, permutation)
2. Odd rule - trailing node paired with itself at every level
3. Proof verification for every index of every list size
4. Tamper detection - tampered sibling/leaf/root fails verification
5. Empty list rejected; single leaf root is hash_pair(leaf, leaf)
6. End-to-end five-recipient scenario
"""
import pytest

from core.crypto.hashing import hash_leaf, hash_pair, keccak256
from core.merkle.merkle_tree import (
    MerkleProof,
    MerkleTree,
    build_merkle_proof,
    build_merkle_tree,
    build_merkle_tree_from_leaves,
    compute_root_from_proof,
    compute_tree_depth,
    next_level,
    verify_merkle_proof,
)
from core.merkle.merkle_proofs import MerkleProver, MerkleVerifier
from core.merkle.proof_codec import pack_proof
from core.schemas.distribution import Recipient
from core.schemas.errors import BuildCancelledException, EmptyDistributionException

from fixtures.common import make_address, make_recipient, make_recipients


class TestEmptyTree:
    """Tests for empty tree behavior."""

    def test_empty_recipients_raises(self):
        with pytest.raises(EmptyDistributionException) as exc_info:
            build_merkle_tree([])
        assert exc_info.value.code == "EMPTY_DISTRIBUTION"

    def test_empty_leaves_raises(self):
        with pytest.raises(EmptyDistributionException):
            build_merkle_tree_from_leaves([])


class TestSingleLeaf:
    """Tests for single leaf tree behavior."""

    def test_root_is_self_pair(self):
        """Root of a single-leaf tree is hash_pair(leaf, leaf), not the leaf."""
        recipient = make_recipient(1)
        tree = build_merkle_tree([recipient])
        leaf = recipient.leaf()

        assert tree.root == hash_pair(leaf, leaf)
        assert tree.root != leaf
        assert tree.levels == [[leaf], [tree.root]]

    def test_proof_is_leaf_itself(self):
        recipient = make_recipient(1)
        tree = build_merkle_tree([recipient])
        proof = build_merkle_proof(tree, 0)

        assert proof.siblings == [recipient.leaf()]
        assert verify_merkle_proof(proof.leaf, proof.siblings, tree.root)

    def test_depth_is_one(self):
        tree = build_merkle_tree([make_recipient(1)])
        assert tree.depth == 1


class TestTwoLeaves:
    """Tests for two leaf tree."""

    def test_root_is_pair_hash(self):
        a, b = make_recipients(2)
        tree = build_merkle_tree([a, b])
        assert tree.root == hash_pair(a.leaf(), b.leaf())

    def test_proofs_are_opposite_leaves(self):
        a, b = make_recipients(2)
        tree = build_merkle_tree([a, b])

        assert build_merkle_proof(tree, 0).siblings == [b.leaf()]
        assert build_merkle_proof(tree, 1).siblings == [a.leaf()]


class TestOddRule:
    """Tests for the self-pairing rule for odd levels."""

    def test_three_recipients_structure(self):
        """Level sizes 3 -> 2 -> 1; leaf 2 is paired with itself."""
        recipients = make_recipients(3)
        leaves = [r.leaf() for r in recipients]
        tree = build_merkle_tree(recipients)

        assert [len(level) for level in tree.levels] == [3, 2, 1]
        assert tree.levels[1] == [
            hash_pair(leaves[0], leaves[1]),
            hash_pair(leaves[2], leaves[2]),
        ]

    def test_three_recipients_proofs(self):
        recipients = make_recipients(3)
        leaves = [r.leaf() for r in recipients]
        tree = build_merkle_tree(recipients)

        for index in range(3):
            assert len(build_merkle_proof(tree, index).siblings) == 2

        proof = build_merkle_proof(tree, 2)
        assert proof.siblings[0] == leaves[2]
        assert proof.siblings[1] == tree.levels[1][0]
        assert verify_merkle_proof(leaves[2], proof.siblings, tree.root)

    def test_next_level_odd_count(self):
        nodes = [keccak256(bytes([i])) for i in range(5)]
        parents = next_level(nodes)

        assert len(parents) == 3
        assert parents[-1] == hash_pair(nodes[4], nodes[4])

    def test_odd_rule_applies_at_upper_levels(self):
        """Six leaves give an odd middle level (3 nodes)."""
        tree = build_merkle_tree(make_recipients(6))
        assert [len(level) for level in tree.levels] == [6, 3, 2, 1]
        assert tree.levels[2][1] == hash_pair(tree.levels[1][2], tree.levels[1][2])


class TestRootDeterminism:
    """Tests for root determinism and sensitivity."""

    def test_same_recipients_same_root(self):
        assert build_merkle_tree(make_recipients(7)).root == build_merkle_tree(make_recipients(7)).root

    def test_amount_change_changes_root(self):
        recipients = make_recipients(4)
        changed = list(recipients)
        changed[2] = Recipient(address=recipients[2].address, amount=recipients[2].amount + 1)

        assert build_merkle_tree(recipients).root != build_merkle_tree(changed).root

    def test_permutation_changes_root(self):
        recipients = make_recipients(4)
        swapped = [recipients[0], recipients[2], recipients[1], recipients[3]]

        assert build_merkle_tree(recipients).root != build_merkle_tree(swapped).root

    def test_duplicate_recipients_allowed(self):
        """Duplicate (address, amount) pairs give identical leaves."""
        r = make_recipient(1)
        tree = build_merkle_tree([r, r, make_recipient(2)])

        assert tree.leaves[0] == tree.leaves[1]
        for index in range(3):
            proof = build_merkle_proof(tree, index)
            assert verify_merkle_proof(proof.leaf, proof.siblings, tree.root)

    def test_leaves_in_input_order(self):
        recipients = make_recipients(5)
        tree = build_merkle_tree(recipients)
        assert tree.leaves == [hash_leaf(r.address, r.amount) for r in recipients]


class TestProofVerification:
    """Tests for proof generation and verification."""

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 7, 8, 9, 16, 17, 33])
    def test_every_index_verifies(self, count):
        tree = build_merkle_tree(make_recipients(count))
        for index in range(count):
            proof = build_merkle_proof(tree, index)
            assert len(proof.siblings) == tree.depth
            assert verify_merkle_proof(proof.leaf, proof.siblings, tree.root), (
                f"Proof failed for index {index} of {count}"
            )

    def test_proof_carries_index_and_root(self):
        tree = build_merkle_tree(make_recipients(4))
        proof = build_merkle_proof(tree, 3)

        assert isinstance(proof, MerkleProof)
        assert proof.index == 3
        assert proof.root == tree.root
        assert proof.leaf == tree.leaves[3]

    def test_index_out_of_range(self):
        tree = build_merkle_tree(make_recipients(3))
        with pytest.raises(IndexError):
            build_merkle_proof(tree, 3)
        with pytest.raises(IndexError):
            build_merkle_proof(tree, -1)

    def test_compute_root_from_proof(self):
        tree = build_merkle_tree(make_recipients(5))
        proof = build_merkle_proof(tree, 4)
        assert compute_root_from_proof(proof.leaf, proof.siblings) == tree.root


class TestTamperDetection:
    """Tests that any tampering is detected."""

    def setup_method(self):
        self.tree = build_merkle_tree(make_recipients(6))
        self.proof = build_merkle_proof(self.tree, 2)

    def test_tampered_sibling_fails(self):
        siblings = list(self.proof.siblings)
        siblings[1] = keccak256(b"tampered")
        assert not verify_merkle_proof(self.proof.leaf, siblings, self.tree.root)

    def test_tampered_leaf_fails(self):
        assert not verify_merkle_proof(keccak256(b"other"), self.proof.siblings, self.tree.root)

    def test_wrong_root_fails(self):
        assert not verify_merkle_proof(self.proof.leaf, self.proof.siblings, keccak256(b"root"))

    def test_truncated_proof_fails(self):
        assert not verify_merkle_proof(self.proof.leaf, self.proof.siblings[:-1], self.tree.root)

    def test_wrong_length_root_is_false_not_error(self):
        assert verify_merkle_proof(self.proof.leaf, self.proof.siblings, b"\x00") is False


class TestTreeStructure:
    """Tests for MerkleTree invariants and helpers."""

    def test_last_level_is_root(self):
        tree = build_merkle_tree(make_recipients(5))
        assert tree.levels[-1] == [tree.root]

    def test_invalid_tree_rejected(self):
        with pytest.raises(ValueError):
            MerkleTree(root=b"\x00" * 32, levels=[[b"\x01" * 32]])

    @pytest.mark.parametrize(
        "count,expected",
        [(0, 0), (1, 1), (2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (9, 4)],
    )
    def test_compute_tree_depth(self, count, expected):
        assert compute_tree_depth(count) == expected

    def test_depth_matches_built_tree(self):
        for count in range(1, 20):
            assert build_merkle_tree(make_recipients(count)).depth == compute_tree_depth(count)

    def test_should_stop_cancels_build(self):
        leaves = [r.leaf() for r in make_recipients(8)]
        with pytest.raises(BuildCancelledException):
            build_merkle_tree_from_leaves(leaves, should_stop=lambda: True)


class TestConvenienceClasses:
    """Tests for MerkleProver / MerkleVerifier wrappers."""

    def test_prover_and_verifier(self):
        recipients = make_recipients(5)
        proof = MerkleProver.prove(recipients, 1)

        assert proof.root == MerkleProver.compute_root(recipients)
        assert MerkleVerifier.verify(proof)

    def test_verify_allocation(self):
        recipients = make_recipients(5)
        proof = MerkleProver.prove(recipients, 3)
        r = recipients[3]

        assert MerkleVerifier.verify_allocation(r.address, r.amount, proof.siblings, proof.root)
        assert not MerkleVerifier.verify_allocation(r.address, r.amount + 1, proof.siblings, proof.root)

    def test_verify_packed(self):
        recipients = make_recipients(5)
        proof = MerkleProver.prove(recipients, 0)
        r = recipients[0]
        packed = pack_proof(proof.siblings)

        assert MerkleVerifier.verify_packed(r.address, r.amount, packed, proof.root)
        assert not MerkleVerifier.verify_packed(r.address, r.amount, packed[:-1], proof.root)


class TestFiveRecipientScenario:
    """End-to-end scenario: build, prove, verify, then change one amount."""

    def test_scenario(self):
        recipients = [
            Recipient(address=make_address(0xA1), amount=1_000),
            Recipient(address=make_address(0xB2), amount=2_500),
            Recipient(address=make_address(0xC3), amount=300),
            Recipient(address=make_address(0xD4), amount=10**24),
            Recipient(address=make_address(0xE5), amount=1),
        ]
        tree = build_merkle_tree(recipients)
        assert [len(level) for level in tree.levels] == [5, 3, 2, 1]

        proofs = [build_merkle_proof(tree, i) for i in range(5)]
        for recipient, proof in zip(recipients, proofs):
            assert len(proof.siblings) == 3
            assert MerkleVerifier.verify_allocation(
                recipient.address, recipient.amount, proof.siblings, tree.root
            )

        # Trailing leaf is self-paired at the bottom level
        assert proofs[4].siblings[0] == tree.leaves[4]

        # Changing one amount changes the root and invalidates old proofs
        changed = list(recipients)
        changed[1] = Recipient(address=recipients[1].address, amount=2_501)
        new_tree = build_merkle_tree(changed)

        assert new_tree.root != tree.root
        assert not verify_merkle_proof(tree.leaves[0], proofs[0].siblings, new_tree.root)
        assert not MerkleVerifier.verify_allocation(
            changed[1].address, changed[1].amount, proofs[1].siblings, tree.root
        )
