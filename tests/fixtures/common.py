"""
Common test fixtures shared by all modules.

Provides factory functions for:
- Canonical addresses
- Recipient lists
- A fake settlement client that records create/claim calls
"""

from typing import Any, Optional

from core.crypto.hashing import hash_leaf, int_to_root, normalize_address
from core.merkle.merkle_tree import verify_merkle_proof
from core.merkle.proof_codec import unpack_proof
from core.schemas.distribution import Recipient


# =============================================================================
# Address / Recipient Factories
# =============================================================================

def make_address(n: int) -> str:
    """Deterministic canonical address: 0x followed by n as 64 hex digits."""
    return "0x" + format(n, "064x")


def make_recipient(n: int = 1, amount: Optional[int] = None) -> Recipient:
    """Create the recipient for address index n (amount defaults to 100 * n)."""
    return Recipient(address=make_address(n), amount=amount if amount is not None else 100 * n)


def make_recipients(count: int, base_amount: int = 100) -> list[Recipient]:
    """Create count recipients with addresses 1..count and amounts base_amount * i."""
    return [
        Recipient(address=make_address(i), amount=base_amount * i)
        for i in range(1, count + 1)
    ]


# =============================================================================
# Settlement Client
# =============================================================================

class FakeSettlementClient:
    """
    In-memory stand-in for the settlement contract.

    create() issues sequential ids starting at 1 and remembers the root;
    claim() checks the packed proof against that root the way the contract
    does, and records the claim.
    """

    def __init__(self, first_id: int = 1) -> None:
        self.next_id = first_id
        self.roots: dict[str, bytes] = {}
        self.created: list[dict[str, Any]] = []
        self.claims: list[dict[str, Any]] = []
        self.claimed: set[tuple[str, bytes]] = set()

    def create(self, root: int, total_amount: int, expiry: Optional[int]) -> str:
        distribution_id = str(self.next_id)
        self.next_id += 1
        self.roots[distribution_id] = int_to_root(root)
        self.created.append({
            "distribution_id": distribution_id,
            "root": root,
            "total_amount": total_amount,
            "expiry": expiry,
        })
        return distribution_id

    def claim(self, distribution_id: str, amount: int, proof_bytes: bytes) -> dict[str, Any]:
        self.claims.append({
            "distribution_id": distribution_id,
            "amount": amount,
            "proof_bytes": proof_bytes,
        })
        return {"status": "ok", "distribution_id": distribution_id, "amount": amount}

    def has_claimed(self, distribution_id: str, address: bytes) -> bool:
        return (distribution_id, normalize_address(address)) in self.claimed

    def accepts(self, distribution_id: str, address: str, amount: int, proof_bytes: bytes) -> bool:
        """Contract-side check of a submitted claim."""
        leaf = hash_leaf(address, amount)
        return verify_merkle_proof(leaf, unpack_proof(proof_bytes), self.roots[distribution_id])
