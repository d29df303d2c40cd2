"""
Module 01 - Schemas & Canonicalization
File: distribution.py

Purpose: Recipient, persisted distribution record and claim ticket schemas.

Persisted document layout (no version marker):
    {
      "root": "<hex>",
      "recipients": [{"address": "<hex>", "amount": "<decimal string>"}],
      "leaves": ["<hex>", ...]
    }

The distribution id is the storage key and is not part of the document.
"""

from __future__ import annotations

from typing import Any, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from core.crypto.hashing import from_hex, hash_leaf, normalize_address, to_hex


def parse_amount(value: Any) -> int:
    """
    Parse an allocation amount from int, decimal string or 0x-hex string.

    Floats and bools are refused; large allocations must never be rounded.
    """
    if isinstance(value, bool):
        raise ValueError("amount must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text[:2] in ("0x", "0X"):
            return int(text[2:], 16)
        if not text.isdigit():
            raise ValueError(f"amount must be a non-negative integer string, got {value!r}")
        return int(text, 10)
    raise ValueError(f"amount must be an integer or integer string, got {type(value).__name__}")


def total_amount(recipients: Sequence[Recipient]) -> int:
    """Sum of all allocations; the amount the settlement contract must escrow."""
    return sum(r.amount for r in recipients)


class Recipient(BaseModel):
    """
    One allocation in a distribution.

    The address is stored in canonical form: 0x followed by 64 lowercase
    hex characters (left-padded to 32 bytes).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    address: str = Field(..., description="Canonical 32-byte address as 0x-hex")
    amount: int = Field(..., description="Allocation in base units", gt=0)

    @field_validator("address", mode="before")
    @classmethod
    def _canonical_address(cls, v: Any) -> str:
        return to_hex(normalize_address(v))

    @field_validator("amount", mode="before")
    @classmethod
    def _parse_amount(cls, v: Any) -> int:
        return parse_amount(v)

    @field_serializer("amount")
    def _serialize_amount(self, amount: int) -> str:
        return str(amount)

    @property
    def address_bytes(self) -> bytes:
        return from_hex(self.address)

    def leaf(self) -> bytes:
        """Leaf hash committing this allocation."""
        return hash_leaf(self.address_bytes, self.amount)


class DistributionRecord(BaseModel):
    """
    Durable record of one distribution.

    Written once at creation time and never mutated. Holds enough to rebuild
    the tree and regenerate any recipient's proof.
    """

    model_config = ConfigDict(extra="forbid")

    distribution_id: str = Field(..., description="Identifier issued by the settlement contract", min_length=1)
    root: str = Field(..., description="Merkle root as bare hex")
    recipients: list[Recipient] = Field(..., min_length=1)
    leaves: list[str] = Field(..., description="Leaf hashes as bare hex, in recipient order")

    @field_validator("root", mode="before")
    @classmethod
    def _bare_root(cls, v: Any) -> str:
        if isinstance(v, (bytes, bytearray)):
            return bytes(v).hex()
        return from_hex(v).hex()

    @field_validator("leaves", mode="before")
    @classmethod
    def _bare_leaves(cls, v: Any) -> list[str]:
        if not isinstance(v, (list, tuple)):
            raise ValueError("leaves must be a list")
        return [
            bytes(leaf).hex() if isinstance(leaf, (bytes, bytearray)) else from_hex(leaf).hex()
            for leaf in v
        ]

    @property
    def root_bytes(self) -> bytes:
        return bytes.fromhex(self.root)

    @property
    def leaf_bytes(self) -> list[bytes]:
        return [bytes.fromhex(leaf) for leaf in self.leaves]

    @property
    def total_amount(self) -> int:
        return total_amount(self.recipients)

    def find_recipient(self, address: bytes | str) -> tuple[int, Recipient] | None:
        """
        Locate the first recipient entry for an address.

        Linear scan over canonical addresses. Returns (leaf_index, recipient)
        or None when the address is not in the list.
        """
        target = to_hex(normalize_address(address))
        for index, recipient in enumerate(self.recipients):
            if recipient.address == target:
                return index, recipient
        return None

    def to_document(self) -> dict[str, Any]:
        """Persisted form: root, recipients and leaves, without the id."""
        return self.model_dump(mode="json", exclude={"distribution_id"})

    @classmethod
    def from_document(cls, distribution_id: str, data: dict[str, Any]) -> "DistributionRecord":
        """Rehydrate a record from its persisted document."""
        return cls(distribution_id=distribution_id, **data)


class ClaimTicket(BaseModel):
    """
    Everything the settlement client needs to submit one claim.

    proof holds the sibling path leaf-to-root; proof_bytes is the packed
    wire form of the same path.
    """

    model_config = ConfigDict(extra="forbid")

    distribution_id: str
    address: str
    amount: int
    leaf_index: int = Field(..., ge=0)
    leaf: str
    root: str
    proof: list[str] = Field(default_factory=list)
    proof_bytes: str

    @field_serializer("amount")
    def _serialize_amount(self, amount: int) -> str:
        return str(amount)

    @property
    def packed_proof(self) -> bytes:
        return from_hex(self.proof_bytes)
