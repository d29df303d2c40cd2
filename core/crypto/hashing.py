"""
Module 02 - Hashing Utilities
Leaf and pair hashing for airdrop Merkle commitments.

Module ID: M02

This module provides:
- keccak-256 hashing for raw bytes
- Canonical 32-byte encodings for addresses and uint256 amounts
- Leaf hashing: keccak256(address_32 || amount_32_be)
- Sorted-pair hashing: keccak256(min(a, b) || max(a, b))
- Hex encoding/decoding

Compatibility Notes:
- The settlement contract verifies proofs with keccak-256 and sorted-pair
  concatenation. Any change to these byte layouts invalidates every root
  already published on-chain.
- Byte comparison is plain lexicographic over raw bytes, which for equal
  length values is the same as big-endian integer comparison.
- Amounts are never truncated: anything outside [0, 2**256) is rejected.
"""
from __future__ import annotations

from eth_utils import keccak

from core.schemas.errors import AmountOverflowException, InvalidAddressException


# Hash output size (keccak-256 = 32 bytes)
HASH_SIZE: int = 32

# Largest value representable in the 32-byte amount slot
MAX_UINT256: int = 2**256 - 1


def keccak256(data: bytes) -> bytes:
    """
    Compute keccak-256 hash of raw bytes.

    This is the original Keccak padding used by the settlement contract,
    NOT the NIST SHA3-256 variant exposed by hashlib.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte keccak-256 digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(data)


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert a hexadecimal string to bytes.

    The 0x prefix is optional; persisted records store bare hex while
    user input usually carries the prefix.

    Raises:
        ValueError: If the string has odd length or invalid hex characters
    """
    hex_content = hex_string.strip()
    if hex_content[:2] in ("0x", "0X"):
        hex_content = hex_content[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length, got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def normalize_address(address: bytes | str) -> bytes:
    """
    Return the canonical 32-byte form of an address.

    Shorter values are left-padded with zeros to match the contract's
    32-byte address slot. Resolution of bech32 or registry addresses is
    the caller's job; this only handles raw bytes and hex.

    Args:
        address: Raw bytes or hex string (with or without 0x)

    Returns:
        32-byte address

    Raises:
        InvalidAddressException: If the value is not hex or exceeds 32 bytes
    """
    if isinstance(address, str):
        try:
            raw = from_hex(address)
        except ValueError as e:
            raise InvalidAddressException(
                f"Address is not valid hex: {e}", address=address
            ) from e
    elif isinstance(address, (bytes, bytearray)):
        raw = bytes(address)
    else:
        raise InvalidAddressException(
            f"Address must be bytes or hex string, got {type(address).__name__}"
        )

    if not raw:
        raise InvalidAddressException("Address cannot be empty")

    if len(raw) > HASH_SIZE:
        raise InvalidAddressException(
            f"Address must be at most {HASH_SIZE} bytes, got {len(raw)}",
            address=raw.hex(),
        )

    return raw.rjust(HASH_SIZE, b"\x00")


def encode_amount(amount: int) -> bytes:
    """
    Encode an amount as a 32-byte big-endian unsigned integer.

    Raises:
        AmountOverflowException: If the amount is negative or >= 2**256
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"Amount must be an int, got {type(amount).__name__}")

    if amount < 0 or amount > MAX_UINT256:
        raise AmountOverflowException(
            f"Amount {amount} does not fit in a 32-byte unsigned slot",
            amount=amount,
        )

    return amount.to_bytes(HASH_SIZE, byteorder="big")


def hash_leaf(address: bytes | str, amount: int) -> bytes:
    """
    Compute the Merkle leaf for one (address, amount) allocation.

    Rule: leaf = keccak256(address_32 || amount_32_be)

    Args:
        address: Canonical address (padded to 32 bytes if shorter)
        amount: Allocation in base units

    Returns:
        32-byte leaf hash
    """
    preimage = normalize_address(address) + encode_amount(amount)
    return keccak256(preimage)


def hash_pair(a: bytes, b: bytes) -> bytes:
    """
    Combine two nodes into their parent using sorted concatenation.

    The smaller value goes first, so hash_pair(a, b) == hash_pair(b, a).
    Pairing a node with itself is how an odd trailing node is promoted.

    Returns:
        32-byte parent hash
    """
    lo, hi = (a, b) if a <= b else (b, a)
    return keccak256(lo + hi)


def compute_claim_key(distribution_id: int, address: bytes | str) -> bytes:
    """
    Compute the key the settlement contract records a claim under.

    Rule: key = keccak256(distribution_id_32_be || address_32)
    """
    return keccak256(encode_amount(distribution_id) + normalize_address(address))


def root_to_int(root: bytes) -> int:
    """Interpret a 32-byte root as the u256 the contract stores."""
    return int.from_bytes(root, byteorder="big")


def int_to_root(value: int) -> bytes:
    """Inverse of root_to_int."""
    return encode_amount(value)


__all__ = [
    "HASH_SIZE",
    "MAX_UINT256",
    "keccak256",
    "to_hex",
    "from_hex",
    "normalize_address",
    "encode_amount",
    "hash_leaf",
    "hash_pair",
    "compute_claim_key",
    "root_to_int",
    "int_to_root",
]
