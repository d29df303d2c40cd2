"""
Core cryptographic utilities.

Module 02 provides keccak-256 leaf and pair hashing matching the
settlement contract.
"""
from .hashing import (
    HASH_SIZE,
    MAX_UINT256,
    keccak256,
    to_hex,
    from_hex,
    normalize_address,
    encode_amount,
    hash_leaf,
    hash_pair,
    compute_claim_key,
    root_to_int,
    int_to_root,
)

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
