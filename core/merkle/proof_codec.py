"""
Module 02 - Proof Wire Codec
Packs a sibling path into the flat buffer the settlement contract reads.

Module ID: M02

Wire format:
- Each proof element is exactly 32 bytes
- Elements are concatenated in proof order (leaf-to-root)
- No length prefix; the element count is len(buffer) // 32

The contract rejects buffers whose length is not a multiple of 32, so the
decoder does the same.
"""
from __future__ import annotations

from typing import Sequence

from core.crypto.hashing import HASH_SIZE
from core.schemas.errors import ProofEncodingException


def pack_proof(siblings: Sequence[bytes]) -> bytes:
    """
    Pack proof elements into a single buffer for on-chain submission.

    Args:
        siblings: Proof elements, each 32 bytes

    Returns:
        Concatenated buffer of len(siblings) * 32 bytes

    Raises:
        ProofEncodingException: If an element is not 32 bytes
    """
    for position, element in enumerate(siblings):
        if len(element) != HASH_SIZE:
            raise ProofEncodingException(
                f"Proof element {position} is {len(element)} bytes, expected {HASH_SIZE}",
                details={"position": position, "length": len(element)},
            )
    return b"".join(bytes(element) for element in siblings)


def unpack_proof(buffer: bytes) -> list[bytes]:
    """
    Split a packed proof buffer back into 32-byte elements.

    Raises:
        ProofEncodingException: If the buffer length is not a multiple of 32
    """
    if len(buffer) % HASH_SIZE != 0:
        raise ProofEncodingException(
            f"Packed proof length {len(buffer)} is not a multiple of {HASH_SIZE}",
            details={"length": len(buffer)},
        )
    return [
        bytes(buffer[offset:offset + HASH_SIZE])
        for offset in range(0, len(buffer), HASH_SIZE)
    ]


__all__ = [
    "pack_proof",
    "unpack_proof",
]
