"""
Module 05 - CLI Verify Command

Check a packed proof against a root offline. Either pass the leaf hash
directly, or the (address, amount) allocation to hash.

Usage:
    airdrop verify <leaf> --proof HEX --root HEX [--json]
    airdrop verify --address A --amount N --proof HEX --root HEX [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any

from core.crypto.hashing import HASH_SIZE, from_hex, hash_leaf
from core.merkle.merkle_tree import verify_merkle_proof
from core.merkle.proof_codec import unpack_proof
from core.schemas.distribution import parse_amount
from core.schemas.errors import AirdropException

from airdrop_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
)


logger = logging.getLogger(__name__)


@dataclass
class VerifySummary:
    """Summary of proof verification for CLI output."""
    leaf: str = ""
    root: str = ""
    proof_length: int = 0
    valid: bool = False
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["errors"]:
            del d["errors"]
        return d


def _resolve_leaf(args: Namespace) -> bytes:
    if args.leaf:
        leaf = from_hex(args.leaf)
        if len(leaf) != HASH_SIZE:
            raise ValueError(f"Leaf must be {HASH_SIZE} bytes, got {len(leaf)}")
        return leaf
    if args.address is None or args.amount is None:
        raise ValueError("Pass a leaf hash, or both --address and --amount")
    return hash_leaf(args.address, parse_amount(args.amount))


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Returns:
        EXIT_SUCCESS if the proof is valid, EXIT_VERIFICATION_FAILED if not
    """
    try:
        leaf = _resolve_leaf(args)
        root = from_hex(args.root)
        siblings = unpack_proof(from_hex(args.proof)) if args.proof else []
    except (ValueError, AirdropException) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = VerifySummary(
        leaf=leaf.hex(),
        root=root.hex(),
        proof_length=len(siblings),
        valid=verify_merkle_proof(leaf, siblings, root),
    )
    if len(root) != HASH_SIZE:
        summary.errors.append(f"Root must be {HASH_SIZE} bytes, got {len(root)}")

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print(f"leaf: 0x{summary.leaf}")
        print(f"root: 0x{summary.root}")
        print(f"proof_length: {summary.proof_length}")
        print(f"valid: {str(summary.valid).lower()}")
        for err in summary.errors:
            print(f"  ✗ {err}")

    if summary.valid:
        logger.info("Proof verified")
        return EXIT_SUCCESS
    logger.warning("Proof verification failed")
    return EXIT_VERIFICATION_FAILED
