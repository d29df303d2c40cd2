"""
Module 05 - CLI Show Command

Print a summary of a stored distribution record.

Usage:
    airdrop show <distribution_id> [--recipients] [--json]
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace

from core.merkle.merkle_tree import compute_tree_depth
from core.schemas.errors import ProofUnavailableException

from airdrop_cli.commands.common import EXIT_RUNTIME_ERROR, EXIT_SUCCESS, open_store


def show_cmd(args: Namespace) -> int:
    """Execute the show command."""
    store = open_store(args.cli_config)

    try:
        record = store.load(args.distribution_id)
    except ProofUnavailableException as e:
        print(f"Proof unavailable: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    data = {
        "distribution_id": record.distribution_id,
        "root": record.root,
        "recipient_count": len(record.recipients),
        "total_amount": str(record.total_amount),
        "depth": compute_tree_depth(len(record.leaves)),
    }
    if args.recipients:
        data["recipients"] = [r.model_dump(mode="json") for r in record.recipients]

    if args.json:
        print(json.dumps(data, indent=2))
        return EXIT_SUCCESS

    print(f"distribution: {data['distribution_id']}")
    print(f"root: 0x{data['root']}")
    print(f"recipients: {data['recipient_count']}")
    print(f"total_amount: {data['total_amount']}")
    print(f"depth: {data['depth']}")
    if args.recipients:
        for index, recipient in enumerate(record.recipients):
            print(f"  [{index}] {recipient.address} {recipient.amount}")
    return EXIT_SUCCESS
