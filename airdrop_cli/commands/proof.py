"""
Module 05 - CLI Proof Command

Regenerate the claim proof for an address from a stored distribution record.

Usage:
    airdrop proof <distribution_id> <address> [--json]
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace

from core.schemas.distribution import ClaimTicket
from core.schemas.errors import (
    AirdropException,
    NotEligibleException,
    ProofUnavailableException,
)
from orchestrator.claims import ClaimCoordinator

from airdrop_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    open_store,
)


def print_ticket_human(ticket: ClaimTicket) -> None:
    print(f"distribution: {ticket.distribution_id}")
    print(f"address: {ticket.address}")
    print(f"amount: {ticket.amount}")
    print(f"leaf_index: {ticket.leaf_index}")
    print(f"root: 0x{ticket.root}")
    print(f"proof ({len(ticket.proof)} siblings):")
    for sibling in ticket.proof:
        print(f"  0x{sibling}")
    print(f"proof_bytes: 0x{ticket.proof_bytes}")


def proof_cmd(args: Namespace) -> int:
    """Execute the proof command."""
    coordinator = ClaimCoordinator(open_store(args.cli_config))

    try:
        ticket = coordinator.prepare_claim(args.distribution_id, args.address)
    except NotEligibleException as e:
        print(f"Not eligible: {e.message}", file=sys.stderr)
        return EXIT_VERIFICATION_FAILED
    except ProofUnavailableException as e:
        print(f"Proof unavailable: {e.message}", file=sys.stderr)
        print("Reload the distribution data with 'airdrop import'.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except AirdropException as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if args.json:
        print(json.dumps(ticket.model_dump(mode="json"), indent=2))
    else:
        print_ticket_human(ticket)

    return EXIT_SUCCESS
