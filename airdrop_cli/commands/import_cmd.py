"""
Module 05 - CLI Import Command

Store a distribution record shared from elsewhere. The record is rebuilt
and checked before it is written.

Usage:
    airdrop import <distribution_id> record.json [--overwrite]
"""

from __future__ import annotations

import sys
from argparse import Namespace
from pathlib import Path

from core.schemas.errors import ProofUnavailableException
from orchestrator.storage import DistributionExistsError

from airdrop_cli.commands.common import EXIT_RUNTIME_ERROR, EXIT_SUCCESS, open_store


def import_cmd(args: Namespace) -> int:
    """Execute the import command."""
    path = Path(args.record)
    if not path.exists():
        print(f"Error: Record file not found: {path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    store = open_store(args.cli_config)
    try:
        record = store.store_tree_data(
            args.distribution_id,
            path.read_text(encoding="utf-8"),
            overwrite=args.overwrite,
        )
    except ProofUnavailableException as e:
        print(f"Invalid record: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except DistributionExistsError as e:
        print(f"Error: {e} (use --overwrite to replace it)", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    print(f"Imported distribution {record.distribution_id}: "
          f"{len(record.recipients)} recipients, root 0x{record.root}")
    return EXIT_SUCCESS
