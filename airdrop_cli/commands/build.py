"""
Module 05 - CLI Build Command

Build the Merkle tree for a recipient file and print its root. Optionally
store the record under a distribution id and/or write the record document
to a file for sharing.

Usage:
    airdrop build recipients.csv [--id 7] [--out record.json] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from core.schemas.distribution import DistributionRecord, total_amount
from core.schemas.errors import AirdropException
from orchestrator.distribution import DistributionCreator
from orchestrator.storage import DistributionExistsError

from airdrop_cli.commands.common import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    RecipientFileError,
    load_recipients,
    open_store,
)


logger = logging.getLogger(__name__)


@dataclass
class BuildSummary:
    """Summary of a tree build for CLI output."""
    root: str = ""
    leaf_count: int = 0
    depth: int = 0
    total_amount: str = "0"
    distribution_id: str | None = None
    saved_to: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["distribution_id"]:
            del d["distribution_id"]
        if not d["saved_to"]:
            del d["saved_to"]
        return d


def print_summary_human(summary: BuildSummary) -> None:
    print(f"root: 0x{summary.root}")
    print(f"leaves: {summary.leaf_count}")
    print(f"depth: {summary.depth}")
    print(f"total_amount: {summary.total_amount}")
    if summary.distribution_id:
        print(f"stored as distribution: {summary.distribution_id}")
    if summary.saved_to:
        print(f"record written to: {summary.saved_to}")


def build_cmd(args: Namespace) -> int:
    """
    Execute the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.cli_config

    try:
        recipients = load_recipients(args.recipients)
    except RecipientFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    store = open_store(config)
    # No settlement client is needed to build and store locally
    creator = DistributionCreator(store, settlement=None, config=config.to_runtime_config())

    try:
        tree = creator.build(recipients)
    except AirdropException as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = BuildSummary(
        root=tree.root.hex(),
        leaf_count=tree.leaf_count,
        depth=tree.depth,
        total_amount=str(total_amount(recipients)),
    )

    if args.id:
        try:
            store.save(args.id, tree, recipients, overwrite=args.overwrite)
        except DistributionExistsError as e:
            print(f"Error: {e} (use --overwrite to replace it)", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        summary.distribution_id = str(args.id)

    if args.out:
        record = DistributionRecord(
            distribution_id=str(args.id or "local"),
            root=tree.root,
            recipients=recipients,
            leaves=tree.leaves,
        )
        out_path = Path(args.out)
        out_path.write_text(json.dumps(record.to_document(), indent=2, sort_keys=True) + "\n")
        summary.saved_to = str(out_path)
        logger.info("Wrote record document to %s", out_path)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS
