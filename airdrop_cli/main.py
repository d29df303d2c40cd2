"""
Module 05 - CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m airdrop_cli build <recipients.csv|json> [--id ID] [--out PATH] [--json]
    python -m airdrop_cli proof <distribution_id> <address> [--json]
    python -m airdrop_cli verify <leaf> --proof HEX --root HEX [--json]
    python -m airdrop_cli verify --address A --amount N --proof HEX --root HEX
    python -m airdrop_cli show <distribution_id> [--recipients] [--json]
    python -m airdrop_cli import <distribution_id> <record.json> [--overwrite]
    python -m airdrop_cli config --init

Environment Variables:
    AIRDROP_STORAGE_BACKEND     Record store backend: file or memory (default: file)
    AIRDROP_STORAGE_DIR         Directory for stored records
    AIRDROP_KEY_PREFIX          Storage key prefix (default: airdrop_tree_)
    AIRDROP_VERIFY_ON_BUILD     Self-check every proof after building (default: true)
    AIRDROP_LOG_LEVEL           Log level (default: WARNING)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from dataclasses import asdict
from pathlib import Path
from typing import Sequence

from airdrop_cli import __version__
from airdrop_cli.commands import build, import_cmd, proof, show, verify
from airdrop_cli.commands.common import EXIT_RUNTIME_ERROR, EXIT_SUCCESS
from airdrop_cli.config import get_default_config_template, load_config


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="airdrop",
        description="Merkle airdrop CLI - Build distribution trees, regenerate and verify claim proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./airdrop.json or ~/.config/airdrop/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on unexpected errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build the Merkle tree for a recipient list",
        description="Build a distribution tree and print its root, leaf count and depth.",
    )
    build_parser.add_argument(
        "recipients",
        type=str,
        help="Recipient file (.csv with address,amount header, or .json)",
    )
    build_parser.add_argument(
        "--id",
        type=str,
        default=None,
        help="Store the record under this distribution id",
    )
    build_parser.add_argument(
        "--overwrite",
        action="store_true",
        default=False,
        help="Replace an existing record for --id",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the record document to this file for sharing",
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    build_parser.set_defaults(func=build.build_cmd)

    # --- proof command ---
    proof_parser = subparsers.add_parser(
        "proof",
        help="Regenerate the claim proof for an address",
        description="Load a stored distribution and print the address's amount and packed proof.",
    )
    proof_parser.add_argument("distribution_id", type=str, help="Distribution id")
    proof_parser.add_argument("address", type=str, help="Claimer address (hex)")
    proof_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON claim ticket",
    )
    proof_parser.set_defaults(func=proof.proof_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a packed proof against a root",
        description="Fold a proof into a leaf and compare with the root, offline.",
    )
    verify_parser.add_argument("leaf", type=str, nargs="?", default=None, help="Leaf hash (hex)")
    verify_parser.add_argument("--address", type=str, default=None, help="Claimer address (hex)")
    verify_parser.add_argument("--amount", type=str, default=None, help="Allocation in base units")
    verify_parser.add_argument("--proof", type=str, required=True, help="Packed proof (hex)")
    verify_parser.add_argument("--root", type=str, required=True, help="Merkle root (hex)")
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- show command ---
    show_parser = subparsers.add_parser(
        "show",
        help="Show a stored distribution record",
    )
    show_parser.add_argument("distribution_id", type=str, help="Distribution id")
    show_parser.add_argument(
        "--recipients",
        action="store_true",
        default=False,
        help="List every recipient",
    )
    show_parser.add_argument("--json", action="store_true", default=False, help="JSON output")
    show_parser.set_defaults(func=show.show_cmd)

    # --- import command ---
    import_parser = subparsers.add_parser(
        "import",
        help="Store a shared distribution record",
        description="Validate a record document by rebuilding its tree, then store it.",
    )
    import_parser.add_argument("distribution_id", type=str, help="Distribution id")
    import_parser.add_argument("record", type=str, help="Record document (.json)")
    import_parser.add_argument(
        "--overwrite",
        action="store_true",
        default=False,
        help="Replace an existing record",
    )
    import_parser.set_defaults(func=import_cmd.import_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="airdrop.json",
        help="Path for config file (default: airdrop.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (AIRDROP_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(asdict(args.cli_config), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: airdrop config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed / not eligible)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
