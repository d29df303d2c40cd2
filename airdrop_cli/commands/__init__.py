"""
CLI command modules.
"""

from airdrop_cli.commands import build, import_cmd, proof, show, verify

__all__ = ["build", "import_cmd", "proof", "show", "verify"]
