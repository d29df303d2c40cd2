"""
Module 05 - Airdrop CLI

Command-line interface for Merkle airdrop distributions.

Usage:
    python -m airdrop_cli build recipients.csv --id 7
    python -m airdrop_cli proof 7 0xabc...
    python -m airdrop_cli verify --address 0xabc... --amount 100 --proof 0x... --root 0x...
    python -m airdrop_cli show 7
    python -m airdrop_cli import 7 record.json
"""

__version__ = "0.1.0"
