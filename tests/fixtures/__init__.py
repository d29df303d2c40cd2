"""
Test fixtures package for airdrop tests.

This package provides factory functions for creating test objects:
- common.py: Addresses, recipients and a fake settlement client

Usage:
    from fixtures.common import make_recipients
"""
