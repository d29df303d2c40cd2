"""
Module 06 - Minimal API (FastAPI)

HTTP API for Merkle airdrop distributions:
- POST /tree - Build a tree preview
- GET /distributions/{id} - Stored record summary
- GET /distributions/{id}/proof/{address} - Claim proof
- PUT /distributions/{id} - Import a shared record
- POST /verify - Verify a packed proof
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
