"""
Module 06 - API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "airdrop-api"
    version: str
    storage_backend: str = Field(..., description="Record store backend: file or memory")


class TreeResponse(BaseModel):
    """Response for POST /tree endpoint."""

    ok: bool = True
    root: str = Field(..., description="Merkle root as bare hex")
    leaf_count: int = Field(..., description="Number of leaves")
    depth: int = Field(..., description="Number of levels above the leaves")
    total_amount: str = Field(..., description="Sum of all allocations")
    leaves: list[str] | None = Field(default=None, description="Leaf hashes as bare hex")


class DistributionSummary(BaseModel):
    """Response for GET /distributions/{distribution_id} and PUT imports."""

    ok: bool = True
    distribution_id: str
    root: str
    recipient_count: int
    total_amount: str
    depth: int


class ProofResponse(BaseModel):
    """Response for GET /distributions/{distribution_id}/proof/{address}."""

    ok: bool = True
    distribution_id: str
    address: str
    amount: str
    leaf_index: int
    leaf: str
    root: str
    proof: list[str] = Field(default_factory=list, description="Siblings leaf-to-root, bare hex")
    proof_bytes: str = Field(..., description="Packed proof as bare hex")


class VerifyProofResponse(BaseModel):
    """Response for POST /verify endpoint."""

    ok: bool = Field(..., description="Whether the proof folds to the root")
    leaf: str
    root: str
    proof_length: int


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
