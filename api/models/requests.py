"""
Module 06 - API Request Models

Pydantic models for API request validation.
"""

from pydantic import BaseModel, ConfigDict, Field


class RecipientEntry(BaseModel):
    """One allocation as submitted over HTTP."""

    model_config = ConfigDict(extra="forbid")

    address: str = Field(..., min_length=1, description="Address as hex (with or without 0x)")
    amount: str | int = Field(..., description="Allocation in base units (integer or decimal string)")


class TreeRequest(BaseModel):
    """Request body for POST /tree endpoint."""

    recipients: list[RecipientEntry] = Field(
        ...,
        description="Ordered recipient list; order fixes leaf indices",
    )
    include_leaves: bool = Field(
        default=False,
        description="Include every leaf hash in the response",
    )


class VerifyProofRequest(BaseModel):
    """
    Request body for POST /verify endpoint.

    Provide either `leaf`, or both `address` and `amount`.
    """

    root: str = Field(..., description="Merkle root as hex")
    proof: str = Field(default="", description="Packed proof as hex (empty for no siblings)")
    leaf: str | None = Field(default=None, description="Leaf hash as hex")
    address: str | None = Field(default=None, description="Claimer address as hex")
    amount: str | int | None = Field(default=None, description="Allocation in base units")


class ImportRequest(BaseModel):
    """Request body for PUT /distributions/{distribution_id} endpoint."""

    root: str = Field(..., description="Merkle root as bare hex")
    recipients: list[RecipientEntry] = Field(..., min_length=1)
    leaves: list[str] = Field(..., description="Leaf hashes as bare hex")
    overwrite: bool = Field(default=False, description="Replace an existing record")
