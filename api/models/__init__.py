"""API request and response models."""

from api.models.requests import ImportRequest, RecipientEntry, TreeRequest, VerifyProofRequest
from api.models.responses import (
    DistributionSummary,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
    ProofResponse,
    TreeResponse,
    VerifyProofResponse,
)

__all__ = [
    "ImportRequest",
    "RecipientEntry",
    "TreeRequest",
    "VerifyProofRequest",
    "DistributionSummary",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "ProofResponse",
    "TreeResponse",
    "VerifyProofResponse",
]
