"""
Module 06 - Distribution Routes

Read stored distribution records, regenerate claim proofs, and import
records shared from elsewhere.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_claim_coordinator, get_distribution_store
from api.errors import APIError, ConflictError
from api.models.requests import ImportRequest
from api.models.responses import DistributionSummary, ProofResponse
from api.routes.tree import to_recipients

from core.merkle.merkle_tree import compute_tree_depth
from core.schemas.distribution import DistributionRecord
from core.schemas.errors import AirdropException
from orchestrator.claims import ClaimCoordinator
from orchestrator.storage import DistributionExistsError, DistributionStore


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/distributions", tags=["distributions"])


def _summary(record: DistributionRecord) -> DistributionSummary:
    return DistributionSummary(
        ok=True,
        distribution_id=record.distribution_id,
        root=record.root,
        recipient_count=len(record.recipients),
        total_amount=str(record.total_amount),
        depth=compute_tree_depth(len(record.leaves)),
    )


@router.get("/{distribution_id}", response_model=DistributionSummary)
async def get_distribution(
    distribution_id: str,
    store: DistributionStore = Depends(get_distribution_store),
) -> DistributionSummary:
    """Summary of a stored distribution record."""
    try:
        record = store.load(distribution_id)
    except AirdropException as e:
        raise APIError.from_exception(e) from e
    return _summary(record)


@router.get("/{distribution_id}/proof/{address}", response_model=ProofResponse)
async def get_proof(
    distribution_id: str,
    address: str,
    coordinator: ClaimCoordinator = Depends(get_claim_coordinator),
) -> ProofResponse:
    """
    Regenerate the claim proof for an address.

    Returns 404 with NOT_ELIGIBLE if the address has no allocation, or
    PROOF_UNAVAILABLE if the record is missing or corrupt.
    """
    try:
        ticket = coordinator.prepare_claim(distribution_id, address)
    except AirdropException as e:
        raise APIError.from_exception(e) from e

    return ProofResponse(ok=True, **ticket.model_dump(mode="json"))


@router.put("/{distribution_id}", response_model=DistributionSummary)
async def import_distribution(
    distribution_id: str,
    request: ImportRequest,
    store: DistributionStore = Depends(get_distribution_store),
) -> DistributionSummary:
    """
    Store a record shared from elsewhere.

    The tree is rebuilt from the recipients and must reproduce the given
    leaves and root; inconsistent records are rejected with
    PROOF_UNAVAILABLE.
    """
    recipients = to_recipients(request.recipients)
    document = {
        "root": request.root,
        "recipients": [r.model_dump(mode="json") for r in recipients],
        "leaves": request.leaves,
    }

    try:
        record = store.store_tree_data(distribution_id, document, overwrite=request.overwrite)
    except DistributionExistsError as e:
        raise ConflictError(str(e), details={"distribution_id": distribution_id}) from e
    except AirdropException as e:
        raise APIError.from_exception(e) from e

    logger.info("Imported distribution %s via API", distribution_id)
    return _summary(record)
