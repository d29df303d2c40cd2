"""
Module 06 - Verify Route

Check a packed proof against a root without touching stored state.
"""

from __future__ import annotations

from fastapi import APIRouter

from api.errors import APIError, InvalidRequestError
from api.models.requests import VerifyProofRequest
from api.models.responses import VerifyProofResponse

from core.crypto.hashing import from_hex, hash_leaf
from core.merkle.merkle_tree import verify_merkle_proof
from core.merkle.proof_codec import unpack_proof
from core.schemas.distribution import parse_amount
from core.schemas.errors import AirdropException


router = APIRouter(tags=["verification"])


@router.post("/verify", response_model=VerifyProofResponse)
async def verify_proof(request: VerifyProofRequest) -> VerifyProofResponse:
    """
    Verify a proof for a leaf, or for an (address, amount) allocation.

    A proof that does not fold to the root is reported with ok=false, not
    as an error.
    """
    try:
        if request.leaf is not None:
            leaf = from_hex(request.leaf)
        elif request.address is not None and request.amount is not None:
            leaf = hash_leaf(request.address, parse_amount(request.amount))
        else:
            raise InvalidRequestError("Provide either leaf, or both address and amount")
        root = from_hex(request.root)
        siblings = unpack_proof(from_hex(request.proof))
    except ValueError as e:
        raise InvalidRequestError(str(e)) from e
    except AirdropException as e:
        raise APIError.from_exception(e) from e

    return VerifyProofResponse(
        ok=verify_merkle_proof(leaf, siblings, root),
        leaf=leaf.hex(),
        root=root.hex(),
        proof_length=len(siblings),
    )
