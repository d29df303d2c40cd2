"""
Module 06 - Tree Route

Build a distribution tree preview from a recipient list. Nothing is stored.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter
from pydantic import ValidationError

from api.errors import APIError, InvalidRequestError
from api.models.requests import RecipientEntry, TreeRequest
from api.models.responses import TreeResponse

from core.merkle.background import build_merkle_tree_async
from core.schemas.distribution import Recipient, total_amount
from core.schemas.errors import AirdropException


logger = logging.getLogger(__name__)

router = APIRouter(tags=["tree"])


def to_recipients(entries: list[RecipientEntry]) -> list[Recipient]:
    """Validate request entries into Recipient models, keeping order."""
    recipients = []
    for index, entry in enumerate(entries):
        try:
            recipients.append(Recipient(address=entry.address, amount=entry.amount))
        except ValidationError as e:
            raise InvalidRequestError(
                f"Invalid recipient at index {index}",
                details={"index": index, "errors": e.errors(include_url=False, include_context=False)},
            ) from e
        except AirdropException as e:
            raise APIError.from_exception(e) from e
    return recipients


@router.post("/tree", response_model=TreeResponse, response_model_exclude_none=True)
async def build_tree(request: TreeRequest) -> TreeResponse:
    """
    Build the Merkle tree for a recipient list and return its root.

    The build runs on a worker thread so large lists do not block the
    event loop.
    """
    recipients = to_recipients(request.recipients)

    try:
        tree = await build_merkle_tree_async(recipients)
    except AirdropException as e:
        raise APIError.from_exception(e) from e

    logger.info("Built preview tree: %d leaves, root %s", tree.leaf_count, tree.root.hex())

    return TreeResponse(
        ok=True,
        root=tree.root.hex(),
        leaf_count=tree.leaf_count,
        depth=tree.depth,
        total_amount=str(total_amount(recipients)),
        leaves=[leaf.hex() for leaf in tree.leaves] if request.include_leaves else None,
    )
