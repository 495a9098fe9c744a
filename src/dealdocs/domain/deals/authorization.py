"""Deal access authorization.

Access to a deal's documents is a plain set-membership check:
caller_id in deal.participants. There are no roles or ACL lists.

The predicate is kept free of I/O so it can be tested in isolation; the gate
function composes it with a registry lookup and is shared by the upload and
download pipelines.
"""

import logging

from ..errors import ForbiddenError, NotFoundError
from .ports.document_registry_port import DealSnapshot, DocumentRegistryPort

logger = logging.getLogger(__name__)


def is_participant(caller_id: str, deal: DealSnapshot) -> bool:
    """Check whether caller_id belongs to the deal's participant set.

    Example:
        >>> deal = DealSnapshot(id="d1", participants=frozenset({"alice"}))
        >>> is_participant("alice", deal)
        True
        >>> is_participant("mallory", deal)
        False
    """
    if not caller_id:
        return False
    return caller_id in deal.participants


def authorize_deal_access(
    registry: DocumentRegistryPort,
    caller_id: str,
    deal_id: str,
) -> DealSnapshot:
    """Load the deal and verify the caller may access it.

    Args:
        registry: Document registry
        caller_id: Verified caller identity
        deal_id: Deal being accessed

    Returns:
        DealSnapshot: The loaded deal

    Raises:
        NotFoundError: If the deal doesn't exist
        ForbiddenError: If the caller is not a participant
        RegistryError: If the registry lookup fails
    """
    deal = registry.get_deal(deal_id)
    if deal is None:
        raise NotFoundError("Deal not found")

    if not is_participant(caller_id, deal):
        logger.warning(
            f"Deal access denied: deal_id={deal_id}, caller_id={caller_id}"
        )
        raise ForbiddenError("Unauthorized access")

    return deal
