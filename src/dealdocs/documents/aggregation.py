""""My documents" aggregation across deals

FanOutDocumentIndex answers the per-caller listing with one participant
query followed by one file query per matching deal. The result is all or
nothing: a failure of any query fails the whole call.
"""

import logging
from datetime import datetime, timezone
from typing import List

from ..domain.deals.ports.document_registry_port import DocumentRegistryPort, RegistryError
from ..domain.documents.ports.document_index_port import DocumentEntry, DocumentIndexPort
from ..domain.errors import InternalError
from ..observability.metrics import document_listing_fanout, document_listings_total

logger = logging.getLogger(__name__)


def format_uploaded_at(value: datetime) -> str:
    """Render a timestamp as UTC ISO-8601 with milliseconds and a Z suffix.

    Naive datetimes are taken to be UTC (SQLite drops tzinfo).

    Example:
        >>> format_uploaded_at(datetime(2024, 3, 1, 12, 30, 5, 123456, tzinfo=timezone.utc))
        '2024-03-01T12:30:05.123Z'
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def download_path(deal_id: str, file_id: str) -> str:
    return f"/download/{deal_id}/{file_id}"


class FanOutDocumentIndex(DocumentIndexPort):
    """Document listing computed on read from the registry (1 + N queries)."""

    def __init__(self, registry: DocumentRegistryPort):
        self.registry = registry

    def list_documents_for(self, caller_id: str) -> List[DocumentEntry]:
        try:
            deal_ids = self.registry.query_deals_by_participant(caller_id)
            entries = [
                DocumentEntry(
                    deal_id=deal_id,
                    file_id=record.id,
                    filename=record.filename,
                    content_type=record.content_type,
                    size=record.size,
                    uploaded_at=format_uploaded_at(record.uploaded_at),
                    uploaded_by=record.uploaded_by,
                    download_path=download_path(deal_id, record.id),
                )
                for deal_id in deal_ids
                for record in self.registry.list_files(deal_id)
            ]
        except RegistryError as e:
            document_listings_total.labels(outcome="error").inc()
            logger.error(
                f"Document listing failed for caller {caller_id}: {e}",
                exc_info=True,
                extra={"caller_id": caller_id},
            )
            raise InternalError("Error retrieving documents") from e

        document_listings_total.labels(outcome="success").inc()
        document_listing_fanout.observe(len(deal_ids))
        logger.debug(
            f"Listed {len(entries)} documents across {len(deal_ids)} deals",
            extra={"caller_id": caller_id},
        )
        return entries
