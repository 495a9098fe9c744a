"""SQLAlchemy Document Registry - Implementation of DocumentRegistryPort.

Deals, participants and file records live in relational tables; a deal's
"file collection" is the set of file_record rows with its deal_id.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...domain.deals.ports.document_registry_port import (
    DealSnapshot,
    DocumentRegistryPort,
    FileRecordData,
    NewFileRecord,
    RegistryError,
)
from ...models.deal import Deal, DealParticipant
from ...models.file_record import FileRecord

logger = logging.getLogger(__name__)


def _to_file_record_data(row: FileRecord) -> FileRecordData:
    return FileRecordData(
        id=row.id,
        deal_id=row.deal_id,
        filename=row.filename,
        storage_key=row.storage_key,
        content_type=row.content_type,
        size=row.size,
        uploaded_by=row.uploaded_by,
        uploaded_at=row.uploaded_at,
        url=row.url,
    )


class SQLAlchemyDocumentRegistry(DocumentRegistryPort):
    """Document registry backed by a SQLAlchemy session.

    One instance per request; the session is owned by the caller
    (the get_db dependency closes it).

    Example:
        registry = SQLAlchemyDocumentRegistry(db)
        deal = registry.get_deal("deal-42")
        if deal and "alice" in deal.participants:
            files = registry.list_files(deal.id)
    """

    def __init__(self, session: Session):
        self.session = session

    def get_deal(self, deal_id: str) -> Optional[DealSnapshot]:
        try:
            deal = self.session.get(Deal, deal_id)
        except SQLAlchemyError as e:
            logger.error(f"Deal lookup failed: deal_id={deal_id}, error={e}")
            raise RegistryError(f"Failed to load deal {deal_id}") from e

        if deal is None:
            return None

        return DealSnapshot(id=deal.id, participants=deal.participant_ids)

    def query_deals_by_participant(self, caller_id: str) -> List[str]:
        stmt = (
            select(DealParticipant.deal_id)
            .where(DealParticipant.user_id == caller_id)
            .distinct()
            .order_by(DealParticipant.deal_id)
        )
        try:
            return list(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Deal membership query failed: caller_id={caller_id}, error={e}")
            raise RegistryError("Failed to query deals by participant") from e

    def add_file(self, deal_id: str, record: NewFileRecord) -> str:
        row = FileRecord(
            deal_id=deal_id,
            filename=record.filename,
            storage_key=record.storage_key,
            content_type=record.content_type,
            size=record.size,
            uploaded_by=record.uploaded_by,
            uploaded_at=record.uploaded_at,
            url=record.url,
        )
        try:
            self.session.add(row)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                f"File record insert failed: deal_id={deal_id}, "
                f"storage_key={record.storage_key}, error={e}"
            )
            raise RegistryError(f"Failed to persist file record for deal {deal_id}") from e

        return row.id

    def get_file(self, deal_id: str, file_id: str) -> Optional[FileRecordData]:
        stmt = select(FileRecord).where(
            FileRecord.id == file_id,
            FileRecord.deal_id == deal_id,
        )
        try:
            row = self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"File lookup failed: deal_id={deal_id}, file_id={file_id}, error={e}")
            raise RegistryError(f"Failed to load file {file_id}") from e

        return _to_file_record_data(row) if row is not None else None

    def list_files(self, deal_id: str) -> List[FileRecordData]:
        stmt = (
            select(FileRecord)
            .where(FileRecord.deal_id == deal_id)
            .order_by(FileRecord.uploaded_at, FileRecord.id)
        )
        try:
            rows = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"File listing failed: deal_id={deal_id}, error={e}")
            raise RegistryError(f"Failed to list files for deal {deal_id}") from e

        return [_to_file_record_data(row) for row in rows]
