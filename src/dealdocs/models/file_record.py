"""FileRecord SQLAlchemy model

A FileRecord describes one uploaded document, nested under its deal.
Records are append-only: created after the blob write succeeded, never
updated or deleted by this service.
"""

from uuid import uuid4

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from .base import Base


class FileRecord(Base):
    """Metadata for a document stored in the blob store."""
    __tablename__ = "file_record"
    __table_args__ = (
        Index("ix_file_record_deal_id", "deal_id"),
        Index("ix_file_record_deal_uploaded_at", "deal_id", "uploaded_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    deal_id = Column(String(128), ForeignKey("deal.id", ondelete="RESTRICT"), nullable=False)
    filename = Column(Text, nullable=False)
    storage_key = Column(Text, nullable=False, unique=True)  # {deal_id}/{generated_id}-{filename}
    content_type = Column(String(255), nullable=False)
    size = Column(BigInteger, nullable=False)
    uploaded_by = Column(String(128), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), nullable=False)
    url = Column(Text, nullable=False)

    # Relationships
    deal = relationship("Deal", back_populates="files")
