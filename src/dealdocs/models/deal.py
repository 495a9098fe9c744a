"""Deal SQLAlchemy models

Deals and their participant sets are owned by the deal management service;
this service only reads them. They are mapped here so the document registry
can filter deals by membership and nest file records under them.
"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class Deal(Base):
    """Escrow transaction that documents attach to."""
    __tablename__ = "deal"

    id = Column(String(128), primary_key=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    participants = relationship(
        "DealParticipant",
        back_populates="deal",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    files = relationship("FileRecord", back_populates="deal")

    @property
    def participant_ids(self) -> frozenset:
        return frozenset(p.user_id for p in self.participants)


class DealParticipant(Base):
    """Membership of one user identity in one deal."""
    __tablename__ = "deal_participant"
    __table_args__ = (
        UniqueConstraint("deal_id", "user_id", name="uq_deal_participant_deal_user"),
        Index("ix_deal_participant_user_id", "user_id"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    deal_id = Column(String(128), ForeignKey("deal.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(128), nullable=False)

    deal = relationship("Deal", back_populates="participants")
