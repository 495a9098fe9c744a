"""SQLAlchemy models for the document registry"""

from .base import Base
from .deal import Deal, DealParticipant
from .file_record import FileRecord

__all__ = [
    "Base",
    "Deal",
    "DealParticipant",
    "FileRecord",
]
