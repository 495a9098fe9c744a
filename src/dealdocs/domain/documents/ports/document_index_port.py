"""Document Index Port - per-caller document listing.

Callers of the "my documents" query depend on this interface only, so the
current 1+N fan-out over the registry can later be swapped for a
denormalized per-caller index without touching them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class DocumentEntry:
    """One (deal, file) pair in a caller's document listing."""
    deal_id: str
    file_id: str
    filename: str
    content_type: str
    size: int
    uploaded_at: str  # ISO-8601 UTC, millisecond precision, "Z" suffix
    uploaded_by: str
    download_path: str


class DocumentIndexPort(ABC):
    """Lists every document across all deals a caller participates in."""

    @abstractmethod
    def list_documents_for(self, caller_id: str) -> List[DocumentEntry]:
        """Return one entry per (deal_id, file_id) visible to the caller.

        Raises:
            InternalError: If any underlying query fails (no partial results)
        """
        pass
