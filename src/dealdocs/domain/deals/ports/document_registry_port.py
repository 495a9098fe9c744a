"""Document Registry Port - Domain interface for deal and file metadata.

The registry holds Deal records (id + participant set) and, nested under
each deal, FileRecord entries. Deals are created and maintained elsewhere;
this subsystem only reads them and appends file records.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import FrozenSet, List, Optional


class RegistryError(Exception):
    """Raised by registry adapters when the underlying store fails."""
    pass


@dataclass(frozen=True)
class DealSnapshot:
    """Read-only view of a deal.

    Attributes:
        id: Deal identifier
        participants: User identities allowed to access the deal's documents
    """
    id: str
    participants: FrozenSet[str]


@dataclass(frozen=True)
class NewFileRecord:
    """Metadata for a file record that has not been persisted yet."""
    filename: str
    storage_key: str
    content_type: str
    size: int
    uploaded_by: str
    uploaded_at: datetime
    url: str


@dataclass(frozen=True)
class FileRecordData:
    """Persisted file record.

    Attributes:
        id: Registry-generated identifier
        deal_id: Owning deal
        filename: Original filename as uploaded
        storage_key: Blob store key ({deal_id}/{generated_id}-{filename})
        content_type: Declared (and content-verified) MIME type
        size: Size in bytes
        uploaded_by: Caller identity that uploaded the file
        uploaded_at: Upload timestamp (UTC)
        url: Retrievable reference returned by the blob store
    """
    id: str
    deal_id: str
    filename: str
    storage_key: str
    content_type: str
    size: int
    uploaded_by: str
    uploaded_at: datetime
    url: str


class DocumentRegistryPort(ABC):
    """Port interface for the structured deal/document store.

    All methods raise RegistryError when the store is unavailable or a query
    fails. "Not found" is signalled with None, never with an exception.
    """

    @abstractmethod
    def get_deal(self, deal_id: str) -> Optional[DealSnapshot]:
        """Load a deal with its participant set, or None if it doesn't exist."""

    @abstractmethod
    def query_deals_by_participant(self, caller_id: str) -> List[str]:
        """Return the ids of all deals whose participants include caller_id.

        Ids are returned in ascending order.
        """

    @abstractmethod
    def add_file(self, deal_id: str, record: NewFileRecord) -> str:
        """Append a file record under the deal and return its generated id."""

    @abstractmethod
    def get_file(self, deal_id: str, file_id: str) -> Optional[FileRecordData]:
        """Load a file record within the deal's collection, or None.

        A file id that exists under a different deal is reported as None.
        """

    @abstractmethod
    def list_files(self, deal_id: str) -> List[FileRecordData]:
        """List all file records of a deal, oldest upload first."""
