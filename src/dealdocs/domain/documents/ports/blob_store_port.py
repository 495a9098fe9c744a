"""Blob Store Port - Domain interface for opaque-key object storage.

This port defines the contract for writing document binaries and reading
them back as a stream. Adapters must implement this interface to provide S3,
MinIO, or other storage backends.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator


class StorageError(Exception):
    """Base exception for blob storage operations."""
    pass


class BlobNotFoundError(StorageError):
    """The requested key does not exist in the blob store."""
    pass


class BlobStorePort(ABC):
    """Port interface for opaque-key binary storage.

    Key Design Principles:
    - Keys are opaque to the store; callers guarantee uniqueness
      (format: {deal_id}/{generated_id}-{filename})
    - Reads are streamed chunk by chunk; no adapter may buffer a whole object
    - Write returns a retrievable reference that is stored with the metadata

    Example Usage:
        store = S3BlobStore(...)

        url = await store.write("deal-1/3f2c...-contract.pdf", data, "application/pdf")

        stream = store.open_read_stream("deal-1/3f2c...-contract.pdf")
        try:
            async for chunk in stream:
                ...
        finally:
            await stream.aclose()
    """

    @abstractmethod
    async def write(self, key: str, data: bytes, content_type: str) -> str:
        """Store a binary under key.

        Args:
            key: Storage key (must not already be in use)
            data: File payload
            content_type: MIME type recorded with the object

        Returns:
            str: Retrievable reference (public or presigned URL)

        Raises:
            StorageError: If the write fails or storage is unavailable
        """
        pass

    @abstractmethod
    def open_read_stream(self, key: str) -> AsyncIterator[bytes]:
        """Open a streaming read of the object at key.

        Nothing is fetched until the first chunk is requested, so errors
        opening the object surface on the first iteration. Callers must
        aclose() the iterator when they stop early; adapters release their
        upstream handle on close.

        Raises (during iteration):
            BlobNotFoundError: If no object exists at key
            StorageError: If the read fails at any point
        """
        pass

    @abstractmethod
    async def check_health(self) -> None:
        """Verify the store is reachable.

        Raises:
            StorageError: If the store or bucket is unavailable
        """
        pass
