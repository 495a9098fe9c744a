from .blob_store_port import BlobNotFoundError, BlobStorePort, StorageError
from .document_index_port import DocumentEntry, DocumentIndexPort

__all__ = [
    "BlobNotFoundError",
    "BlobStorePort",
    "StorageError",
    "DocumentEntry",
    "DocumentIndexPort",
]
