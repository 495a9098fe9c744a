"""Global FastAPI dependencies wiring ports to their adapters.

This module provides:
- get_registry: Document registry bound to the request's database session
- get_blob_store: S3 blob store built once from settings
- get_upload_service / get_download_service: Document pipelines
- get_document_index: Cross-deal "my documents" listing

Tests swap adapters through app.dependency_overrides, usually by overriding
get_db and get_blob_store only.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .database import get_db
from .documents.aggregation import FanOutDocumentIndex
from .documents.service import DownloadService, UploadService
from .domain.deals.ports.document_registry_port import DocumentRegistryPort
from .domain.documents.ports.blob_store_port import BlobStorePort
from .domain.documents.ports.document_index_port import DocumentIndexPort
from .infrastructure.repositories import SQLAlchemyDocumentRegistry
from .infrastructure.storage import S3BlobStore, load_storage_config


def get_registry(db: Annotated[Session, Depends(get_db)]) -> DocumentRegistryPort:
    return SQLAlchemyDocumentRegistry(db)


@lru_cache()
def get_blob_store() -> BlobStorePort:
    """Dependency for the blob store adapter.

    Built once from get_settings(); boto3 clients are thread-safe.
    Call get_blob_store.cache_clear() after changing settings.
    """
    return S3BlobStore.from_config(load_storage_config(get_settings()))


def get_upload_service(
    registry: Annotated[DocumentRegistryPort, Depends(get_registry)],
    blob_store: Annotated[BlobStorePort, Depends(get_blob_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UploadService:
    return UploadService(registry, blob_store, max_file_size=settings.MAX_UPLOAD_SIZE_BYTES)


def get_download_service(
    registry: Annotated[DocumentRegistryPort, Depends(get_registry)],
    blob_store: Annotated[BlobStorePort, Depends(get_blob_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> DownloadService:
    return DownloadService(
        registry,
        blob_store,
        chunk_timeout=settings.DOWNLOAD_CHUNK_TIMEOUT_SECONDS,
    )


def get_document_index(
    registry: Annotated[DocumentRegistryPort, Depends(get_registry)],
) -> DocumentIndexPort:
    return FanOutDocumentIndex(registry)
