"""Upload and download pipelines for deal documents

Both pipelines run the same access gate (deal exists, caller is a
participant) before touching file records or blobs. Failures of the registry
or blob store are logged with their cause and surface as InternalError.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from ..domain.deals import authorize_deal_access
from ..domain.deals.ports.document_registry_port import (
    DocumentRegistryPort,
    FileRecordData,
    NewFileRecord,
    RegistryError,
)
from ..domain.documents.ports.blob_store_port import BlobStorePort, StorageError
from ..domain.documents.validation import (
    DEFAULT_MAX_FILE_SIZE,
    normalize_mime_type,
    validate_file_content,
    validate_file_size,
    validate_filename,
)
from ..domain.errors import (
    DocumentAccessError,
    InternalError,
    InvalidRequestError,
    NotFoundError,
)
from ..observability.metrics import upload_size_bytes, uploads_total
from .streaming import BlobStreamResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    file_id: str
    url: str
    storage_key: str


def build_storage_key(deal_id: str, filename: str) -> str:
    """Unique blob key for a new upload: {deal_id}/{generated_id}-{filename}"""
    return f"{deal_id}/{uuid4()}-{filename}"


class UploadService:
    """Validates an upload, stores its binary and records its metadata."""

    def __init__(
        self,
        registry: DocumentRegistryPort,
        blob_store: BlobStorePort,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ):
        self.registry = registry
        self.blob_store = blob_store
        self.max_file_size = max_file_size

    @property
    def read_limit(self) -> int:
        """Bytes to buffer from a client upload: the limit plus one."""
        return self.max_file_size + 1

    async def upload(
        self,
        caller_id: str,
        deal_id: Optional[str],
        filename: Optional[str],
        content_type: Optional[str],
        data: Optional[bytes],
        size: Optional[int] = None,
    ) -> UploadResult:
        """Store a new document under deal_id on behalf of caller_id.

        data may be truncated to read_limit bytes; size is the full length
        when the transport knows it.

        Checks run in order: required inputs, access gate, filename, size,
        content type and detected content. Nothing is written until all of them
        pass.

        Raises:
            InvalidRequestError: Missing input or rejected file
            NotFoundError: Deal doesn't exist
            ForbiddenError: Caller is not a participant
            InternalError: Blob store or registry failure
        """
        try:
            result = await self._upload(caller_id, deal_id, filename, content_type, data, size)
        except InternalError:
            uploads_total.labels(outcome="error").inc()
            raise
        except DocumentAccessError:
            uploads_total.labels(outcome="rejected").inc()
            raise

        uploads_total.labels(outcome="success").inc()
        upload_size_bytes.observe(len(data))
        return result

    async def _upload(self, caller_id, deal_id, filename, content_type, data, size) -> UploadResult:
        if not data or not deal_id or not caller_id:
            raise InvalidRequestError("Missing file, dealId, or userId")

        try:
            authorize_deal_access(self.registry, caller_id, deal_id)
        except RegistryError as e:
            logger.error(f"Registry lookup failed for deal {deal_id}: {e}", exc_info=True)
            raise InternalError("Error uploading file") from e

        for is_valid, error_message in (
            validate_filename(filename),
            validate_file_size(max(size or 0, len(data)), self.max_file_size),
            validate_file_content(data, content_type),
        ):
            if not is_valid:
                logger.info(
                    f"Upload rejected: deal_id={deal_id}, filename={filename!r}, reason={error_message}",
                    extra={"deal_id": deal_id, "caller_id": caller_id},
                )
                raise InvalidRequestError(error_message)

        mime_type = normalize_mime_type(content_type)
        storage_key = build_storage_key(deal_id, filename)

        try:
            url = await self.blob_store.write(storage_key, data, mime_type)
        except StorageError as e:
            logger.error(
                f"Blob write failed: storage_key={storage_key}, error={e}",
                exc_info=True,
                extra={"deal_id": deal_id, "storage_key": storage_key},
            )
            raise InternalError("Error uploading file") from e

        record = NewFileRecord(
            filename=filename,
            storage_key=storage_key,
            content_type=mime_type,
            size=len(data),
            uploaded_by=caller_id,
            uploaded_at=datetime.now(timezone.utc),
            url=url,
        )

        try:
            file_id = self.registry.add_file(deal_id, record)
        except RegistryError as e:
            # The blob is already stored; it stays orphaned under storage_key
            logger.error(
                f"Failed to record uploaded file, orphaned blob at {storage_key}: {e}",
                exc_info=True,
                extra={"deal_id": deal_id, "storage_key": storage_key},
            )
            raise InternalError("Error uploading file") from e

        logger.info(
            f"File uploaded: deal_id={deal_id}, file_id={file_id}, size={len(data)}",
            extra={
                "deal_id": deal_id,
                "file_id": file_id,
                "caller_id": caller_id,
                "storage_key": storage_key,
            },
        )
        return UploadResult(file_id=file_id, url=url, storage_key=storage_key)


class DownloadService:
    """Resolves a file record for a caller and opens its download response."""

    def __init__(
        self,
        registry: DocumentRegistryPort,
        blob_store: BlobStorePort,
        chunk_timeout: Optional[float] = None,
    ):
        self.registry = registry
        self.blob_store = blob_store
        self.chunk_timeout = chunk_timeout

    def resolve(self, caller_id: str, deal_id: str, file_id: str) -> FileRecordData:
        """Run the access gate and load the file record.

        The file record is only looked up once the gate has passed.

        Raises:
            NotFoundError: Deal or file doesn't exist
            ForbiddenError: Caller is not a participant
            InternalError: Registry failure
        """
        try:
            authorize_deal_access(self.registry, caller_id, deal_id)
            record = self.registry.get_file(deal_id, file_id)
        except RegistryError as e:
            logger.error(
                f"Registry lookup failed: deal_id={deal_id}, file_id={file_id}: {e}",
                exc_info=True,
            )
            raise InternalError("Error downloading file") from e

        if record is None:
            raise NotFoundError("File not found")
        return record

    def open_response(self, record: FileRecordData) -> BlobStreamResponse:
        """Build the streamed response; the blob is read when it is sent."""
        return BlobStreamResponse(
            record=record,
            chunks=self.blob_store.open_read_stream(record.storage_key),
            chunk_timeout=self.chunk_timeout,
        )
