"""S3 Blob Store - Implementation of BlobStorePort using boto3.

Provides S3-compatible storage operations for AWS S3, MinIO, and other
S3-compatible services. boto3 is blocking, so every call is moved to the
threadpool; downloads are pulled one chunk at a time from the response body
and never held in memory as a whole.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging
from typing import AsyncIterator, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from starlette.concurrency import run_in_threadpool

from ...domain.documents.ports.blob_store_port import (
    BlobNotFoundError,
    BlobStorePort,
    StorageError,
)
from .storage_config import StorageConfig

logger = logging.getLogger(__name__)

_END_OF_BODY = object()


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


class S3BlobStore(BlobStorePort):
    """S3-compatible blob store using boto3.

    Features:
    - Writes carry the declared content type as object metadata
    - Streamed reads via StreamingBody.iter_chunks()
    - References are public URLs when a base URL is configured,
      presigned GET URLs otherwise

    Example:
        config = load_storage_config(get_settings())
        store = S3BlobStore(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )

        url = await store.write("deal-1/3f2c...-contract.pdf", data, "application/pdf")
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: str,
        secret_key: str,
        bucket_name: str,
        region: str = "us-east-1",
        public_base_url: Optional[str] = None,
        presigned_url_expiry: int = 3600,
        chunk_size: int = 64 * 1024,
    ):
        """Initialize S3 blob store.

        Args:
            endpoint_url: S3 endpoint URL (None for AWS S3, URL for MinIO)
            access_key: S3 access key ID
            secret_key: S3 secret access key
            bucket_name: S3 bucket name
            region: AWS region (default: 'us-east-1')
            public_base_url: Base URL for public references (None for presigned)
            presigned_url_expiry: Presigned reference lifetime in seconds
            chunk_size: Bytes per chunk for streamed reads

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

        self.bucket_name = bucket_name
        self.region = region
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.presigned_url_expiry = presigned_url_expiry
        self.chunk_size = chunk_size

        logger.info(
            f"Initialized S3 blob store: bucket={bucket_name}, "
            f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
        )

    @classmethod
    def from_config(cls, config: StorageConfig) -> "S3BlobStore":
        return cls(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
            public_base_url=config.public_base_url,
            presigned_url_expiry=config.presigned_url_expiry,
            chunk_size=config.chunk_size,
        )

    async def write(self, key: str, data: bytes, content_type: str) -> str:
        """Upload data to S3 under key and return its reference.

        Raises:
            StorageError: If upload fails
        """
        try:
            await run_in_threadpool(
                self.s3_client.put_object,
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except ClientError as e:
            error_code = _error_code(e)
            logger.error(
                f"S3 upload failed: storage_key={key}, "
                f"error={error_code}, message={e}"
            )
            raise StorageError(f"Failed to upload file: {error_code}") from e
        except Exception as e:
            logger.error(f"Unexpected error during upload: storage_key={key}, error={e}")
            raise StorageError(f"Failed to upload file: {e}") from e

        logger.info(
            f"Uploaded blob: storage_key={key}, size={len(data)}, content_type={content_type}"
        )

        return await self._reference_for(key)

    async def open_read_stream(self, key: str) -> AsyncIterator[bytes]:
        """Stream the object at key chunk by chunk.

        The GET is issued on first iteration. The response body is closed when
        the iterator is exhausted, fails, or is closed early by the caller.

        Raises:
            BlobNotFoundError: If the object doesn't exist
            StorageError: If the GET or any chunk read fails
        """
        try:
            response = await run_in_threadpool(
                self.s3_client.get_object,
                Bucket=self.bucket_name,
                Key=key,
            )
        except ClientError as e:
            error_code = _error_code(e)
            if error_code in ("NoSuchKey", "404"):
                logger.warning(f"Blob not found: storage_key={key}")
                raise BlobNotFoundError(f"Blob not found: {key}") from e
            logger.error(f"S3 retrieval failed: storage_key={key}, error={error_code}")
            raise StorageError(f"Failed to retrieve file: {error_code}") from e
        except BotoCoreError as e:
            logger.error(f"S3 retrieval failed: storage_key={key}, error={e}")
            raise StorageError(f"Failed to retrieve file: {e}") from e

        body = response["Body"]
        chunks = body.iter_chunks(chunk_size=self.chunk_size)
        try:
            while True:
                try:
                    chunk = await run_in_threadpool(next, chunks, _END_OF_BODY)
                except Exception as e:
                    logger.error(f"S3 stream read failed: storage_key={key}, error={e}")
                    raise StorageError(f"Failed reading file stream: {e}") from e

                if chunk is _END_OF_BODY:
                    break
                yield chunk
        finally:
            body.close()

    async def check_health(self) -> None:
        """Verify that the configured bucket exists.

        Raises:
            StorageError: If bucket check fails or bucket doesn't exist
        """
        try:
            await run_in_threadpool(self.s3_client.head_bucket, Bucket=self.bucket_name)
        except ClientError as e:
            error_code = _error_code(e)
            if error_code == "404":
                raise StorageError(
                    f"Bucket '{self.bucket_name}' does not exist. "
                    f"Create it first or update S3_BUCKET_NAME environment variable."
                ) from e
            raise StorageError(f"Failed to verify bucket: {error_code}") from e
        except Exception as e:
            raise StorageError(f"Failed to verify bucket: {e}") from e

    async def _reference_for(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{quote(key)}"

        try:
            return await run_in_threadpool(
                self.s3_client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=self.presigned_url_expiry,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Presigned URL generation failed: storage_key={key}, error={e}")
            raise StorageError(f"Failed to generate presigned URL: {e}") from e
