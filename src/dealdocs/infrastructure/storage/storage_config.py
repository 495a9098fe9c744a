"""Storage configuration for S3-compatible object storage.

Derives the S3 connection block from application settings and validates it.
Supports both MinIO (development) and AWS S3 (production) with the same interface.
"""

from dataclasses import dataclass
from typing import Optional

from ...config import Settings


@dataclass
class StorageConfig:
    """Configuration for S3-compatible object storage.

    Attributes:
        endpoint_url: S3 endpoint URL (e.g., 'http://localhost:9000' for MinIO,
                      None for AWS S3 which uses default regional endpoints)
        access_key: S3 access key ID
        secret_key: S3 secret access key
        bucket_name: S3 bucket name for storing deal documents
        region: AWS region (default: 'us-east-1')
        public_base_url: Base URL for public references (None to use presigned URLs)
        presigned_url_expiry: Lifetime of presigned references in seconds
        chunk_size: Bytes per chunk for streamed reads
    """
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"
    public_base_url: Optional[str] = None
    presigned_url_expiry: int = 3600
    chunk_size: int = 64 * 1024


def load_storage_config(settings: Settings) -> StorageConfig:
    """Build storage configuration from settings.

    Environment Variables (via Settings):
        S3_ENDPOINT_URL: MinIO endpoint (e.g., 'http://localhost:9000');
                         empty for AWS S3 with default regional endpoints
        S3_ACCESS_KEY_ID / S3_SECRET_ACCESS_KEY: Credentials
        S3_BUCKET_NAME: Bucket name (default: 'dealdocs-documents')
        S3_REGION: AWS region (default: 'us-east-1')
        BLOB_PUBLIC_BASE_URL: Optional public base URL for references

    Raises:
        ValueError: If the resulting configuration is invalid
    """
    config = StorageConfig(
        endpoint_url=settings.S3_ENDPOINT_URL or None,
        access_key=settings.S3_ACCESS_KEY_ID,
        secret_key=settings.S3_SECRET_ACCESS_KEY,
        bucket_name=settings.S3_BUCKET_NAME,
        region=settings.S3_REGION,
        public_base_url=settings.BLOB_PUBLIC_BASE_URL or None,
        presigned_url_expiry=settings.PRESIGNED_URL_EXPIRY_SECONDS,
        chunk_size=settings.DOWNLOAD_CHUNK_SIZE,
    )
    validate_storage_config(config)
    return config


def validate_storage_config(config: StorageConfig) -> None:
    """Validate storage configuration.

    Raises:
        ValueError: If configuration is invalid
    """
    if not config.access_key:
        raise ValueError("Storage access_key is required")

    if not config.secret_key:
        raise ValueError("Storage secret_key is required")

    if not config.bucket_name:
        raise ValueError("Storage bucket_name is required")

    if config.chunk_size <= 0:
        raise ValueError(f"Invalid chunk_size: {config.chunk_size}")

    if config.endpoint_url:
        # MinIO configuration
        if not config.endpoint_url.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid endpoint_url: {config.endpoint_url}. "
                "Must start with http:// or https://"
            )
    else:
        # AWS S3 configuration
        if not config.region:
            raise ValueError("AWS region is required when using S3 (S3_ENDPOINT_URL not set)")

    if config.public_base_url and not config.public_base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid public_base_url: {config.public_base_url}. "
            "Must start with http:// or https://"
        )
