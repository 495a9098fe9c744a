"""Unit tests for S3 Blob Store using moto

Covers writes, references (public and presigned), chunked streaming reads,
missing keys and bucket health checks.
"""

from urllib.parse import urlparse

import boto3
import pytest
from moto import mock_aws

from dealdocs.domain.documents.ports.blob_store_port import BlobNotFoundError, StorageError
from dealdocs.infrastructure.storage import S3BlobStore, StorageConfig, validate_storage_config


# Test constants
TEST_BUCKET = "test-dealdocs-bucket"
TEST_REGION = "us-east-1"
TEST_ACCESS_KEY = "test-access-key"
TEST_SECRET_KEY = "test-secret-key"


def make_store(**overrides) -> S3BlobStore:
    kwargs = dict(
        endpoint_url=None,  # AWS S3 (moto mocks this)
        access_key=TEST_ACCESS_KEY,
        secret_key=TEST_SECRET_KEY,
        bucket_name=TEST_BUCKET,
        region=TEST_REGION,
    )
    kwargs.update(overrides)
    return S3BlobStore(**kwargs)


@pytest.fixture
def s3_client():
    """Mock S3 environment with bucket"""
    with mock_aws():
        client = boto3.client(
            "s3",
            region_name=TEST_REGION,
            aws_access_key_id=TEST_ACCESS_KEY,
            aws_secret_access_key=TEST_SECRET_KEY,
        )
        client.create_bucket(Bucket=TEST_BUCKET)

        yield client


@pytest.fixture
def blob_store(s3_client):
    return make_store(chunk_size=4)


async def read_all(stream) -> list:
    chunks = []
    async for chunk in stream:
        chunks.append(chunk)
    return chunks


class TestWrite:
    """Test blob writes"""

    @pytest.mark.asyncio
    async def test_write_stores_object_with_content_type(self, blob_store, s3_client):
        """Test object body and metadata"""
        await blob_store.write("deal-1/abc-contract.pdf", b"%PDF-1.7 data", "application/pdf")

        obj = s3_client.get_object(Bucket=TEST_BUCKET, Key="deal-1/abc-contract.pdf")
        assert obj["Body"].read() == b"%PDF-1.7 data"
        assert obj["ContentType"] == "application/pdf"

    @pytest.mark.asyncio
    async def test_write_returns_presigned_reference(self, blob_store):
        """Test presigned GET URL when no public base URL is configured"""
        url = await blob_store.write("deal-1/abc-contract.pdf", b"%PDF-", "application/pdf")

        parsed = urlparse(url)
        assert parsed.path.endswith("/deal-1/abc-contract.pdf")
        assert "Signature" in parsed.query or "X-Amz-Signature" in parsed.query

    @pytest.mark.asyncio
    async def test_write_returns_public_reference(self, s3_client):
        """Test {base}/{key} references with a public base URL"""
        store = make_store(public_base_url="https://cdn.example.com/docs/")

        url = await store.write("deal-1/abc-signed contract.pdf", b"%PDF-", "application/pdf")

        assert url == "https://cdn.example.com/docs/deal-1/abc-signed%20contract.pdf"

    @pytest.mark.asyncio
    async def test_write_to_missing_bucket(self, s3_client):
        """Test write failure maps to StorageError"""
        store = make_store(bucket_name="no-such-bucket")

        with pytest.raises(StorageError):
            await store.write("k", b"data", "application/pdf")


class TestStreamingRead:
    """Test chunked reads"""

    @pytest.mark.asyncio
    async def test_stream_yields_chunks(self, blob_store):
        """Test object is returned in chunk_size pieces"""
        await blob_store.write("deal-1/k", b"aaaabbbbcc", "application/pdf")

        chunks = await read_all(blob_store.open_read_stream("deal-1/k"))

        assert chunks == [b"aaaa", b"bbbb", b"cc"]

    @pytest.mark.asyncio
    async def test_missing_key(self, blob_store):
        """Test missing object raises BlobNotFoundError on first iteration"""
        stream = blob_store.open_read_stream("deal-1/missing")

        with pytest.raises(BlobNotFoundError):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_early_close(self, blob_store):
        """Test caller can stop after the first chunk"""
        await blob_store.write("deal-1/k", b"aaaabbbbcc", "application/pdf")
        stream = blob_store.open_read_stream("deal-1/k")

        assert await stream.__anext__() == b"aaaa"
        await stream.aclose()

        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_repeated_reads_are_identical(self, blob_store):
        """Test a stored object can be streamed any number of times"""
        await blob_store.write("deal-1/k", b"0123456789", "application/pdf")

        first = await read_all(blob_store.open_read_stream("deal-1/k"))
        second = await read_all(blob_store.open_read_stream("deal-1/k"))

        assert first == second


class TestHealth:
    """Test bucket health checks"""

    @pytest.mark.asyncio
    async def test_existing_bucket_is_healthy(self, blob_store):
        """Test head_bucket on the configured bucket"""
        await blob_store.check_health()

    @pytest.mark.asyncio
    async def test_missing_bucket_is_unhealthy(self, s3_client):
        """Test missing bucket raises StorageError"""
        store = make_store(bucket_name="no-such-bucket")

        with pytest.raises(StorageError):
            await store.check_health()


class TestStorageConfig:
    """Test storage configuration validation"""

    def test_valid_minio_config(self):
        """Test MinIO endpoint configuration"""
        validate_storage_config(StorageConfig(
            endpoint_url="http://localhost:9000",
            access_key="minioadmin",
            secret_key="minioadmin",
            bucket_name="dealdocs",
        ))

    @pytest.mark.parametrize("overrides,message", [
        ({"access_key": ""}, "access_key"),
        ({"bucket_name": ""}, "bucket_name"),
        ({"endpoint_url": "localhost:9000"}, "endpoint_url"),
        ({"chunk_size": 0}, "chunk_size"),
        ({"public_base_url": "cdn.example.com"}, "public_base_url"),
    ])
    def test_invalid_config(self, overrides, message):
        """Test each invalid field is reported"""
        values = dict(
            endpoint_url="http://localhost:9000",
            access_key="minioadmin",
            secret_key="minioadmin",
            bucket_name="dealdocs",
        )
        values.update(overrides)

        with pytest.raises(ValueError, match=message):
            validate_storage_config(StorageConfig(**values))
