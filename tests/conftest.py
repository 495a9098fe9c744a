"""Pytest fixtures for DealDocs tests.

Provides reusable test fixtures for:
- In-memory SQLite registry with fresh tables per test
- Seeded deals with known participant sets
- In-process blob store
- Application instance with adapters swapped via dependency_overrides
- Bearer token helpers

Usage:
    def test_listing(client, seeded_deals, auth_headers):
        response = client.get("/my-deals", headers=auth_headers("alice"))
        assert response.status_code == 200
"""

import os

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from typing import Callable, Dict, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dealdocs.auth.jwt import create_access_token
from dealdocs.database import get_db
from dealdocs.dependencies import get_blob_store
from dealdocs.infrastructure.repositories import SQLAlchemyDocumentRegistry
from dealdocs.main import create_app
from dealdocs.models import Base, Deal

from tests.fixtures.deals import make_deal
from tests.fixtures.fakes import InMemoryBlobStore
from tests.fixtures.payloads import PDF_BYTES


# Single shared in-memory database; the app runs requests on worker threads
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def seeded_deals(db_session: Session) -> Dict[str, Deal]:
    """Three deals: alice is in alpha and beta, bob only in alpha, dave only in gamma."""
    return {
        "deal-alpha": make_deal(db_session, "deal-alpha", ["alice", "bob"]),
        "deal-beta": make_deal(db_session, "deal-beta", ["alice", "carol"]),
        "deal-gamma": make_deal(db_session, "deal-gamma", ["dave"]),
    }


@pytest.fixture(scope="function")
def registry(db_session: Session) -> SQLAlchemyDocumentRegistry:
    return SQLAlchemyDocumentRegistry(db_session)


@pytest.fixture(scope="function")
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore(chunk_size=4096)


@pytest.fixture(scope="function")
def app(db_session: Session, blob_store: InMemoryBlobStore) -> Generator[FastAPI, None, None]:
    """Application wired to the test session and in-memory blob store."""
    application = create_app()

    def override_get_db():
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_blob_store] = lambda: blob_store

    yield application

    application.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> Callable[[str], Dict[str, str]]:
    """Build an Authorization header for a caller identity."""

    def _headers(caller_id: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(caller_id)}"}

    return _headers


@pytest.fixture
def upload_file(client: TestClient, auth_headers):
    """POST /upload helper returning the raw response."""

    def _upload(
        caller_id: str,
        deal_id: str,
        data: bytes = PDF_BYTES,
        filename: str = "contract.pdf",
        content_type: str = "application/pdf",
    ):
        return client.post(
            "/upload",
            headers=auth_headers(caller_id),
            data={"dealId": deal_id},
            files={"file": (filename, data, content_type)},
        )

    return _upload
