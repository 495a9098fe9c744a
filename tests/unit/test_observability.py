"""Unit tests for logging, request correlation and health helpers"""

import asyncio
import json
import logging
from unittest.mock import MagicMock

import pytest

from dealdocs.dependencies import get_blob_store
from dealdocs.observability.health import (
    ComponentHealth,
    HealthStatus,
    check_blob_store_health,
    check_database_health,
    get_overall_health,
)
from dealdocs.observability.logging_config import JSONFormatter, RequestIDFilter
from dealdocs.observability import router as observability_router
from dealdocs.observability.request_id import get_request_id, request_id_var, set_request_id

from tests.fixtures.fakes import InMemoryBlobStore, UnavailableBlobStore


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("dealdocs.test", logging.ERROR, __file__, 1, "boom %s", ("now",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test structured log lines"""

    def test_core_fields(self):
        """Test level, logger and rendered message"""
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "ERROR"
        assert data["logger"] == "dealdocs.test"
        assert data["message"] == "boom now"
        assert data["timestamp"].endswith("Z")

    def test_download_context_fields(self):
        """Test download extras are carried into the log line"""
        record = make_record(deal_id="deal-1", file_id="f1", download_state="STREAMING", bytes_sent=4096)

        data = json.loads(JSONFormatter().format(record))

        assert data["deal_id"] == "deal-1"
        assert data["file_id"] == "f1"
        assert data["download_state"] == "STREAMING"
        assert data["bytes_sent"] == 4096

    def test_unknown_extras_are_ignored(self):
        """Test only whitelisted extras are emitted"""
        data = json.loads(JSONFormatter().format(make_record(password="hunter2")))

        assert "password" not in data


class TestRequestID:
    """Test request id propagation"""

    def test_default_request_id(self):
        """Test placeholder outside a request"""
        assert get_request_id() == "no-request-id"

    def test_filter_stamps_current_request_id(self):
        """Test log records pick up the context request id"""
        token = set_request_id("req-123")
        try:
            record = make_record()
            RequestIDFilter().filter(record)
        finally:
            request_id_var.reset(token)

        assert record.request_id == "req-123"

    def test_incoming_request_id_is_echoed(self, client):
        """Test middleware keeps a caller-supplied X-Request-ID"""
        response = client.get("/", headers={"X-Request-ID": "trace-abc"})

        assert response.headers["X-Request-ID"] == "trace-abc"

    def test_request_id_is_generated(self, client):
        """Test middleware generates an id when none is supplied"""
        first = client.get("/").headers["X-Request-ID"]
        second = client.get("/").headers["X-Request-ID"]

        assert first and second and first != second


class TestHealthChecks:
    """Test component health helpers"""

    def test_database_healthy(self, db_session):
        """Test SELECT 1 on a live session"""
        assert check_database_health(db_session).status == HealthStatus.HEALTHY

    def test_database_unhealthy(self):
        """Test failing session is reported, not raised"""
        session = MagicMock()
        session.execute.side_effect = RuntimeError("db down")

        health = check_database_health(session)

        assert health.status == HealthStatus.UNHEALTHY
        assert "db down" in health.message

    @pytest.mark.asyncio
    async def test_blob_store_health(self):
        """Test blob store check maps errors to UNHEALTHY"""
        assert (await check_blob_store_health(InMemoryBlobStore())).status == HealthStatus.HEALTHY
        assert (await check_blob_store_health(UnavailableBlobStore())).status == HealthStatus.UNHEALTHY

    def test_overall_health(self):
        """Test any unhealthy component makes the service unhealthy"""
        healthy = ComponentHealth(status=HealthStatus.HEALTHY)
        unhealthy = ComponentHealth(status=HealthStatus.UNHEALTHY)

        assert get_overall_health({"a": healthy, "b": healthy}) == HealthStatus.HEALTHY
        assert get_overall_health({"a": healthy, "b": unhealthy}) == HealthStatus.UNHEALTHY

    def test_health_endpoint_reports_storage_outage(self, app, client):
        """Test /health returns 503 when object storage is down"""
        app.dependency_overrides[get_blob_store] = lambda: UnavailableBlobStore()

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["components"]["object_storage"]["status"] == "unhealthy"

    def test_health_endpoint_checks_database_off_event_loop(self, client, monkeypatch):
        """Test the blocking SELECT 1 runs in a worker thread"""
        calls = []

        def recording_check(db):
            try:
                asyncio.get_running_loop()
                calls.append("event-loop")
            except RuntimeError:
                calls.append("worker-thread")
            return ComponentHealth(status=HealthStatus.HEALTHY)

        monkeypatch.setattr(observability_router, "check_database_health", recording_check)

        response = client.get("/health")

        assert response.status_code == 200
        assert calls == ["worker-thread"]
