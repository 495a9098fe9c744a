"""Integration tests for GET /my-deals"""

import re
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from dealdocs.dependencies import get_registry
from dealdocs.domain.deals.ports.document_registry_port import RegistryError

from tests.fixtures.payloads import PNG_BYTES


ISO_MILLIS_UTC = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


class TestMyDocuments:
    """Test the cross-deal listing"""

    def test_caller_without_deals(self, app, client: TestClient, auth_headers, registry, seeded_deals):
        """Scenario C: zero deals yields [] and zero file sub-queries"""
        spy = MagicMock(wraps=registry)
        app.dependency_overrides[get_registry] = lambda: spy

        response = client.get("/my-deals", headers=auth_headers("nobody"))

        assert response.status_code == 200
        assert response.json() == []
        spy.list_files.assert_not_called()

    def test_deals_without_files(self, client: TestClient, auth_headers, seeded_deals):
        """Test participant of empty deals gets []"""
        response = client.get("/my-deals", headers=auth_headers("alice"))

        assert response.status_code == 200
        assert response.json() == []

    def test_one_entry_per_file_across_deals(self, client: TestClient, auth_headers, upload_file, seeded_deals):
        """Test every (dealId, fileId) visible to the caller appears exactly once"""
        uploaded = {
            ("deal-alpha", upload_file("alice", "deal-alpha").json()["fileId"]),
            ("deal-alpha", upload_file("bob", "deal-alpha").json()["fileId"]),
            ("deal-beta", upload_file(
                "carol", "deal-beta", data=PNG_BYTES, filename="scan.png", content_type="image/png"
            ).json()["fileId"]),
        }
        upload_file("dave", "deal-gamma")

        entries = client.get("/my-deals", headers=auth_headers("alice")).json()

        pairs = [(e["dealId"], e["fileId"]) for e in entries]
        assert len(pairs) == len(set(pairs))
        assert set(pairs) == uploaded

    def test_entry_shape(self, client: TestClient, auth_headers, upload_file, seeded_deals):
        """Test camelCase fields and their values"""
        file_id = upload_file("bob", "deal-alpha").json()["fileId"]

        (entry,) = client.get("/my-deals", headers=auth_headers("alice")).json()

        assert set(entry) == {
            "dealId", "fileId", "filename", "contentType", "size",
            "uploadedAt", "uploadedBy", "downloadPath",
        }
        assert entry["dealId"] == "deal-alpha"
        assert entry["fileId"] == file_id
        assert entry["filename"] == "contract.pdf"
        assert entry["contentType"] == "application/pdf"
        assert entry["size"] == 10 * 1024
        assert entry["uploadedBy"] == "bob"
        assert ISO_MILLIS_UTC.match(entry["uploadedAt"])
        assert entry["downloadPath"] == f"/download/deal-alpha/{file_id}"

    def test_download_path_is_usable(self, client: TestClient, auth_headers, upload_file, seeded_deals):
        """Test listed paths can be fetched by the same caller"""
        upload_file("alice", "deal-beta")

        (entry,) = client.get("/my-deals", headers=auth_headers("carol")).json()
        response = client.get(entry["downloadPath"], headers=auth_headers("carol"))

        assert response.status_code == 200

    def test_registry_failure_is_500(self, app, client: TestClient, auth_headers, seeded_deals):
        """Test any query failure fails the whole listing"""
        broken = MagicMock()
        broken.query_deals_by_participant.side_effect = RegistryError("timeout")
        app.dependency_overrides[get_registry] = lambda: broken

        response = client.get("/my-deals", headers=auth_headers("alice"))

        assert response.status_code == 500
        assert response.json() == {"error": "internal_error", "message": "Error retrieving documents"}

    def test_requires_token(self, client: TestClient):
        """Test anonymous listing is a 401"""
        response = client.get("/my-deals")

        assert response.status_code == 401
