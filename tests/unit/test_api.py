"""
HTTP tests for the file storage endpoints.

Each test builds its own app over a temporary working directory, so the
lifespan creates a fresh gateway per test.
"""

import pytest
from fastapi.testclient import TestClient

from src.config.settings import Settings
from src.infrastructure.storage.gateway import PLACEHOLDER_IMAGE_URL, SAMPLE_VIDEO_URL
from src.main import create_app

BASE_URL = "https://files.example.test"


def make_settings(**overrides) -> Settings:
    values = {
        "storage_force_local": True,
        "public_base_url": BASE_URL,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def client(tmp_path):
    app = create_app(make_settings(), workdir=tmp_path)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def mock_remote_client(tmp_path):
    app = create_app(make_settings(storage_force_local=False, aws_s3_mock_mode=True), workdir=tmp_path)
    with TestClient(app) as test_client:
        yield test_client


def post_file(client, content=b"slide deck", name="slides.pdf", content_type="application/pdf"):
    return client.post("/api/v1/files", files={"file": (name, content, content_type)})


class TestUpload:
    """Tests for POST /api/v1/files."""

    def test_upload_returns_key_and_local_url(self, client, tmp_path):
        response = post_file(client)

        assert response.status_code == 201
        body = response.json()
        assert body["key"].endswith("_slides.pdf")
        assert body["url"] == f"{BASE_URL}/uploads/{body['key']}"
        assert (tmp_path / "uploads" / body["key"]).read_bytes() == b"slide deck"

    def test_local_copy_is_served_statically(self, client):
        key = post_file(client, content=b"served bytes", name="a.txt").json()["key"]

        response = client.get(f"/uploads/{key}")

        assert response.status_code == 200
        assert response.content == b"served bytes"

    def test_building_app_does_not_touch_disk(self, tmp_path):
        """The uploads directory is created at startup, not when the app is built."""
        create_app(make_settings(), workdir=tmp_path)

        assert not (tmp_path / "uploads").exists()

    def test_static_files_served_from_gateway_root(self, client):
        gateway = client.app.state.storage_gateway
        (gateway.state.local_root / "direct.txt").write_bytes(b"on disk")

        response = client.get("/uploads/direct.txt")

        assert response.status_code == 200
        assert response.content == b"on disk"

    def test_empty_upload_rejected(self, client):
        response = post_file(client, content=b"")

        assert response.status_code == 400

    def test_oversized_upload_rejected(self, tmp_path):
        app = create_app(make_settings(max_upload_size_mb=0), workdir=tmp_path)
        with TestClient(app) as test_client:
            response = post_file(test_client)

        assert response.status_code == 413

    def test_remote_upload_returns_signed_url(self, mock_remote_client, tmp_path):
        response = post_file(mock_remote_client)

        body = response.json()
        assert response.status_code == 201
        assert body["url"].startswith("memory://")
        assert not (tmp_path / "uploads" / body["key"]).exists()


class TestLookupAndDelete:
    """Tests for URL, existence and delete endpoints."""

    def test_url_for_missing_video(self, client):
        response = client.get("/api/v1/files/missing-key.mp4/url")

        assert response.status_code == 200
        assert response.json() == {"key": "missing-key.mp4", "url": SAMPLE_VIDEO_URL}

    def test_url_for_missing_image(self, client):
        response = client.get("/api/v1/files/missing-key.png/url")

        assert response.json()["url"] == PLACEHOLDER_IMAGE_URL

    def test_exists_after_upload(self, client):
        key = post_file(client).json()["key"]

        response = client.get(f"/api/v1/files/{key}")

        assert response.json() == {"key": key, "exists": True}

    def test_delete_is_idempotent(self, client):
        key = post_file(client).json()["key"]

        assert client.delete(f"/api/v1/files/{key}").status_code == 204
        assert client.delete(f"/api/v1/files/{key}").status_code == 204
        assert client.get(f"/api/v1/files/{key}").json()["exists"] is False

    def test_delete_in_mock_remote_mode(self, mock_remote_client):
        key = post_file(mock_remote_client).json()["key"]

        assert mock_remote_client.get(f"/api/v1/files/{key}").json()["exists"] is True
        mock_remote_client.delete(f"/api/v1/files/{key}")
        assert mock_remote_client.get(f"/api/v1/files/{key}").json()["exists"] is False


class TestHealth:
    def test_health_reports_local_only(self, client, tmp_path):
        body = client.get("/health").json()

        assert body["status"] == "ok"
        assert body["details"]["storage"]["remote_enabled"] is False
        assert body["details"]["storage"]["local_root"] == str((tmp_path / "uploads").absolute())

    def test_local_only_is_still_ready(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        checks = {c["name"]: c["status"] for c in response.json()["checks"]}
        assert checks == {"local_storage": "ok", "remote_storage": "degraded"}

    def test_missing_upload_dir_is_not_ready(self, client, tmp_path):
        (tmp_path / "uploads").rmdir()

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    def test_mock_remote_reported(self, mock_remote_client):
        body = mock_remote_client.get("/health").json()

        assert body["details"]["storage"]["remote_enabled"] is True
