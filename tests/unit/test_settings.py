"""
Unit tests for settings-to-storage wiring.
"""

from src.api.dependencies import build_backend_state
from src.config.settings import Settings
from src.infrastructure.storage.client import InMemoryObjectStore


def make_settings(**values) -> Settings:
    return Settings(_env_file=None, **values)


class TestSettings:
    def test_defaults_are_local_only(self, tmp_path):
        settings = make_settings()

        state = build_backend_state(settings, workdir=tmp_path)

        assert not state.remote_enabled
        assert settings.validate_required_fields() == [
            "AWS_S3_ACCESS_KEY",
            "AWS_S3_SECRET_KEY",
            "AWS_S3_BUCKET",
        ]

    def test_template_env_values_are_local_only(self, tmp_path):
        settings = make_settings(
            aws_s3_access_key="your_access_key",
            aws_s3_secret_key="changeme",
            aws_s3_bucket="placeholder",
        )

        state = build_backend_state(settings, workdir=tmp_path)

        assert not state.remote_enabled

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("AWS_S3_BUCKET", "lms-course-files")
        monkeypatch.setenv("AWS_S3_REGION", "ap-south-1")
        monkeypatch.setenv("PRESIGNED_URL_EXPIRY_SECONDS", "60")

        settings = make_settings()

        assert settings.storage_config().bucket_name == "lms-course-files"
        assert settings.storage_config().region == "ap-south-1"
        assert settings.url_policy().expiry_seconds == 60

    def test_mock_mode_uses_in_memory_remote(self, tmp_path):
        settings = make_settings(aws_s3_mock_mode=True)

        state = build_backend_state(settings, workdir=tmp_path)

        assert isinstance(state.remote, InMemoryObjectStore)
        assert settings.validate_required_fields() == []

    def test_cors_origins_parsed(self):
        assert make_settings(cors_origins="*").cors_origins_list == ["*"]
        assert make_settings(cors_origins="https://a.test, https://b.test").cors_origins_list == [
            "https://a.test",
            "https://b.test",
        ]
