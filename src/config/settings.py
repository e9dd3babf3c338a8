"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Remote storage credentials are optional: blank or template values leave
the service running on local disk only.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..infrastructure.storage.client import DEFAULT_REGION, StorageConfig
from ..infrastructure.storage.gateway import (
    DEFAULT_URL_EXPIRY_SECONDS,
    PLACEHOLDER_IMAGE_URL,
    SAMPLE_VIDEO_URL,
    UrlPolicy,
)
from ..infrastructure.storage.credentials import is_blank_or_placeholder


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Upload Storage API"
    api_version: str = "v1"

    # S3 Storage Configuration
    aws_s3_access_key: str = Field(
        default="",
        description="Remote access key. Blank or template values disable the remote tier."
    )
    aws_s3_secret_key: str = Field(
        default="",
        description="Remote secret key"
    )
    aws_s3_region: str = Field(
        default=DEFAULT_REGION,
        description="Region the bucket is expected in. Corrected at startup if the bucket lives elsewhere."
    )
    aws_s3_bucket: str = Field(
        default="",
        description="Bucket for uploaded files"
    )
    aws_s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="Endpoint for S3-compatible stores (MinIO, R2). Leave unset for AWS."
    )
    aws_s3_mock_mode: bool = Field(
        default=False,
        description="Use an in-memory remote tier instead of S3. Enables local dev without a bucket."
    )
    storage_force_local: bool = Field(
        default=False,
        description="Keep every upload on local disk even when credentials are set."
    )

    # URL generation
    public_base_url: str = Field(
        default="http://localhost:8000",
        description="Public host serving /uploads. Used for URLs of objects kept on local disk."
    )
    presigned_url_expiry_seconds: int = Field(
        default=DEFAULT_URL_EXPIRY_SECONDS,
        gt=0,
        description="Validity of signed download URLs. Two hours covers a lecture video."
    )
    placeholder_image_url: str = Field(
        default=PLACEHOLDER_IMAGE_URL,
        description="Returned for missing keys and missing non-video objects"
    )
    sample_video_url: str = Field(
        default=SAMPLE_VIDEO_URL,
        description="Returned for missing video objects"
    )

    # Application Behavior
    max_upload_size_mb: int = Field(
        default=500,
        description="Maximum upload size in MB. Course videos are the largest uploads."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:5500,http://127.0.0.1:5500",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def storage_config(self) -> StorageConfig:
        return StorageConfig(
            access_key_id=self.aws_s3_access_key,
            secret_access_key=self.aws_s3_secret_key,
            bucket_name=self.aws_s3_bucket,
            region=self.aws_s3_region,
            endpoint_url=self.aws_s3_endpoint_url,
        )

    def url_policy(self) -> UrlPolicy:
        return UrlPolicy(
            public_base_url=self.public_base_url,
            expiry_seconds=self.presigned_url_expiry_seconds,
            placeholder_image_url=self.placeholder_image_url,
            sample_video_url=self.sample_video_url,
        )

    def validate_required_fields(self) -> list[str]:
        """
        List remote settings that are missing or still template values.

        Nothing here is fatal: the service runs on local disk without them.
        Returns an empty list in mock or forced-local mode.
        """
        if self.aws_s3_mock_mode or self.storage_force_local:
            return []

        missing = []
        if is_blank_or_placeholder(self.aws_s3_access_key):
            missing.append("AWS_S3_ACCESS_KEY")
        if is_blank_or_placeholder(self.aws_s3_secret_key):
            missing.append("AWS_S3_SECRET_KEY")
        if is_blank_or_placeholder(self.aws_s3_bucket):
            missing.append("AWS_S3_BUCKET")
        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process.
    For tests, call get_settings.cache_clear() to reset.
    """
    return Settings()
