"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock modes enable local development without a bucket or FFmpeg.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # App Configuration
    app_title: str = "Bucket Browser"
    app_version: str = "0.1.0"

    # B2/S3 Storage Configuration
    b2_key_id: str = Field(
        default="",
        description="Backblaze application key ID (S3 access key)"
    )
    b2_app_key: str = Field(
        default="",
        description="Backblaze application key (S3 secret key)"
    )
    b2_bucket_name: str = Field(
        default="",
        description="Bucket listed and written by this process"
    )
    b2_region: str = Field(
        default="us-west-004",
        description="B2 region, used to build the S3 endpoint"
    )
    b2_endpoint_url: Optional[str] = Field(
        default=None,
        description="S3 endpoint URL. Auto-constructed from region if not provided."
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use an in-memory bucket instead of B2. Enables local dev without credentials."
    )

    # Thumbnail Generation
    ffmpeg_path: str = Field(
        default="ffmpeg",
        description="Path to the ffmpeg binary used for video frames"
    )
    transcoder_mock_mode: bool = Field(
        default=False,
        description="Use a mock frame extractor instead of FFmpeg."
    )
    thumbnail_width: int = Field(
        default=300,
        description="Thumbnail width in pixels. Height follows the aspect ratio."
    )
    thumbnail_frame_offset_seconds: float = Field(
        default=1.0,
        description="Where in a video the thumbnail frame is taken"
    )
    thumbnail_max_age_seconds: int = Field(
        default=604800,
        description="Cache-Control max-age for thumbnails (one week)"
    )
    thumbnail_jpeg_quality: int = Field(
        default=75,
        description="JPEG quality for generated thumbnails"
    )

    # Application Behavior
    max_upload_size_mb: int = Field(
        default=500,
        description="Maximum upload size in MB."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:8080",
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

    @property
    def b2_endpoint(self) -> str:
        """
        Construct the B2 S3-compatible endpoint from the region.

        B2 endpoints follow the pattern: https://s3.{region}.backblazeb2.com
        """
        if self.b2_endpoint_url:
            return self.b2_endpoint_url
        return f"https://s3.{self.b2_region}.backblazeb2.com"

    @property
    def thumbnail_cache_control(self) -> str:
        return f"public, max-age={self.thumbnail_max_age_seconds}"

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on whether we're in mock mode.
        """
        missing = []

        if not self.storage_mock_mode:
            if not self.b2_key_id:
                missing.append("B2_KEY_ID")
            if not self.b2_app_key:
                missing.append("B2_APP_KEY")
            if not self.b2_bucket_name:
                missing.append("B2_BUCKET_NAME")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    This is safe because settings don't change during runtime.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
