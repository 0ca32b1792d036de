"""Application settings and configuration."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(
        default="Media Storage",
        description="Application name"
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version"
    )
    environment: Literal["local", "dev", "stage", "prod"] = Field(
        default="local",
        description="Deployment environment"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Storage Configuration
    storage_type: Literal["local", "s3", "azure"] = Field(
        default="local",
        description="Storage backend type for uploaded media"
    )
    storage_root: Path = Field(
        default=Path("data/media"),
        description="Root directory for local storage"
    )
    storage_base_url: str = Field(
        default="/media",
        description="URL path under which locally stored files are served"
    )
    storage_namespace: str = Field(
        default="uploads",
        description="Folder, bucket or container name files are stored under"
    )

    @field_validator("storage_root", mode="before")
    @classmethod
    def resolve_storage_path(cls, v: str | Path) -> Path:
        """Ensure storage root is a Path object."""
        if isinstance(v, str):
            return Path(v)
        return v

    # S3 Configuration
    s3_bucket_prefix: str = Field(
        default="media-storage",
        description="Domain-like prefix making bucket names globally unique"
    )
    s3_region: str = Field(
        default="us-east-1",
        description="AWS region"
    )
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom endpoint for S3-compatible services (MinIO etc.)"
    )
    s3_access_key_id: Optional[str] = Field(
        default=None,
        description="AWS access key (uses env/IAM if not set)"
    )
    s3_secret_access_key: Optional[str] = Field(
        default=None,
        description="AWS secret key (uses env/IAM if not set)"
    )
    s3_public_read: bool = Field(
        default=True,
        description="Create buckets and objects with the public-read ACL"
    )

    # Azure Blob Configuration
    azure_connection_string: Optional[str] = Field(
        default=None,
        description="Azure Storage account connection string"
    )
    azure_public_access: bool = Field(
        default=True,
        description="Create blob containers with container-level public access"
    )

    # Image Configuration
    valid_image_types: list[str] = Field(
        default=["image/gif", "image/jpeg", "image/png"],
        description="Accepted image content types (empty list accepts all)"
    )
    image_sizes: list[int] = Field(
        default=[1600, 800, 400, 200, 100],
        description="Default derivative widths in pixels"
    )

    @field_validator("image_sizes")
    @classmethod
    def validate_image_sizes(cls, v: list[int]) -> list[int]:
        """Reject non-positive widths and sort descending."""
        if any(size <= 0 for size in v):
            raise ValueError("image sizes must be positive integers")
        return sorted(v, reverse=True)

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format"
    )
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format"
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="Path to log file (if None, logs to stdout only)"
    )

    @property
    def log_level_numeric(self) -> int:
        """Get numeric log level."""
        return getattr(logging, self.log_level)

    def configure_logging(self) -> None:
        """Configure logging based on settings."""
        import sys

        handlers: list[logging.Handler] = []

        console_handler = logging.StreamHandler(sys.stdout)
        handlers.append(console_handler)

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(self.log_file)
            handlers.append(file_handler)

        if self.log_json:
            import json

            class JSONFormatter(logging.Formatter):
                def format(self, record: logging.LogRecord) -> str:
                    log_obj = {
                        "timestamp": self.formatTime(record),
                        "level": record.levelname,
                        "logger": record.name,
                        "message": record.getMessage(),
                        "module": record.module,
                        "function": record.funcName,
                        "line": record.lineno,
                    }
                    if record.exc_info:
                        log_obj["exception"] = self.formatException(record.exc_info)
                    return json.dumps(log_obj)

            formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(self.log_format)

        for handler in handlers:
            handler.setFormatter(formatter)

        logging.basicConfig(
            level=self.log_level_numeric,
            handlers=handlers,
            force=True,
        )

        if self.debug:
            logging.getLogger("media_storage").setLevel(logging.DEBUG)
        else:
            # SDK clients are chatty at INFO
            logging.getLogger("botocore").setLevel(logging.WARNING)
            logging.getLogger("boto3").setLevel(logging.WARNING)
            logging.getLogger("urllib3").setLevel(logging.WARNING)
            logging.getLogger("azure").setLevel(logging.WARNING)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
