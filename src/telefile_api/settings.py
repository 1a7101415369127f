# src/telefile_api/settings.py
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from telefile_api.settings import get_settings
        settings = get_settings()
        db_path = settings.db_path
    """

    # Application Settings
    app_name: str = Field(
        default="telefile",
        description="Application name"
    )

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        description="Deployment mode: local-dev (SQLite), aws-mock or aws-prod (S3)"
    )

    # Key-value backend
    db_path: str = Field(
        default="telefile.db",
        description="SQLite database file used in local-dev mode"
    )

    s3_bucket_name: str = Field(
        default="telefile-store",
        description="S3 bucket holding entity records in aws modes"
    )

    s3_key_prefix: str = Field(
        default="",
        description="Prefix prepended to every S3 object key"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    # Upload pipeline
    max_upload_bytes: int = Field(
        default=2 * 1024 * 1024,
        gt=0,
        description="Hard ceiling for uploaded and fetched payloads"
    )

    fetch_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Deadline for downloading a file from a URL"
    )

    # Telegram
    telegram_api_base: str = Field(
        default="https://api.telegram.org",
        description="Base URL of the Telegram Bot API"
    )

    telegram_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Deadline for a sendDocument call"
    )

    # Demo data
    seed_demo_data: bool = Field(
        default=True,
        description="Seed demo folders and files on startup when the store is empty"
    )

    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Origins allowed to call the API from a browser"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator('deployment_mode', mode='before')
    @classmethod
    def normalize_deployment_mode(cls, v):
        """Normalize deployment mode values for backwards compatibility."""
        if v:
            mode_mapping = {
                "local-mock": "local-dev",
                "local": "local-dev",
                "cloud": "aws-prod",
            }
            return mode_mapping.get(v, v)
        return v

    @field_validator('deployment_mode')
    @classmethod
    def validate_deployment_mode(cls, v):
        """Validate deployment mode is one of the allowed values."""
        valid_modes = ["local-dev", "aws-mock", "aws-prod"]
        if v not in valid_modes:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {valid_modes}")
        return v

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper()

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
