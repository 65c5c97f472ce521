"""
Configuration Management
========================
Loads and validates environment variables using Pydantic Settings.
Provides type-safe access to configuration throughout the application.

Enhanced features:
- Storage backend selection (local disk or S3-compatible bucket)
- Upload policy limits
- Secret masking
- Production configuration checks
"""

from functools import lru_cache
from typing import List, Optional, Dict, Any
import json

from pydantic import Field, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from upload_service.core.exceptions import ConfigurationError


STORAGE_BACKENDS = ("local", "s3")


class Settings(BaseSettings):
    """
    Application Settings

    All settings are loaded from environment variables or .env file.
    Pydantic validates types and required fields automatically.
    """

    # ========================================================================
    # APPLICATION
    # ========================================================================
    APP_NAME: str = "Object Upload Service"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # ========================================================================
    # API SERVER
    # ========================================================================
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    API_WORKERS: int = Field(default=4)

    # ========================================================================
    # DATABASE
    # ========================================================================
    MONGODB_URL: str = Field(default="mongodb://localhost:27017")
    MONGODB_DB_NAME: str = Field(default="object_uploads")
    MONGODB_MAX_POOL_SIZE: int = Field(default=10)
    MONGODB_MIN_POOL_SIZE: int = Field(default=1)

    # ========================================================================
    # OBJECT STORAGE
    # ========================================================================
    STORAGE_BACKEND: str = Field(default="local")
    LOCAL_STORAGE_PATH: str = Field(default="storage/uploads")

    S3_ENDPOINT_URL: Optional[str] = Field(default=None)
    S3_REGION: str = Field(default="us-east-1")
    S3_BUCKET_NAME: Optional[str] = Field(default=None)
    S3_ACCESS_KEY_ID: Optional[str] = Field(default=None)
    S3_SECRET_ACCESS_KEY: Optional[str] = Field(default=None)

    STORAGE_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    STORAGE_MAX_RETRIES: int = Field(default=2, ge=0, le=10)
    STORAGE_RETRY_BACKOFF_SECONDS: float = Field(default=0.5, ge=0)

    # ========================================================================
    # UPLOAD POLICY
    # ========================================================================
    MAX_UPLOAD_SIZE_BYTES: int = Field(default=2 * 1024 * 1024, gt=0)
    MAX_TITLE_LENGTH: int = Field(default=255, ge=1)
    ALLOWED_EXTENSIONS: str = Field(default='["jpeg","jpg","png","gif","svg"]')
    ALLOWED_CONTENT_TYPES: str = Field(
        default='["image/jpeg","image/png","image/gif","image/svg+xml"]'
    )

    # ========================================================================
    # CORS
    # ========================================================================
    CORS_ORIGINS: str = Field(
        default='["http://localhost:5173","http://localhost:3000"]'
    )

    @field_validator("CORS_ORIGINS", "ALLOWED_EXTENSIONS", "ALLOWED_CONTENT_TYPES")
    def parse_json_list(cls, v):
        """Parse list settings from JSON string to list"""
        if isinstance(v, str):
            return json.loads(v)
        return v

    @field_validator("STORAGE_BACKEND")
    def check_storage_backend(cls, v):
        backend = v.strip().lower()
        if backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}"
            )
        return backend

    # ========================================================================
    # PYDANTIC CONFIGURATION
    # ========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra fields in .env
    )

    # ========================================================================
    # COMPUTED PROPERTIES
    # ========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.ENVIRONMENT.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.ENVIRONMENT.lower() == "production"

    @computed_field
    @property
    def s3_configured(self) -> bool:
        """Check if the S3-compatible bucket is fully configured"""
        return all([
            self.S3_BUCKET_NAME,
            self.S3_ACCESS_KEY_ID,
            self.S3_SECRET_ACCESS_KEY,
        ])

    # ========================================================================
    # VALIDATION METHODS
    # ========================================================================

    def validate_required_for_production(self) -> List[str]:
        """
        Validate that all required settings for production are configured

        Returns:
            List[str]: List of missing required settings
        """
        if not self.is_production:
            return []

        missing = []

        if "localhost" in self.MONGODB_URL:
            missing.append("Production should not use localhost MongoDB")

        if self.STORAGE_BACKEND == "s3" and not self.s3_configured:
            missing.append("S3 bucket and credentials must be configured for the s3 backend")

        return missing

    def mask_secret(self, secret: Optional[str], show_chars: int = 4) -> str:
        """
        Mask a secret for safe logging

        Args:
            secret: The secret to mask
            show_chars: Number of characters to show at the start

        Returns:
            str: Masked secret
        """
        if not secret:
            return "NOT_SET"

        if len(secret) <= show_chars:
            return "*" * len(secret)

        return secret[:show_chars] + "*" * (len(secret) - show_chars)

    def to_safe_dict(self) -> Dict[str, Any]:
        """
        Export configuration as dictionary with secrets masked

        Returns:
            Dict[str, Any]: Safe configuration dictionary
        """
        config = self.model_dump()

        sensitive_fields = [
            "S3_ACCESS_KEY_ID",
            "S3_SECRET_ACCESS_KEY",
        ]

        for field in sensitive_fields:
            if field in config:
                config[field] = self.mask_secret(config[field])

        if "@" in config["MONGODB_URL"]:
            config["MONGODB_URL"] = config["MONGODB_URL"].split("@")[-1]

        return config

    def get_storage_config(self) -> Dict[str, Any]:
        """
        Get object storage configuration (no credentials)

        Returns:
            Dict[str, Any]: Storage configuration
        """
        return {
            "backend": self.STORAGE_BACKEND,
            "local_path": self.LOCAL_STORAGE_PATH,
            "bucket": self.S3_BUCKET_NAME,
            "endpoint": self.S3_ENDPOINT_URL,
            "region": self.S3_REGION,
            "timeout_seconds": self.STORAGE_TIMEOUT_SECONDS,
            "max_retries": self.STORAGE_MAX_RETRIES,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance

    Uses lru_cache to ensure settings are loaded only once.

    Returns:
        Settings: Validated settings instance
    """
    return Settings()


settings = get_settings()


def validate_configuration(config: Optional[Settings] = None) -> None:
    """
    Validate configuration for the current environment

    Raises:
        ConfigurationError: If production configuration is invalid
    """
    config = config or settings
    missing = config.validate_required_for_production()
    if missing:
        error_msg = "Production configuration validation failed:\n" + "\n".join(f"  - {m}" for m in missing)
        raise ConfigurationError(error_msg, details={"issues": missing})
