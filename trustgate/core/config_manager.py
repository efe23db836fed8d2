"""
Configuration Manager
--------------------
Centralized configuration management using Pydantic Settings.
All application settings are loaded from environment variables with validation.

Token signing secrets have no defaults: the service refuses to start
when they are missing, identical, or set to the well-known placeholders.
"""

from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Placeholder secrets that must never reach a running deployment
FORBIDDEN_SECRETS = {"access_secret", "refresh_secret", "secret", "changeme"}


class ApplicationSettings(BaseSettings):
    """Main application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application metadata
    app_name: str = Field(default="TrustGate KYC", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # FastAPI server configuration
    fastapi_host: str = Field(default="0.0.0.0", description="FastAPI host")
    fastapi_port: int = Field(default=5000, description="FastAPI port")
    cors_allowed_origins: List[str] = Field(
        default=["http://localhost:5173"], description="Origins allowed by CORS"
    )

    # PostgreSQL database configuration
    database_host: str = Field(default="localhost", description="PostgreSQL host")
    database_port: int = Field(default=5432, description="PostgreSQL port")
    database_user: str = Field(default="kyc_user", description="PostgreSQL user")
    database_password: str = Field(
        default="kyc_password", description="PostgreSQL password"
    )
    database_name: str = Field(default="image_kyc_db", description="Database name")
    database_pool_size: int = Field(default=20, description="Connection pool size")
    database_max_overflow: int = Field(
        default=10, description="Max overflow connections"
    )

    # Redis configuration (token revocation list)
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, description="Redis port")
    redis_db: int = Field(default=0, description="Redis database number")
    redis_password: Optional[str] = Field(default=None, description="Redis password")
    redis_max_connections: int = Field(default=50, description="Redis max connections")

    # JWT configuration
    access_token_secret: str = Field(
        ..., min_length=16, description="Signing secret for access tokens"
    )
    refresh_token_secret: str = Field(
        ..., min_length=16, description="Signing secret for refresh tokens"
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(
        default=15, gt=0, description="Access token lifetime in minutes"
    )
    refresh_token_expire_days: int = Field(
        default=7, gt=0, description="Refresh token lifetime in days"
    )
    revocation_retention_days: int = Field(
        default=7, gt=0, description="How long revoked tokens are remembered"
    )

    # Password hashing
    bcrypt_rounds: int = Field(default=12, description="bcrypt cost factor")

    # Media storage for KYC uploads
    media_root: str = Field(default="media", description="Directory for uploads")
    media_base_url: str = Field(
        default="/media", description="Public URL prefix for stored uploads"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is acceptable."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Only symmetric HMAC algorithms are supported."""
        valid_algorithms = ["HS256", "HS384", "HS512"]
        if v not in valid_algorithms:
            raise ValueError(f"JWT algorithm must be one of {valid_algorithms}")
        return v

    @field_validator("access_token_secret", "refresh_token_secret")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        """Reject placeholder secrets."""
        if v.strip().lower() in FORBIDDEN_SECRETS:
            raise ValueError("Token secret must not be a placeholder value")
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        """bcrypt accepts cost factors between 4 and 31."""
        if not 4 <= v <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return v

    @model_validator(mode="after")
    def validate_distinct_secrets(self) -> "ApplicationSettings":
        """Access and refresh tokens must be signed with different secrets."""
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError(
                "access_token_secret and refresh_token_secret must be distinct"
            )
        return self

    @property
    def database_url(self) -> str:
        """Construct async PostgreSQL database URL."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def redis_url(self) -> str:
        """Construct Redis URL."""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def access_token_expire_seconds(self) -> int:
        return self.access_token_expire_minutes * 60

    @property
    def revocation_retention_seconds(self) -> int:
        return self.revocation_retention_days * 24 * 3600


def load_settings(**overrides) -> ApplicationSettings:
    """
    Build the application settings from the environment.

    Raises pydantic.ValidationError when required secrets are missing
    or invalid, so a misconfigured process fails before serving traffic.
    """
    return ApplicationSettings(**overrides)
