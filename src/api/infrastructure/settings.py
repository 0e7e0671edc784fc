"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set the OpenFGA store
and credentials explicitly.
"""

from functools import lru_cache
import logging

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared_kernel.authorization.types import DEFAULT_PLATFORM_ID


class OpenFGASettings(BaseSettings):
    """OpenFGA relationship store settings.

    Environment variables:
        PORTAL_AUTHZ_FGA_API_URL: OpenFGA HTTP API URL (default: http://localhost:8080)
        PORTAL_AUTHZ_FGA_STORE_ID: Store holding the portal's facts
        PORTAL_AUTHZ_FGA_API_TOKEN: Bearer token for the API (optional)
        PORTAL_AUTHZ_FGA_AUTHORIZATION_MODEL_ID: Pinned model id used when the
            store cannot be asked for its models (optional)
        PORTAL_AUTHZ_FGA_TIMEOUT_SECONDS: Per-request timeout (default: 5.0)
    """

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_AUTHZ_FGA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_url: str = Field(
        default="http://localhost:8080",
        description="OpenFGA HTTP API URL",
    )
    store_id: str = Field(default="", description="OpenFGA store id")
    api_token: SecretStr | None = Field(
        default=None,
        description="Bearer token for the OpenFGA API",
    )
    authorization_model_id: str | None = Field(
        default=None,
        description="Pinned authorization model id used as fallback",
    )
    timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for each OpenFGA request",
        gt=0,
        le=60,
    )

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize the API URL so paths can be appended."""
        return value.rstrip("/")


class AuthorizationSettings(BaseSettings):
    """Permission evaluation settings.

    Environment variables:
        PORTAL_AUTHZ_MODEL_CACHE_TTL_SECONDS: How long a resolved model id is
            reused before the store is asked again (default: 300)
        PORTAL_AUTHZ_PLATFORM_ID: Id of the platform object (default: default)
        PORTAL_AUTHZ_LOG_LEVEL: Minimum log level (default: INFO)
    """

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_AUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    model_cache_ttl_seconds: int = Field(
        default=300,
        description="Model id cache lifetime in seconds",
        ge=1,
        le=86400,
    )
    platform_id: str = Field(
        default=DEFAULT_PLATFORM_ID,
        description="Id of the platform object holding super admins",
        min_length=1,
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level of emitted log events",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept level names in any case."""
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_openfga_settings() -> OpenFGASettings:
    """Get cached OpenFGA settings."""
    return OpenFGASettings()


@lru_cache
def get_authorization_settings() -> AuthorizationSettings:
    """Get cached authorization settings."""
    return AuthorizationSettings()
