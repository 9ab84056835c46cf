"""Configuration management for the OMAMORI widget sync engine."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Backend Configuration (seed values, the shared store wins when populated)
    supabase_url: str | None = Field(default=None, description="Backend base URL (e.g. https://xyz.supabase.co)")
    supabase_anon_key: str | None = Field(default=None, description="Anonymous API key sent as the apikey header")

    # Shared Storage Configuration
    storage_backend: Literal["file", "memory", "redis"] = Field(
        default="file", description="Key-value backend shared by the host app and the widget"
    )
    storage_dir: Path = Field(
        default=Path(".omamori") / "group.com.shashinoguchi.widgetTask",
        description="Directory used by the file backend",
    )
    redis_url: str | None = Field(default=None, description="Redis connection URL for the redis backend")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="production", description="Deployment environment name")

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # API Configuration
    API_TIMEOUT_SECONDS: float = 5.0
    MAX_SYNC_ATTEMPTS: int = 2  # First attempt plus one retry after a token refresh

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_UNAUTHORIZED: int = 401

    # Backend Endpoints
    REST_TASKS_PATH: str = "/rest/v1/tasks"
    AUTH_TOKEN_PATH: str = "/auth/v1/token"

    # Task cache keys, one per scope
    MY_TASKS_KEY: str = "my_tasks_key"
    PARTNER_TASKS_KEYS: tuple[str, ...] = ("partner_tasks_key_0", "partner_tasks_key_1", "partner_tasks_key_2")
    PARTNER_NAME_KEYS: tuple[str, ...] = ("partner_name_key_0", "partner_name_key_1", "partner_name_key_2")

    # Credential keys
    BACKEND_URL_KEY: str = "supabase_url"
    ANON_KEY_KEY: str = "supabase_anon_key"
    ACCESS_TOKEN_KEY: str = "supabase_access_token"
    REFRESH_TOKEN_KEY: str = "supabase_refresh_token"
    MY_USER_ID_KEY: str = "my_user_id"
    PARTNER_USER_ID_KEYS: tuple[str, ...] = ("partner_user_id_0", "partner_user_id_1", "partner_user_id_2")

    # Debug channel
    LAST_ERROR_KEY: str = "widget_last_error"

    # Redis Configuration
    REDIS_MAX_CONNECTIONS: int = 10


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
