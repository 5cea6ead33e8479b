"""Configuration management for Inkboard.

Uses Pydantic Settings for type-safe, environment-based configuration.
"""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv(override=True)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # App configuration
    app_name: str = Field("Inkboard", alias="INKBOARD_APP_NAME")
    version: str = Field("0.0.0-dev", alias="INKBOARD_APP_VERSION")
    environment: str = Field("development", alias="INKBOARD_ENVIRONMENT")

    # Database configuration
    database_url: str = Field(alias="INKBOARD_DATABASE_URL")
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_recycle: int = 3600

    # Logging configuration
    log_level: str = Field("INFO", alias="INKBOARD_LOG_LEVEL")
    log_format: str = Field("text", alias="INKBOARD_LOG_FORMAT")  # text or json
    log_dir: str | None = Field(None, alias="INKBOARD_LOG_DIR")  # unset = console only

    # Polling configuration
    polling_timeout: float = Field(30.0, alias="INKBOARD_POLLING_TIMEOUT")
    polling_user_agent: str = Field("inkboard/byos", alias="INKBOARD_POLLING_USER_AGENT")
    polling_follow_redirects: bool = Field(False, alias="INKBOARD_POLLING_FOLLOW_REDIRECTS")

    # Webhook plugins count as fresh for this long after a delivery
    webhook_freshness_minutes: int = Field(60, alias="INKBOARD_WEBHOOK_FRESHNESS_MINUTES")

    # Rendering configuration
    views_dir: str = Field("./views", alias="INKBOARD_VIEWS_DIR")

    @staticmethod
    def _repo_root_from_this_file() -> Path:
        """Resolve repository root: <repo>/backend/src/inkboard/core/config.py -> <repo>."""
        here = Path(__file__).resolve()
        src_dir = here.parents[2]
        candidate_parent = src_dir.parent
        if candidate_parent.name == "backend":
            return candidate_parent.parent
        return candidate_parent

    @field_validator("views_dir", mode="before")
    @classmethod
    def _resolve_views_dir(cls, v: str) -> str:
        p = Path(v)
        if p.is_absolute():
            return str(p)
        return str((cls._repo_root_from_this_file() / p).resolve())

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["text", "json"]
        if v.lower() not in valid_formats:
            raise ValueError(f"Log format must be one of: {valid_formats}")
        return v.lower()

    @field_validator("polling_timeout")
    @classmethod
    def validate_polling_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Polling timeout must be greater than zero")
        return v

    @field_validator("webhook_freshness_minutes")
    @classmethod
    def validate_webhook_freshness(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Webhook freshness window must be at least one minute")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


def get_settings() -> Settings:
    """Build a fresh settings instance from the environment."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance - will be created when first accessed
settings = None


def get_settings_instance() -> Settings:
    """Get the global settings instance, creating it if necessary."""
    global settings  # noqa: PLW0603
    if settings is None:
        settings = get_settings()
    return settings


def reset_settings_instance() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global settings  # noqa: PLW0603
    settings = None
