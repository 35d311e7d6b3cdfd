"""Relay Configuration Management.

This module provides centralized configuration using Pydantic Settings
with support for environment variables and .env files.
"""

from functools import lru_cache
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        app_name: Name of the application
        app_version: Current version of the application
        environment: Deployment environment (development/staging/production)
        debug: Enable debug mode
        log_level: Root logging level

        host: Server host address
        port: Server port number

        database_url: SQLAlchemy async connection string
        database_echo: Echo SQL statements to the log

        workspace_path: Root of the static-site workspace
        content_dir: Workspace-relative directory for rendered content
        media_dir: Workspace-relative directory for uploaded media
        artifact_extension: File extension of rendered artifacts
        collections: Known content collections

        git_sync_enabled: Commit and push the workspace after a publish
        git_remote: Remote to push to
        git_branch: Branch to push to

        webhook_enabled: Notify an external listener after a publish
        webhook_url: Target URL for publish notifications
        webhook_timeout_seconds: Upper bound for a notification attempt

        session_cleanup_interval_seconds: Interval of the expired session purge
        cors_origins: Allowed CORS origins
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = Field(default="Relay", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development",
        description="Deployment environment",
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Server Settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3030, description="Server port")

    # Database Settings
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/relay.db",
        description="Database connection URL",
    )
    database_echo: bool = Field(default=False, description="Echo SQL queries")

    # Workspace Settings
    workspace_path: str = Field(
        default="/workspace",
        description="Static-site workspace root",
    )
    content_dir: str = Field(
        default="src/content",
        description="Workspace-relative directory for rendered content",
    )
    media_dir: str = Field(
        default="public/media",
        description="Workspace-relative directory for media files",
    )
    artifact_extension: str = Field(
        default=".md",
        description="File extension for rendered artifacts",
    )
    collections: Annotated[List[str], NoDecode] = Field(
        default=["blog"],
        description="Content collections",
    )

    # Version-Control Sync Settings
    git_sync_enabled: bool = Field(
        default=False,
        description="Commit and push the workspace after publishing",
    )
    git_remote: str = Field(default="origin", description="Git remote name")
    git_branch: str = Field(default="main", description="Git branch to push")

    # Webhook Settings
    webhook_enabled: bool = Field(
        default=True,
        description="Send publish notifications when a URL is set",
    )
    webhook_url: str = Field(default="", description="Publish webhook URL")
    webhook_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Webhook request timeout in seconds",
    )

    # Background Tasks
    session_cleanup_interval_seconds: int = Field(
        default=3600,
        gt=0,
        description="Expired session purge interval in seconds",
    )

    # CORS Settings
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3030"],
        description="Allowed CORS origins",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of allowed values."""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level name."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("cors_origins", "collections", mode="before")
    @classmethod
    def parse_comma_separated(cls, v):
        """Parse comma-separated strings into lists."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("artifact_extension")
    @classmethod
    def validate_artifact_extension(cls, v: str) -> str:
        """Ensure the extension carries its leading dot."""
        return v if v.startswith(".") else f".{v}"

    @property
    def webhook_configured(self) -> bool:
        """Check if publish notifications should be sent."""
        return self.webhook_enabled and bool(self.webhook_url)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.

    Returns:
        Settings instance.
    """
    return Settings()
