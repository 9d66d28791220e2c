"""
Configuration management using Pydantic Settings.

This module provides type-safe, validated configuration loading from environment
variables. Every field has a default, so a bare environment produces a working
development configuration.

Architecture:
- Flat Settings structure (no nesting)
- All config loaded from environment variables (or a .env file)
- Type validation via Pydantic

Usage:
    from routespec.core.config import settings

    routes_dir = settings.routes_dir
    if settings.is_development:
        # Dev-specific behavior
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from routespec.core.constants import (
    DEFAULT_ROUTES_MARKER,
    DOCUMENT_FETCH_TIMEOUT_DEFAULT,
    OPENAPI_VERSIONS,
)
from routespec.core.enums import Environment


_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """
    Main application settings (flat structure).

    Configuration precedence:
        1. Environment variables
        2. .env file in the working directory
        3. Default values

    Returns:
        Settings: Application configuration loaded from environment.
    """

    # Environment detection
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development, testing, ci, production)",
    )

    # Core application settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Application metadata (also used for the document info block)
    app_name: str = Field(
        default="routespec",
        description="Application name, used as the API document title",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version, used as the API document version",
    )
    app_description: str | None = Field(
        default=None,
        description="API document description",
    )

    # Route discovery
    routes_dir: Path = Field(
        default=Path("routes"),
        description="Directory holding file-organized route modules",
    )
    routes_marker: str = Field(
        default=DEFAULT_ROUTES_MARKER,
        description="Directory name marking the routes root inside file paths",
    )
    internal_prefix: str = Field(
        default="_",
        description="Files or directories starting with this prefix are never routes",
    )
    catch_all_supported: bool = Field(
        default=True,
        description="Whether catch-all route files ([...name]) are transformed and mounted",
    )
    build_workers: int = Field(
        default=4,
        description="Worker threads used by the build pass",
    )

    # API document
    docs_base_url: str = Field(
        default="/api",
        description="Base URL of the openapi.json / openapi.yaml / viewer endpoints",
    )
    openapi_version: str = Field(
        default="3.1.0",
        description="OpenAPI version of the generated document (3.0.0 or 3.1.0)",
    )
    additional_json_urls: str = Field(
        default="",
        description="Secondary OpenAPI documents to merge (comma-separated URLs)",
    )
    document_fetch_timeout: float = Field(
        default=DOCUMENT_FETCH_TIMEOUT_DEFAULT,
        description="Timeout in seconds for fetching each secondary document",
    )
    ignored_tag_segments: str = Field(
        default="api",
        description="Path segments skipped when deriving operation tags (comma-separated)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Normalize and validate the log level name.

        Args:
            v: Log level name.

        Returns:
            str: Upper-cased log level.

        Raises:
            ValueError: If the level is not a standard logging level.
        """
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level

    @field_validator("openapi_version")
    @classmethod
    def validate_openapi_version(cls, v: str) -> str:
        """
        Validate the OpenAPI version is supported.

        Args:
            v: OpenAPI version string.

        Returns:
            str: Validated version.

        Raises:
            ValueError: If the version is not 3.0.0 or 3.1.0.
        """
        if v not in OPENAPI_VERSIONS:
            raise ValueError(f"openapi_version must be one of {list(OPENAPI_VERSIONS)}")
        return v

    @field_validator("docs_base_url")
    @classmethod
    def validate_docs_base_url(cls, v: str) -> str:
        """
        Remove trailing slashes from the docs base URL.

        Args:
            v: URL prefix.

        Returns:
            str: Prefix without trailing slash ("" for the root).
        """
        return v.rstrip("/")

    @field_validator("build_workers")
    @classmethod
    def validate_build_workers(cls, v: int) -> int:
        """
        Validate the build pass has at least one worker.

        Args:
            v: Number of worker threads.

        Returns:
            int: Validated worker count.

        Raises:
            ValueError: If fewer than one worker is requested.
        """
        if v < 1:
            raise ValueError("build_workers must be at least 1")
        return v

    @property
    def additional_json_url_list(self) -> list[str]:
        """
        Parse comma-separated secondary document URLs.

        Returns:
            list[str]: URLs in declaration order, blanks removed.
        """
        return _split_csv(self.additional_json_urls)

    @property
    def ignored_tag_segment_list(self) -> list[str]:
        """
        Parse comma-separated ignored tag segments.

        Returns:
            list[str]: Segments in declaration order, blanks removed.
        """
        return _split_csv(self.ignored_tag_segments)

    # Convenience properties for environment checks
    @property
    def is_development(self) -> bool:
        """
        Check if running in development environment.

        Returns:
            bool: True if environment is DEVELOPMENT, False otherwise.
        """
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_testing(self) -> bool:
        """
        Check if running in testing environment.

        Returns:
            bool: True if environment is TESTING, False otherwise.
        """
        return self.environment == Environment.TESTING

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.

        Returns:
            bool: True if environment is PRODUCTION, False otherwise.
        """
        return self.environment == Environment.PRODUCTION


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once per process.

    Returns:
        Settings: Cached settings instance.
    """
    return Settings()


# Global settings instance (singleton pattern)
settings = get_settings()
