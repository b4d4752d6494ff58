"""Configuration management for Inkline.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the INKLINE_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (INKLINE_* prefix)
2. .env file in the project root
3. Default values defined in InklineConfig

The generation service credential is the one exception to the prefix rule: it
is read from ``OPENAI_API_KEY`` (or ``INKLINE_OPENAI_API_KEY``).

Example .env file:
    OPENAI_API_KEY=sk-...
    INKLINE_MAX_UPLOAD_BYTES=8388608
    INKLINE_COMPRESSION_POLICY=adaptive
    INKLINE_REQUEST_TIMEOUT_SECONDS=120

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The instance is never mutated after startup; the FastAPI application reads it
once and injects it into the pipeline.

Usage Example
-------------
    from inkline.core.config import config

    print(config.max_upload_bytes)
    print(config.upload_dir)
"""

import tempfile
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_UPLOAD_BYTES = 8 * 1024 * 1024


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing at startup."""


class InklineConfig(BaseSettings):
    """Main configuration for Inkline.

    Attributes
    ----------
    Generation Service:
        openai_api_key : SecretStr | None
            Credential for the external image-generation service.  Required
            before the API starts serving requests.
        generation_model : str
            Model identifier passed to the image edit endpoint.

    Upload Handling:
        max_upload_bytes : int
            Hard ceiling on the total multipart body size.
        upload_dir : Path
            Directory for per-request temporary artifacts.
        strict_media_types : bool
            Reject uploads whose type is outside the JPEG/PNG/WebP allow-list.
            When False only undetectable types are rejected.

    Compression:
        compression_policy : Literal["adaptive", "fixed"]
            ``adaptive`` picks width/quality by upload size, ``fixed`` always
            uses the 768 px baseline.

    Server:
        request_timeout_seconds : float
            Upper bound on a single request's processing time.
        cors_allow_origins : list[str]
            Origins allowed to POST from a browser.
        server_host : str
        server_port : int
        log_level : str

    Notes
    -----
    - upload_dir is created automatically if it doesn't exist
    - To modify config, set environment variables and restart the application
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INKLINE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Generation service
    openai_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("INKLINE_OPENAI_API_KEY", "OPENAI_API_KEY", "openai_api_key"),
        description="API key for the image-generation service",
    )
    generation_model: str = Field(
        default="gpt-image-1",
        description="Model used for image edits",
    )

    # Upload handling
    max_upload_bytes: int = Field(
        default=DEFAULT_MAX_UPLOAD_BYTES,
        description="Maximum accepted multipart body size in bytes",
        gt=0,
    )
    upload_dir: Path = Field(
        default=Path(tempfile.gettempdir()) / "inkline-uploads",
        description="Directory for temporary upload and compression artifacts",
    )
    strict_media_types: bool = Field(
        default=True,
        description="Enforce the JPEG/PNG/WebP allow-list",
    )

    # Compression
    compression_policy: Literal["adaptive", "fixed"] = Field(
        default="adaptive",
        description="Width/quality selection policy",
    )

    # Server
    request_timeout_seconds: float = Field(
        default=120.0,
        description="Request-level processing timeout",
        gt=0,
    )
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the CORS middleware",
    )
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=3000,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level used by the CLI entry point",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the upload directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def require_api_key(self) -> str:
        """Return the generation service credential.

        Raises:
            ConfigurationError: If no key is configured.
        """
        if self.openai_api_key is None or not self.openai_api_key.get_secret_value():
            raise ConfigurationError(
                "OPENAI_API_KEY is not set; the generation service cannot be reached"
            )
        return self.openai_api_key.get_secret_value()


# Global configuration instance
config = InklineConfig()
