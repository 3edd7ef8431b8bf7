"""Configuration management for destiny-cache."""

from __future__ import annotations

import json
from pathlib import Path

import structlog
from pydantic import BaseModel, Field, field_validator

logger = structlog.get_logger()

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "destiny-cache" / "config.json"


class ApiConfig(BaseModel):
    """Content API configuration."""

    base_url: str = Field(
        default="https://www.bungie.net",
        description="API host, definition paths are appended verbatim"
    )
    api_key: str | None = Field(default=None, description="Value for the X-API-Key header")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    language: str = Field(default="en", description="Content language to sync")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate base URL value."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Base URL must be http(s): {v}")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout value."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        """Validate language code."""
        if not v:
            raise ValueError("Language cannot be empty")
        return v


class RedisConfig(BaseModel):
    """Key-value store connection settings."""

    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    password: str = Field(default="", description="Redis password, empty for none")
    db: int = Field(default=0, description="Database index")
    protocol: int = Field(default=2, description="RESP protocol version")
    socket_timeout: float | None = Field(default=30.0, description="Per-command timeout in seconds")

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port value."""
        if not 0 < v < 65536:
            raise ValueError(f"Invalid port: {v}")
        return v

    @field_validator("db")
    @classmethod
    def validate_db(cls, v: int) -> int:
        """Validate database index."""
        if v < 0:
            raise ValueError("Database index must be non-negative")
        return v

    @field_validator("protocol")
    @classmethod
    def validate_protocol(cls, v: int) -> int:
        """Validate protocol version."""
        if v not in (2, 3):
            raise ValueError(f"Invalid protocol: {v}. Valid protocols: 2, 3")
        return v


class AppConfig(BaseModel):
    """Application configuration."""

    api: ApiConfig = Field(default_factory=ApiConfig, description="Content API settings")
    redis: RedisConfig = Field(default_factory=RedisConfig, description="Cache store settings")

    # Sync settings
    activity_mode: int = Field(
        default=4,
        description="Activity mode type kept when filtering activity definitions"
    )
    max_workers: int = Field(default=4, description="Concurrent definition downloads")
    deadline: float | None = Field(
        default=None,
        description="Overall run deadline in seconds, None for no deadline"
    )

    # Output settings
    output_format: str = Field(
        default="rich",
        description="Output format (rich, json, plain)"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @classmethod
    def load(cls, config_file: Path | None = None) -> AppConfig:
        """Load configuration from file.

        Args:
            config_file: Path to config file, uses default if None

        Returns:
            Application configuration
        """
        if config_file is None:
            config_file = DEFAULT_CONFIG_FILE

        if config_file.exists():
            with open(config_file) as f:
                data = json.load(f)
                return cls(**data)

        # Return defaults
        return cls()

    def save(self, config_file: Path | None = None) -> None:
        """Save configuration to file.

        Args:
            config_file: Path to config file, uses default if None
        """
        if config_file is None:
            config_file = DEFAULT_CONFIG_FILE

        config_file.parent.mkdir(parents=True, exist_ok=True)

        with open(config_file, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

        logger.info("config_saved", path=str(config_file))

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        """Validate worker count."""
        if v < 1:
            raise ValueError("Max workers must be at least 1")
        return v

    @field_validator("deadline")
    @classmethod
    def validate_deadline(cls, v: float | None) -> float | None:
        """Validate deadline value."""
        if v is not None and v <= 0:
            raise ValueError("Deadline must be positive")
        return v

    @field_validator("output_format")
    @classmethod
    def validate_output_format(cls, v: str) -> str:
        """Validate output format."""
        valid_formats = {"rich", "json", "plain"}
        if v not in valid_formats:
            raise ValueError(f"Invalid output format: {v}. Valid formats: {valid_formats}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Valid levels: {valid_levels}")
        return v
