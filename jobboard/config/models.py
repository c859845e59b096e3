"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class ServerConfig(BaseModel):
    """HTTP / WebSocket listener settings."""

    host: str = Field("0.0.0.0", min_length=1, description="Interface to bind")
    port: int = Field(3000, ge=1, le=65535, description="TCP port to listen on")
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the API from a browser",
    )

    @field_validator("cors_origins")
    @classmethod
    def strip_origins(cls, v: List[str]) -> List[str]:
        """Drop blank origins and surrounding whitespace."""
        return [origin.strip() for origin in v if origin and origin.strip()]


class AuthConfig(BaseModel):
    """Bearer token settings. The signing secret itself comes from JWT_SECRET."""

    algorithm: str = Field("HS256", description="JWT signing algorithm")
    token_ttl: str = Field("7d", description="Lifetime of issued tokens")

    token_ttl_seconds: Optional[int] = None

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        """Only HMAC algorithms make sense with a shared secret."""
        normalized = v.strip().upper()
        if normalized not in {"HS256", "HS384", "HS512"}:
            raise ValueError(f"Unsupported algorithm '{v}'. Use HS256, HS384 or HS512")
        return normalized

    @model_validator(mode="after")
    def compute_ttl(self):
        try:
            self.token_ttl_seconds = parse_duration(self.token_ttl)
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return self


class FeedConfig(BaseModel):
    """Periodic import of externally published jobs."""

    enabled: bool = Field(False, description="Run the importer on a schedule")
    source: Optional[str] = Field(
        None, description="Path to a JSON file or an http(s) URL returning a JSON array"
    )
    interval: str = Field("5m", description="Time between imports")
    request_timeout: int = Field(30, ge=5, le=300, description="HTTP timeout in seconds")

    interval_seconds: Optional[int] = None

    @field_validator("source")
    @classmethod
    def strip_source(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    @model_validator(mode="after")
    def compute_interval(self):
        try:
            seconds = parse_duration(self.interval)
            validate_duration_range(seconds, min_seconds=60, max_seconds=86400, label="Feed interval")
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        self.interval_seconds = seconds
        return self


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the job board service."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def validate_feed_source(self):
        """An enabled feed needs somewhere to read from."""
        if self.feed.enabled and not self.feed.source:
            raise ValueError("feed.source is required when feed.enabled is true")
        return self
