"""Environment variable loading and validation."""

import os
from typing import Optional

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/job_board.db"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EnvironmentConfig:
    """Secrets and deployment-specific values read from the environment."""

    def __init__(
        self,
        jwt_secret: str,
        database_url: Optional[str] = None,
        log_level: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        self.jwt_secret = jwt_secret
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.log_level = log_level
        self.environment = environment or "local"


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Required:
    - JWT_SECRET: signing secret shared by HTTP and WebSocket authentication

    Optional:
    - DATABASE_URL: SQLAlchemy URL (default: sqlite:///./data/job_board.db)
    - LOG_LEVEL: overrides the config file log level
    - ENVIRONMENT: label attached to every log record (default: local)

    Returns:
        EnvironmentConfig with validated values

    Raises:
        ConfigurationError: If required variables are missing or invalid
    """
    errors = []

    jwt_secret = os.getenv("JWT_SECRET")
    database_url = os.getenv("DATABASE_URL")
    log_level = os.getenv("LOG_LEVEL")
    environment = os.getenv("ENVIRONMENT")

    if not jwt_secret or not jwt_secret.strip():
        errors.append("Missing required environment variable: JWT_SECRET")
    elif len(jwt_secret.strip()) < 16:
        errors.append("JWT_SECRET is too short. Use at least 16 characters.")

    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if database_url is not None and not database_url.strip():
        errors.append("DATABASE_URL is set but empty")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in JWT_SECRET",
                "Generate a secret with: python -c 'import secrets; print(secrets.token_urlsafe(32))'",
            ],
        )

    return EnvironmentConfig(
        jwt_secret=jwt_secret.strip(),
        database_url=database_url.strip() if database_url else None,
        log_level=log_level.upper() if log_level else None,
        environment=environment,
    )
