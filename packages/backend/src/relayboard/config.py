"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with RELAYBOARD_ prefix.
Credentials are read once at startup and never change for the lifetime of
the process.

Learn: Missing dashboard credentials must not crash the server. The
validator substitutes the documented insecure default ("admin") and logs
a loud warning instead.
"""

from pathlib import Path
from typing import Optional

import structlog
from pydantic import model_validator
from pydantic_settings import BaseSettings

logger = structlog.get_logger()

DEFAULT_CREDENTIAL = "admin"
PACKAGE_STATIC_DIR = Path(__file__).parent / "static"


class Settings(BaseSettings):
    """All app configuration. Set via RELAYBOARD_* env vars."""

    # Dashboard credentials
    dashboard_username: Optional[str] = None
    dashboard_password: Optional[str] = None

    # Static API key for programmatic access (unset = API key auth disabled)
    api_key: Optional[str] = None

    # Sessions
    session_duration_hours: int = 24
    login_failure_delay_seconds: float = 1.0

    # Webhook provider (CRC challenge + payload signatures)
    twitter_consumer_secret: str = ""

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/messages.db"

    # Redis (rate limiting only)
    redis_url: str = "redis://localhost:6379/0"

    # Pages and static assets
    static_dir: Path = PACKAGE_STATIC_DIR

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Rate limiting
    rate_limit_rpm: int = 100  # requests per minute per IP
    rate_limit_auth_rpm: int = 10  # stricter limit for the login endpoint

    model_config = {"env_prefix": "RELAYBOARD_"}

    @model_validator(mode="after")
    def apply_credential_defaults(self):
        """Fall back to the insecure default for unset credentials."""
        if not self.dashboard_username:
            logger.warning(
                "config.default_username",
                message=(
                    "RELAYBOARD_DASHBOARD_USERNAME is not set. Using default "
                    "username 'admin'. Please set a secure username!"
                ),
            )
            self.dashboard_username = DEFAULT_CREDENTIAL
        if not self.dashboard_password:
            logger.warning(
                "config.default_password",
                message=(
                    "RELAYBOARD_DASHBOARD_PASSWORD is not set. Using default "
                    "password 'admin'. Please set a secure password!"
                ),
            )
            self.dashboard_password = DEFAULT_CREDENTIAL
        if self.api_key == "":
            self.api_key = None
        return self

    @property
    def session_duration_seconds(self) -> int:
        return self.session_duration_hours * 60 * 60


# Singleton — import this everywhere
settings = Settings()
