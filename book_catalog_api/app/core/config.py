"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Most fields have defaults; the store location
(``DATABASE_URL``) and the token signing credential (``SECRET_KEY``)
do not, and ``Settings.validate`` refuses to start the application
without them.
"""

import os
from dataclasses import dataclass


class ConfigurationError(RuntimeError):
    """Raised when required settings are missing at startup."""


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Book Catalog API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    # Optional path of a log file in addition to the console handler.
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Path to the SQLite database.  A relative path is resolved
    # relative to the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "")

    def validate(self) -> None:
        """Fail fast when the store endpoint or credential is missing."""
        missing = [
            name
            for name, value in (
                ("DATABASE_URL", self.database_url),
                ("SECRET_KEY", self.secret_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                "Missing required environment variables: " + ", ".join(missing)
            )


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must therefore be set before importing this module.
settings = Settings()
