"""
Configuration module for the Medical Records Service API.
Uses Pydantic BaseSettings for validation - app fails fast on malformed config.
"""
import logging
import os
from pathlib import Path
from typing import List

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every field can be overridden with the upper-cased environment variable
    of the same name (e.g. MEDREC_SVC_PORT=9000).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database Configuration
    medrec_svc_db_dir: str = Field(default="data", description="Database directory")
    medrec_svc_db_file: str = Field(default="medical_records.db", description="Database filename")
    medrec_svc_db_busy_timeout: int = Field(default=5000, description="SQLite busy timeout in milliseconds")

    # API Configuration
    medrec_svc_host: str = Field(default="0.0.0.0", description="API host")
    medrec_svc_port: int = Field(default=8000, description="API port")
    medrec_svc_reload: bool = Field(default=False, description="Enable hot reload")
    medrec_svc_cors_origins: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    # Session Configuration
    medrec_svc_session_cookie: str = Field(default="medrec_session", description="Session cookie name")
    medrec_svc_session_ttl: int = Field(default=86400, description="Session lifetime in seconds")
    medrec_svc_session_cookie_secure: bool = Field(default=False, description="Send session cookie over HTTPS only")

    # Password hashing
    medrec_svc_password_iterations: int = Field(default=260000, description="PBKDF2 iteration count")

    @model_validator(mode="after")
    def validate_session_settings(self) -> "Settings":
        """Reject session settings that would make login impossible."""
        if self.medrec_svc_session_ttl <= 0:
            raise ValueError("MEDREC_SVC_SESSION_TTL must be a positive number of seconds")
        if not self.medrec_svc_session_cookie_secure:
            logger.warning(
                "MEDREC_SVC_SESSION_COOKIE_SECURE is disabled - session cookies will be sent over plain HTTP"
            )
        return self

    @property
    def database_path(self) -> str:
        """Full path of the SQLite database file."""
        return os.path.join(self.medrec_svc_db_dir, self.medrec_svc_db_file)

    @property
    def cors_origins_list(self) -> List[str]:
        """Get the allowed CORS origins as a list."""
        return [o.strip() for o in self.medrec_svc_cors_origins.split(",") if o.strip()]

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        Path(self.medrec_svc_db_dir).mkdir(parents=True, exist_ok=True)


# Create global settings instance - fails fast if config is invalid
settings = Settings()

# Ensure directories exist on import
settings.ensure_directories()

# Module-level exports for existing code
DATABASE_DIR = settings.medrec_svc_db_dir
DATABASE_FILE = settings.medrec_svc_db_file
DATABASE_PATH = settings.database_path
DATABASE_BUSY_TIMEOUT = settings.medrec_svc_db_busy_timeout

API_HOST = settings.medrec_svc_host
API_PORT = settings.medrec_svc_port
API_RELOAD = settings.medrec_svc_reload
CORS_ORIGINS = settings.cors_origins_list

SESSION_COOKIE_NAME = settings.medrec_svc_session_cookie
SESSION_TTL_SECONDS = settings.medrec_svc_session_ttl
SESSION_COOKIE_SECURE = settings.medrec_svc_session_cookie_secure

PASSWORD_ITERATIONS = settings.medrec_svc_password_iterations
