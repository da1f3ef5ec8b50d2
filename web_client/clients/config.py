"""
Configuration for the records web client.
Uses Pydantic BaseSettings; values come from the environment or a .env file.
"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Medical Records Service API Configuration
    medrec_api_url: str = Field(
        default="http://localhost:8000",
        description="URL of the Medical Records Service API"
    )
    medrec_api_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Request timeout in seconds"
    )


settings = Settings()

MEDREC_API_URL = settings.medrec_api_url
MEDREC_API_TIMEOUT = settings.medrec_api_timeout
