"""
Configuration settings for the datasource store.
Values are read from the environment or a .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Datasource Store"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Database
    DATABASE_URL: str = "sqlite:///./datasource_store.db"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600
    DATABASE_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json, text
    LOG_FILE: Optional[str] = None

    # Monitoring
    METRICS_ENABLED: bool = True

    # Datasource uid generation
    DATASOURCE_UID_MAX_ATTEMPTS: int = 3
    DATASOURCE_UID_LENGTH: int = 9

    # Key for the secure_json_data sidecar (urlsafe base64 Fernet key)
    SECURE_JSON_KEY: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )


# Create global settings instance
settings = Settings()

# Environment-specific overrides
if settings.ENVIRONMENT == "production":
    settings.DEBUG = False
    settings.LOG_LEVEL = "WARNING"
    settings.DATABASE_ECHO = False
elif settings.ENVIRONMENT == "test":
    settings.DATABASE_URL = "sqlite://"
    settings.METRICS_ENABLED = False
