"""
Application configuration management.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Application
    DEBUG: bool = False
    APP_NAME: str = "Site Content Service"

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://cms:cms@db:5432/cms"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # Multi-site
    DEFAULT_SITE_ID: int = 1
    SITE_HEADER: str = "X-Site-Id"
    DEFAULT_SITE_NAME: str = "Default"

    # URLs
    USE_HIERARCHICAL_URLS: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    LOG_DIR: Optional[str] = None


settings = Settings()
