"""
Application configuration and settings management
"""
import sys
from typing import List, Optional
from functools import lru_cache

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings

from drivehub.core.logging_config import logger


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "DriveHub"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"

    # Server
    PORT: int = 5000
    CORS_ORIGINS: List[str] = ["*"]
    RATE_LIMIT_PER_MINUTE: int = 150

    # Logging (stdout always, plus this file when set)
    LOG_FILE: Optional[str] = None

    # Database (required, no default)
    DATABASE_URL: str

    # File Upload
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB

    # AWS S3 (optional, local storage is used when keys are missing)
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    S3_BUCKET_NAME: str = "drivehub"

    # Bookings
    BOOKING_ID_PREFIX: str = "DH"
    BOOKING_ID_MAX_ATTEMPTS: int = 3
    BOOKINGS_LIST_LIMIT: int = 200

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"
    }

    @field_validator("DATABASE_URL")
    @classmethod
    def normalize_database_url(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("DATABASE_URL must not be empty")
        # Heroku/Render style URLs are not accepted by SQLAlchemy 1.4+
        return value.strip().replace("postgres://", "postgresql://", 1)

    @property
    def use_s3_storage(self) -> bool:
        return bool(self.AWS_ACCESS_KEY_ID and self.AWS_SECRET_ACCESS_KEY)


def _is_placeholder(val: Optional[str]) -> bool:
    placeholders = ["XXXX", "your-", "replace-"]
    if not val:
        return True
    return any(p in val for p in placeholders) or any(p in val.lower() for p in placeholders)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance with placeholder filtering"""
    s = Settings()

    if _is_placeholder(s.AWS_ACCESS_KEY_ID):
        s.AWS_ACCESS_KEY_ID = None
    if _is_placeholder(s.AWS_SECRET_ACCESS_KEY):
        s.AWS_SECRET_ACCESS_KEY = None

    return s


def load_settings_or_exit() -> Settings:
    """
    Build settings at process start.

    A broken configuration (most often a missing DATABASE_URL) is fatal:
    the process exits instead of serving requests it cannot fulfil.
    """
    try:
        return get_settings()
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        logger.critical(f"Invalid configuration, refusing to start. Problem fields: {missing}")
        sys.exit(1)
