"""
Environment configuration for the seminar hall booking service.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application configuration
    APP_NAME: str = Field(default="Seminar Hall Booking", alias="PROJECT_NAME")
    API_VERSION: str = Field(default="v1", alias="PROJECT_VERSION")
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = Field(default=["*"], alias="BACKEND_CORS_ORIGINS")

    # Relational store
    DATABASE_URL: str = "sqlite:///./hallbook.db"
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_POOL_OVERFLOW: int = 10

    # Document store for audit logs; required at startup
    MONGODB_URI: Optional[str] = None
    MONGODB_DB: str = "hallbook_logs"
    AUDIT_LOG_MAX_RETRIES: int = 2
    AUDIT_LOG_WORKERS: int = 2

    # Booking lifecycle scheduler
    SCHEDULER_ENABLED: bool = True
    AUTO_REJECT_INTERVAL_SECONDS: int = 300
    AUTO_COMPLETE_INTERVAL_SECONDS: int = 300
    AUTO_REJECT_GRACE_MINUTES: int = 0
    CRON_SECRET: Optional[str] = None

    # Email configuration
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = Field(default=None, alias="SMTP_USERNAME")
    SMTP_PASSWORD: Optional[str] = None
    SMTP_TLS: bool = True
    EMAIL_FROM_ADDRESS: str = Field(default="no-reply@hallbook.local", alias="FROM_EMAIL")
    APP_BASE_URL: str = "http://localhost:3000"

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS_ORIGINS from string to list"""
        if isinstance(v, str):
            # Handle JSON string format from .env
            if v.startswith('[') and v.endswith(']'):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
