"""
Environment configuration for the hostel complaints service.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    @staticmethod
    def get_secret_key_default() -> str:
        """Generate a default secret key if not provided"""
        import secrets
        import string
        alphabet = string.ascii_letters + string.digits
        return ''.join(secrets.choice(alphabet) for _ in range(32))

    # Application configuration
    APP_NAME: str = "Hostel Complaints Service"
    API_VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    CORS_ORIGINS: List[str] = Field(default=["*"])

    # Database configuration - support both individual fields and DATABASE_URL
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DB_NAME: str = "hostel_complaints"
    DB_POOL_SIZE: int = 20
    DB_POOL_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # Security configuration
    JWT_SECRET_KEY: str = Field(default_factory=lambda: Settings.get_secret_key_default())
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    CLOSE_ELEVATED_ROLES: List[str] = Field(default=["super_admin"])

    # File storage
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB

    # Notifications
    ADMIN_NOTIFICATION_RECIPIENTS: List[str] = Field(default_factory=list)
    NOTIFICATION_WEBHOOK_URL: Optional[str] = None
    NOTIFICATION_TIMEOUT_SECONDS: float = 3.0
    NOTIFICATION_MAX_WORKERS: int = 4

    # Assignment defaults used when the configuration record is first created
    DEFAULT_MAX_WORKLOAD: int = 5
    DEFAULT_EFFICIENCY_THRESHOLD: int = 70

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    LOG_FILE: Optional[str] = None
    ENABLE_STRUCTURED_LOGGING: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    # Validators
    @field_validator('CORS_ORIGINS', 'ADMIN_NOTIFICATION_RECIPIENTS', 'CLOSE_ELEVATED_ROLES', mode='before')
    @classmethod
    def parse_string_list(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse list settings given as a JSON array or comma separated string"""
        if isinstance(v, str):
            if v.startswith('[') and v.endswith(']'):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the log level name"""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return level

    def get_database_url(self) -> str:
        """Construct database URL from components or use provided URL"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    def is_sqlite(self) -> bool:
        """Check whether the configured database is SQLite"""
        return self.get_database_url().startswith("sqlite")

    def engine_options(self) -> Dict[str, Any]:
        """Keyword arguments for create_engine matching the database backend"""
        if self.is_sqlite():
            return {"connect_args": {"check_same_thread": False}, "echo": self.DB_ECHO}
        return {
            "pool_pre_ping": True,
            "pool_size": self.DB_POOL_SIZE,
            "max_overflow": self.DB_POOL_OVERFLOW,
            "pool_recycle": 3600,
            "echo": self.DB_ECHO,
        }

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
