"""
Application configuration settings for the guardrails engine.
"""
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import validator


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class StorageBackend(str, Enum):
    FILE = "file"
    DATABASE = "database"


class Settings(BaseSettings):
    # Application
    app_name: str = "Compliance Guardrails"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: LogLevel = LogLevel.INFO
    log_file: Optional[str] = None

    # Guardrail log storage
    storage_backend: StorageBackend = StorageBackend.FILE
    storage_path: str = "./data/guardrail_logs"
    database_url: str = "sqlite+aiosqlite:///./data/guardrails.db"
    database_echo: bool = False

    # Policy tables and thresholds (YAML or JSON); built-in defaults when unset
    config_path: Optional[str] = None

    @validator("log_level", pre=True)
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @validator("storage_backend", pre=True)
    def normalize_storage_backend(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v

    class Config:
        env_file = ".env"
        env_prefix = "GUARDRAILS_"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()
