from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Seller Operations Dashboard"
    ENVIRONMENT: str = "local"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./seller_ops.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_SQL: bool = False

    # ==============================
    # Security (hosted auth provider tokens)
    # ==============================
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = "authenticated"
    JWT_ISSUER: Optional[str] = None

    # ==============================
    # LLM completion API
    # ==============================
    LLM_API_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    LLM_API_KEY: Optional[str] = None
    LLM_MODEL: str = "deepseek/deepseek-chat-v3-0324"
    LLM_TIMEOUT_SECONDS: int = 60
    SITE_URL: str = "http://localhost:8000"
    LLM_APP_TITLE: str = "Seller Operations Dashboard"

    # ==============================
    # Marketplace
    # ==============================
    PLATFORM_FEE_RATE: float = 0.08

    # ==============================
    # Migrations
    # ==============================
    MIGRATIONS_DIR: str = "migrations"

    # ==============================
    # Scheduler
    # ==============================
    AUTO_REORDER_SCHEDULER_ENABLED: bool = False
    AUTO_REORDER_RUN_TIME: str = "06:00"
    SCHEDULER_POLL_SECONDS: int = 30
    SCHEDULER_TZ: str = "local"


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
