"""Configuration module for the Mandap application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from app.core.exceptions import ConfigurationError

load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    DATABASE_URL: str
    DB_CONNECTIVITY_REQUIRED: bool
    JWT_SECRET: str
    JWT_ACCESS_TTL_MINUTES: int
    JWT_REFRESH_TTL_DAYS: int
    REDIS_URL: str
    CELERY_BROKER_URL: str
    CELERY_RESULT_BACKEND: str
    CELERY_TASK_ALWAYS_EAGER: bool
    API_HOST: str
    API_PORT: int
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str
    DEFAULT_TAXES_PERCENT: float
    BOARD_DEFAULT_BUDGET_MIN: int
    BOARD_DEFAULT_BUDGET_MAX: int
    PROPOSAL_DRAFT_VERSION_LIMIT: int
    PROPOSAL_DETAIL_VERSION_LIMIT: int
    LEADS_PAGE_SIZE: int

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=False)
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    config = Config(
        APP_NAME="Mandap",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./mandap.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"), default=(resolved_env == "production")
        ),
        JWT_SECRET=os.getenv("JWT_SECRET", "change_me_jwt_secret"),
        JWT_ACCESS_TTL_MINUTES=int(os.getenv("JWT_ACCESS_TTL_MINUTES", "15")),
        JWT_REFRESH_TTL_DAYS=int(os.getenv("JWT_REFRESH_TTL_DAYS", "14")),
        REDIS_URL=redis_url,
        CELERY_BROKER_URL=os.getenv("CELERY_BROKER_URL", redis_url),
        CELERY_RESULT_BACKEND=os.getenv("CELERY_RESULT_BACKEND", redis_url),
        CELERY_TASK_ALWAYS_EAGER=_as_bool(os.getenv("CELERY_TASK_ALWAYS_EAGER")),
        API_HOST=os.getenv("API_HOST", "0.0.0.0"),
        API_PORT=int(os.getenv("API_PORT", "8000")),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", ""),
        DEFAULT_TAXES_PERCENT=float(os.getenv("DEFAULT_TAXES_PERCENT", "18")),
        BOARD_DEFAULT_BUDGET_MIN=int(os.getenv("BOARD_DEFAULT_BUDGET_MIN", "500000")),
        BOARD_DEFAULT_BUDGET_MAX=int(os.getenv("BOARD_DEFAULT_BUDGET_MAX", "20000000")),
        PROPOSAL_DRAFT_VERSION_LIMIT=int(os.getenv("PROPOSAL_DRAFT_VERSION_LIMIT", "20")),
        PROPOSAL_DETAIL_VERSION_LIMIT=int(os.getenv("PROPOSAL_DETAIL_VERSION_LIMIT", "10")),
        LEADS_PAGE_SIZE=int(os.getenv("LEADS_PAGE_SIZE", "25")),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    if config.JWT_ACCESS_TTL_MINUTES < 1:
        raise ConfigurationError("JWT_ACCESS_TTL_MINUTES must be >= 1.")
    if config.JWT_REFRESH_TTL_DAYS < 1:
        raise ConfigurationError("JWT_REFRESH_TTL_DAYS must be >= 1.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if not 0 <= config.DEFAULT_TAXES_PERCENT <= 100:
        raise ConfigurationError("DEFAULT_TAXES_PERCENT must be between 0 and 100.")
    if config.BOARD_DEFAULT_BUDGET_MIN > config.BOARD_DEFAULT_BUDGET_MAX:
        raise ConfigurationError("BOARD_DEFAULT_BUDGET_MIN must not exceed BOARD_DEFAULT_BUDGET_MAX.")
    if config.PROPOSAL_DRAFT_VERSION_LIMIT < 1 or config.PROPOSAL_DETAIL_VERSION_LIMIT < 1:
        raise ConfigurationError("Proposal version limits must be >= 1.")
    if config.LEADS_PAGE_SIZE < 1:
        raise ConfigurationError("LEADS_PAGE_SIZE must be >= 1.")
    if config.is_production and "change_me" in config.JWT_SECRET:
        raise ConfigurationError("Production JWT_SECRET uses placeholder value.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
