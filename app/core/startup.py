"""Process bootstrap: logging first, then fail-fast runtime checks."""

from __future__ import annotations

import logging

from app.core.config import get_config
from app.core.logging_config import configure_logging
from app.database.db import get_active_database_url, verify_database_connection

logger = logging.getLogger(__name__)


def _warn(event: str, **fields) -> None:
    logger.warning(event, extra={"event": event, **fields})


def validate_startup_config() -> None:
    """Raise when a required dependency is missing; warn about risky but survivable setups."""
    config = get_config()
    if not verify_database_connection():
        if config.DB_CONNECTIVITY_REQUIRED:
            raise RuntimeError("Database connectivity check failed.")
        _warn("startup.database.connectivity_optional_failed")

    scheme = get_active_database_url().split("://", 1)[0]
    if config.is_production:
        if scheme == "sqlite":
            _warn("startup.production.sqlite_detected")
        if config.CELERY_TASK_ALWAYS_EAGER:
            _warn("startup.production.celery_eager")

    logger.info(
        "startup.config.validated",
        extra={
            "event": "startup.config.validated",
            "env": config.ENV,
            "database_url_scheme": scheme,
            "celery_eager": config.CELERY_TASK_ALWAYS_EAGER,
        },
    )


def bootstrap() -> None:
    configure_logging()
    validate_startup_config()
