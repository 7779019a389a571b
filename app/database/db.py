"""Engine and session wiring shared by the API, workers and scripts."""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import get_config

logger = logging.getLogger(__name__)

config = get_config()
DATABASE_URL = config.DATABASE_URL

# Pool settings only apply to server databases; SQLite uses the default pool.
SERVER_POOL_OPTIONS: dict[str, Any] = {
    "pool_pre_ping": True,
    "pool_recycle": 3600,
    "pool_size": 10,
    "max_overflow": 20,
}


def _engine_options(database_url: str) -> dict[str, Any]:
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return dict(SERVER_POOL_OPTIONS)


def _bind(database_url: str) -> None:
    global DATABASE_URL, engine, SessionLocal
    DATABASE_URL = database_url
    engine = create_engine(database_url, echo=config.DEBUG, **_engine_options(database_url))
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


_bind(DATABASE_URL)


def get_engine():
    return engine


def get_active_database_url() -> str:
    """URL the engine is currently bound to."""
    return DATABASE_URL


def reset_engine(database_url: str | None = None) -> None:
    """Rebuild engine and session factory, optionally against a new URL."""
    _bind(database_url or DATABASE_URL)


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def verify_database_connection() -> bool:
    """Run a trivial query; False (and an error log) when the database is unreachable."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as exc:  # pragma: no cover - exercised in deployment.
        logger.error(
            "database.connection_failed",
            extra={
                "event": "database.connection_failed",
                "database_url_scheme": DATABASE_URL.split("://", 1)[0],
                "reason": str(exc),
            },
        )
        return False
    return True
