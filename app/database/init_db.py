"""Bring the database schema to the latest alembic revision."""

import logging
from datetime import datetime, timezone
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig

import app.database.db as db_module
from app.core.startup import bootstrap

logger = logging.getLogger(__name__)
PROJECT_ROOT = Path(__file__).resolve().parents[2]
SQLITE_PREFIX = "sqlite:///"


def alembic_config(database_url: str) -> AlembicConfig:
    cfg = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def sqlite_file(database_url: str) -> Path | None:
    """Filesystem path behind a file-backed SQLite URL, relative paths anchored at the project root."""
    if not database_url.startswith(SQLITE_PREFIX):
        return None
    location = database_url[len(SQLITE_PREFIX) :]
    if location in {"", ":memory:"}:
        return None
    path = Path(location)
    return path if path.is_absolute() else (PROJECT_ROOT / path).resolve()


def _set_aside_sqlite_file(database_url: str) -> Path | None:
    """Move an incompatible local database out of the way and rebind the engine."""
    path = sqlite_file(database_url)
    db_module.get_engine().dispose()
    backup = None
    if path is not None and path.exists():
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        backup = path.with_name(f"{path.stem}.backup_{stamp}{path.suffix}")
        path.replace(backup)
    db_module.reset_engine(database_url)
    return backup


def init_db() -> None:
    bootstrap()
    url = db_module.get_active_database_url()
    try:
        command.upgrade(alembic_config(url), "head")
    except Exception as exc:
        # Local SQLite files from older schemas are disposable; servers are not.
        if not url.startswith(SQLITE_PREFIX):
            raise
        backup = _set_aside_sqlite_file(url)
        logger.warning(
            "database.sqlite.rebuilt",
            extra={"event": "database.sqlite.rebuilt", "backup_path": str(backup) if backup else None, "reason": str(exc)},
        )
        command.upgrade(alembic_config(url), "head")

    logger.info("database.schema.ready", extra={"event": "database.schema.ready", "database_url_scheme": url.split("://", 1)[0]})


if __name__ == "__main__":
    init_db()
