"""Session handling shared by every domain service."""

from __future__ import annotations

from typing import Any, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.core.exceptions import DatabaseError, NotFoundError
from app.database import db as db_module

ModelT = TypeVar("ModelT")


class BaseService:
    """Wraps one SQLAlchemy session; services own their commits."""

    def __init__(self, db: Session | None = None) -> None:
        self.db = db or db_module.SessionLocal()

    def commit(self) -> None:
        """Commit, rolling back first when the commit fails."""
        try:
            self.db.commit()
        except OperationalError as exc:
            self.db.rollback()
            raise DatabaseError("Database unavailable while committing.") from exc
        except Exception:
            self.db.rollback()
            raise

    def rollback(self) -> None:
        self.db.rollback()

    def get_or_404(self, model: type[ModelT], ident: Any, label: str | None = None) -> ModelT:
        row = self.db.query(model).filter(model.id == ident).first()
        if row is None:
            raise NotFoundError(f"{label or model.__name__} {ident} not found")
        return row
