"""Common schema module."""

from __future__ import annotations

from pydantic import BaseModel


class QueuedResponse(BaseModel):
    status: str = "queued"
    task_id: str | None = None
