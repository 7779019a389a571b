"""Celery application for card materialization and notification fan-out."""

from __future__ import annotations

from celery import Celery

from app.core.config import get_config

config = get_config()

celery_app = Celery(
    "mandap",
    broker=config.CELERY_BROKER_URL,
    backend=config.CELERY_RESULT_BACKEND,
    include=["app.tasks.matching_tasks", "app.tasks.notification_tasks"],
)
celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # Eager mode runs tasks inline, for local development without a broker.
    task_always_eager=config.CELERY_TASK_ALWAYS_EAGER,
)
