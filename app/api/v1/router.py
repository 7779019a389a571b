"""Root API router for v1 endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from app.api.v1 import health, leads, matching, notifications, pipeline, proposals
from app.core.config import get_config

api_router = APIRouter(prefix=get_config().API_PREFIX)
api_router.include_router(health.router)
api_router.include_router(leads.router)
api_router.include_router(matching.router)
api_router.include_router(pipeline.router)
api_router.include_router(proposals.router)
api_router.include_router(notifications.router)


def get_api_router() -> APIRouter:
    return api_router
