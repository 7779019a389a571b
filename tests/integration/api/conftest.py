from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.api.v1 import leads, matching, notifications, pipeline, proposals
from app.auth.jwt import create_access_token
from app.core.config import get_config
from app.main import app
from app.models import UserRole


@pytest.fixture
def client(monkeypatch, session_ctx):
    for module in (leads, matching, pipeline, proposals, notifications):
        monkeypatch.setattr(module, "get_db_session", session_ctx)
    return TestClient(app)


@pytest.fixture
def auth_header():
    def _header(user_id: str, role: UserRole | str = UserRole.ADMIN) -> dict[str, str]:
        role_value = role.value if isinstance(role, UserRole) else role
        token = create_access_token(user_id=user_id, role=role_value, secret=get_config().JWT_SECRET)
        return {"Authorization": f"Bearer {token}"}

    return _header
