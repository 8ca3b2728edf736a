from unittest.mock import AsyncMock
from uuid import uuid4

from fastapi.testclient import TestClient

from main import create_app
from thirds.api.deps import get_auth_provider, get_schedule_repository, get_task_repository
from thirds.infrastructure.local.mock_auth import MockAuthProvider


def _client(auth_enabled: bool = True) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_auth_provider] = lambda: MockAuthProvider(enabled=auth_enabled)
    app.dependency_overrides[get_schedule_repository] = lambda: AsyncMock()
    app.dependency_overrides[get_task_repository] = lambda: AsyncMock()
    return TestClient(app)


def test_health_check() -> None:
    response = _client().get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_missing_authorization_header_is_unauthorized() -> None:
    response = _client().get("/api/schedule/days/Monday")

    assert response.status_code == 401


def test_malformed_authorization_header_is_unauthorized() -> None:
    response = _client().get("/api/schedule/days/Monday", headers={"Authorization": "Token abc"})

    assert response.status_code == 401


def test_preview_over_http() -> None:
    body = {
        "sessions": [
            {"energy_type": "High", "start_time": "06:00", "end_time": "13:00"},
            {"energy_type": "Medium", "start_time": "12:00", "end_time": "18:00"},
            {"energy_type": "Low", "start_time": "18:00", "end_time": "22:00"},
        ]
    }

    response = _client().post(
        "/api/schedule/blocks/preview", json=body, headers={"Authorization": "Bearer test_user"}
    )

    assert response.status_code == 200
    assert response.json()["overlaps"] == [["High", "Medium"]]


def test_patch_task_with_null_duration_is_unprocessable() -> None:
    app = create_app()
    task_repo = AsyncMock()
    app.dependency_overrides[get_auth_provider] = lambda: MockAuthProvider(enabled=True)
    app.dependency_overrides[get_schedule_repository] = lambda: AsyncMock()
    app.dependency_overrides[get_task_repository] = lambda: task_repo

    response = TestClient(app).patch(
        f"/api/tasks/{uuid4()}",
        json={"duration_minutes": None},
        headers={"Authorization": "Bearer test_user"},
    )

    assert response.status_code == 422
    task_repo.update.assert_not_awaited()
